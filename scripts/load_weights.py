"""
Load the bundled weights asset for one game from the command line.

    python -m scripts.load_weights poe1
    python -m scripts.load_weights poe1 --force --refresh-leagues
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import build_engine, build_session_maker
from core.exceptions import LeagueFetchError, PersistenceError
from core.logging import setup_logging
from ingestion.extractors.asset_source import BundledAssetSource
from ingestion.extractors.league_extractor import LeagueDirectoryFetcher
from ingestion.loaders.league_repository import LeagueDirectoryRepository
from ingestion.service import WeightsService
from models.base import Game

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Load drop weights for a game")
    parser.add_argument("game", choices=[game.value for game in Game])
    parser.add_argument("--force", action="store_true", help="Re-parse even if version and league are unchanged")
    parser.add_argument("--refresh-leagues", action="store_true", help="Refresh the league directory first")
    parser.add_argument("--asset-dir", default=None, help=f"Asset directory (default: {settings.ASSET_DIR})")
    return parser


async def load_weights(game: Game, force: bool = False, refresh_leagues: bool = False, asset_dir: str = None) -> int:
    """Returns a process exit code."""
    engine = build_engine(settings.DATABASE_URL)
    session_factory = build_session_maker(engine)

    try:
        if refresh_leagues:
            async with session_factory() as session:
                try:
                    await LeagueDirectoryFetcher(session).refresh(game)
                except (LeagueFetchError, PersistenceError) as e:
                    logger.warning(f"[{game.value}] League refresh failed, using cached list: {e}")

        service = WeightsService(
            session_factory=session_factory,
            asset_source=BundledAssetSource(asset_dir),
            league_directory_factory=LeagueDirectoryRepository,
        )
        result = await service.load(game, force=force)
    finally:
        await engine.dispose()

    if not result.success:
        logger.error(f"[{game.value}] Load failed: {result.error}")
        return 1

    if result.skipped:
        logger.info(f"[{game.value}] Up to date: {result.card_count} items for league \"{result.league}\"")
    elif result.card_count:
        logger.info(f"[{game.value}] Loaded {result.card_count} items for league \"{result.league}\"")
    else:
        logger.info(f"[{game.value}] No weights asset for this game")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    return asyncio.run(load_weights(
        Game(args.game),
        force=args.force,
        refresh_leagues=args.refresh_leagues,
        asset_dir=args.asset_dir,
    ))


if __name__ == "__main__":
    sys.exit(main())
