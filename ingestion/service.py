"""
Drop-weights service: the entry point other code uses to load and query weights.

Each call opens its own session. Loads are serialised per game with an
asyncio.Lock so the scheduler and an HTTP reload can't race on the same
game's writes.
"""

import asyncio
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import logging

from ingestion.extractors.asset_source import AssetSource
from ingestion.loaders.weights_repository import WeightsRepository
from ingestion.notifier import RefreshNotifier
from ingestion.runner import WeightLoadRunner
from ingestion.transformers.classifier import RarityClassifier, build_classifier
from ingestion.transformers.league_resolver import LeagueDirectory
from models.base import Game, utcnow
from schemas.weights import ItemWeightRecord, LoadResult, WeightStatus
from core.config import settings

logger = logging.getLogger(__name__)


class WeightsService:
    """
    Load / Status / Weights / BossItems.

    Collaborators are injected; there is no module-level instance.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        asset_source: AssetSource,
        notifier: Optional[RefreshNotifier] = None,
        classifier: Optional[RarityClassifier] = None,
        league_directory_factory: Optional[Callable[[AsyncSession], LeagueDirectory]] = None,
        app_version: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.asset_source = asset_source
        self.notifier = notifier or RefreshNotifier()
        self.classifier = classifier or build_classifier()
        self.league_directory_factory = league_directory_factory
        self.app_version = app_version or settings.APP_VERSION
        self.clock = clock
        self._locks: Dict[Game, asyncio.Lock] = {}

    def _lock_for(self, game: Game) -> asyncio.Lock:
        if game not in self._locks:
            self._locks[game] = asyncio.Lock()
        return self._locks[game]

    # ========================================================================
    # Load
    # ========================================================================

    async def load(
        self,
        game: Union[Game, str],
        force: bool = False,
        app_version: Optional[str] = None,
        now: Optional[datetime] = None,
        active_league: Optional[str] = None,
    ) -> LoadResult:
        """
        Load (or re-load) the weights asset for a game.

        Args:
            game: Game to load
            force: Bypass the version/league check and always re-parse
            app_version: Defaults to the configured APP_VERSION
            now: Defaults to the service clock
            active_league: Caller's selected league, for diagnostics only
        """
        game = Game(game)

        async with self._lock_for(game):
            async with self.session_factory() as session:
                runner = WeightLoadRunner(
                    db_session=session,
                    asset_source=self.asset_source,
                    notifier=self.notifier,
                    classifier=self.classifier,
                    league_directory=(
                        self.league_directory_factory(session)
                        if self.league_directory_factory else None
                    ),
                )
                return await runner.run(
                    game,
                    force=force,
                    app_version=app_version or self.app_version,
                    now=now or self.clock(),
                    active_league=active_league,
                )

    async def initialize(self, games: Iterable[Game] = tuple(Game)) -> Dict[Game, LoadResult]:
        """
        Startup load for every game without forcing.

        A failure for one game is logged and does not stop the others.
        """
        results = {}
        for game in games:
            result = await self.load(game, force=False)
            results[game] = result

            if not result.success:
                logger.error(f"[{game.value}] Failed to load weights during init: {result.error}")
            elif result.card_count > 0:
                logger.info(f'[{game.value}] Loaded {result.card_count} items for league "{result.league}"')
            else:
                logger.info(f"[{game.value}] No weights data available (no-op)")
        return results

    # ========================================================================
    # Queries
    # ========================================================================

    async def status(self, game: Union[Game, str]) -> WeightStatus:
        game = Game(game)
        async with self.session_factory() as session:
            metadata = await WeightsRepository(session).get_metadata(game)

        if metadata is None:
            return WeightStatus(has_data=False)

        return WeightStatus(
            has_data=True,
            last_loaded_at=metadata.loaded_at,
            card_count=metadata.card_count,
            league=metadata.league,
            app_version=metadata.app_version,
        )

    async def weights(self, game: Union[Game, str], league: str) -> List[ItemWeightRecord]:
        """Weights for the league, falling back to the last loaded league."""
        game = Game(game)
        async with self.session_factory() as session:
            repository = WeightsRepository(session)
            return await self._with_fallback(repository, repository.get_weights, game, league)

    async def boss_items(self, game: Union[Game, str], league: str) -> List[ItemWeightRecord]:
        """Boss-exclusive items for the league, with the same fallback."""
        game = Game(game)
        async with self.session_factory() as session:
            repository = WeightsRepository(session)
            return await self._with_fallback(repository, repository.get_boss_items, game, league)

    @staticmethod
    async def _with_fallback(repository: WeightsRepository, query, game: Game, league: str):
        # The asset usually lags a new league; serve its league until it catches up
        rows = await query(game, league)
        if rows:
            return rows

        metadata = await repository.get_metadata(game)
        if metadata is None or metadata.league == league:
            return []

        logger.debug(
            f'[{game.value}] No weights for league "{league}", '
            f'falling back to "{metadata.league}"'
        )
        return await query(game, metadata.league)
