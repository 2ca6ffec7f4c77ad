# ============================================================================
# File: ingestion/runner.py
# Description: Weights load orchestrator
# ============================================================================
"""
Weights load runner - sequences one load of the bundled weights asset.

States (linear, one branch):

    IDLE → RESOLVING_ASSET → READING → PARSING → RESOLVING_LEAGUE
         → CHECKING_VERSION → { SKIPPED
                              | CLASSIFYING → PERSISTING → SYNCING_FLAGS → NOTIFYING }
         → IDLE

Any failure moves to FAILED and is returned as a LoadResult with
success=False; nothing escapes as an exception and nothing is written.

The runner holds no locks. Callers must not run two loads for the same
game at once (WeightsService serialises them per game).
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ingestion.extractors.asset_source import AssetSource
from ingestion.extractors.csv_extractor import parse_weights_csv
from ingestion.loaders.league_repository import LeagueDirectoryRepository
from ingestion.loaders.weights_repository import WeightsRepository
from ingestion.notifier import RefreshNotifier
from ingestion.transformers.classifier import RarityClassifier, build_classifier
from ingestion.transformers.league_resolver import LeagueDirectory, LeagueResolver
from models.base import Game, LoadState
from schemas.weights import LoadResult, UpsertWeightRow
from core.exceptions import (
    AssetReadError,
    ParseError,
    PersistenceError,
    WeightsException,
)

logger = logging.getLogger(__name__)


class WeightLoadRunner:
    """
    Weights load orchestrator.

    Responsibilities:
    - Resolve and read the asset, parse it off the event loop
    - Resolve the header league label to its canonical name
    - Skip the write tail when app version and league are unchanged
    - Classify, persist weights + metadata, sync from_boss flags (one transaction)
    - Notify listeners once per successful load
    """

    def __init__(
        self,
        db_session: AsyncSession,
        asset_source: AssetSource,
        notifier: RefreshNotifier,
        classifier: Optional[RarityClassifier] = None,
        league_directory: Optional[LeagueDirectory] = None,
    ):
        self.db = db_session
        self.asset_source = asset_source
        self.notifier = notifier
        self.classifier = classifier or build_classifier()
        self.repository = WeightsRepository(db_session)
        self.league_resolver = LeagueResolver(
            league_directory or LeagueDirectoryRepository(db_session)
        )
        self.state = LoadState.IDLE
        self.history: List[LoadState] = []

    def _enter(self, state: LoadState):
        self.state = state
        self.history.append(state)

    async def run(
        self,
        game: Game,
        force: bool,
        app_version: str,
        now: datetime,
        active_league: Optional[str] = None,
    ) -> LoadResult:
        """
        Run one load for a game.

        Args:
            game: Game to load
            force: Bypass the version/league check and always write
            app_version: Running application version, recorded in metadata
            now: Load timestamp
            active_league: Caller's selected league, only used for diagnostics

        Returns:
            LoadResult
        """
        self.history = []
        loaded_at = _as_naive_utc(now)

        # --------------------------------------------------
        # RESOLVING_ASSET
        # --------------------------------------------------
        self._enter(LoadState.RESOLVING_ASSET)
        path = self.asset_source.resolve(game)

        if path is None:
            logger.info(f"[{game.value}] No bundled weights asset (no-op)")
            self._enter(LoadState.IDLE)
            return LoadResult(success=True)

        # --------------------------------------------------
        # READING
        # --------------------------------------------------
        self._enter(LoadState.READING)
        try:
            content = await self.asset_source.read(game, path)
        except AssetReadError as e:
            return self._fail(game, f"Failed to read CSV: {e.message}", e)

        # --------------------------------------------------
        # PARSING
        # --------------------------------------------------
        self._enter(LoadState.PARSING)
        try:
            parsed = await asyncio.to_thread(parse_weights_csv, content)
        except ParseError as e:
            return self._fail(game, f"CSV parse failed: {e.message}", e)
        except ValueError as e:
            return self._fail(game, f"CSV parse failed: {e}", e)

        logger.info(f"[{game.value}] Parsed {len(parsed.rows)} rows from {path}")

        try:
            # --------------------------------------------------
            # RESOLVING_LEAGUE
            # --------------------------------------------------
            self._enter(LoadState.RESOLVING_LEAGUE)
            league = await self.league_resolver.resolve(game, parsed.raw_league_label)

            # --------------------------------------------------
            # CHECKING_VERSION
            # --------------------------------------------------
            self._enter(LoadState.CHECKING_VERSION)
            if not force:
                cached = await self.repository.get_metadata(game)
                if (
                    cached is not None
                    and cached.app_version == app_version
                    and cached.league == league
                ):
                    logger.info(
                        f'[{game.value}] Skipping re-parse: version "{app_version}" '
                        f'and league "{league}" unchanged'
                    )
                    self._enter(LoadState.SKIPPED)
                    self._enter(LoadState.IDLE)
                    return LoadResult(
                        success=True,
                        card_count=cached.card_count,
                        league=cached.league,
                        loaded_at=cached.loaded_at.isoformat(),
                        skipped=True,
                    )

            # --------------------------------------------------
            # CLASSIFYING
            # --------------------------------------------------
            self._enter(LoadState.CLASSIFYING)
            classified = self.classifier.classify_batch(parsed.rows)
            rows = [
                UpsertWeightRow(
                    item_name=row.item_name,
                    game=game,
                    league=league,
                    weight=row.weight,
                    rarity=row.rarity,
                    from_boss=row.from_boss,
                    loaded_at=loaded_at,
                )
                for row in classified
            ]

            # --------------------------------------------------
            # PERSISTING + SYNCING_FLAGS (single commit)
            # --------------------------------------------------
            self._enter(LoadState.PERSISTING)
            card_count = await self.repository.upsert_weights(rows, commit=False)
            await self.repository.upsert_metadata(
                game, league, loaded_at, app_version, card_count, commit=False
            )

            self._enter(LoadState.SYNCING_FLAGS)
            await self.repository.sync_boss_flag(game, league, commit=False)
            await self.db.commit()

        except PersistenceError as e:
            await self.db.rollback()
            return self._fail(game, f"Failed to persist weights: {e.message}", e)

        except SQLAlchemyError as e:
            await self.db.rollback()
            return self._fail(game, f"Database error: {e}", e)

        if active_league and active_league != league:
            logger.debug(
                f'[{game.value}] Asset league is "{league}" but active league is '
                f'"{active_league}"; queries will fall back to "{league}".'
            )

        # --------------------------------------------------
        # NOTIFYING
        # --------------------------------------------------
        self._enter(LoadState.NOTIFYING)
        await self.notifier.broadcast(game)

        self._enter(LoadState.IDLE)
        logger.info(f'[{game.value}] Loaded {card_count} items for league "{league}"')

        return LoadResult(
            success=True,
            card_count=card_count,
            league=league,
            loaded_at=loaded_at.isoformat(),
        )

    def _fail(self, game: Game, message: str, error: Exception) -> LoadResult:
        self._enter(LoadState.FAILED)
        if isinstance(error, WeightsException):
            logger.error(f"[{game.value}] {message}", extra={"error_context": error.to_dict()})
        else:
            logger.error(f"[{game.value}] {message}")
        self._enter(LoadState.IDLE)
        return LoadResult(success=False, error=message)


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
