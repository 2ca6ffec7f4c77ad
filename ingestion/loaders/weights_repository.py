"""
Persist drop weights with upsert logic (idempotency) and keep the
catalogue's from_boss flag in sync
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from models.base import Game, utcnow
from models.cache_metadata import WeightCacheMetadata
from models.game_item import GameItem
from models.item_weight import ItemWeight
from schemas.weights import CacheMetadataRecord, ItemWeightRecord, UpsertWeightRow
from core.config import settings
from core.exceptions import FlagSyncError, UpsertError
import logging

logger = logging.getLogger(__name__)


class WeightsRepository:
    """
    Database operations for item_weights and weight_cache_metadata, plus
    denormalising from_boss into game_items.

    Ensures:
    - No duplicate rows on repeated loads (keyed upsert)
    - Every multi-row mutation commits once or rolls back entirely
    """

    def __init__(self, db_session: AsyncSession, batch_size: int = None):
        self.db = db_session
        self.batch_size = batch_size or settings.UPSERT_BATCH_SIZE

    def _insert(self, model):
        """INSERT construct with ON CONFLICT support for the bound dialect."""
        if self.db.get_bind().dialect.name == "sqlite":
            return sqlite.insert(model)
        return postgresql.insert(model)

    async def _finish(self, commit: bool):
        """Commit now, or leave the transaction open for the caller to commit."""
        if commit:
            await self.db.commit()

    # ========================================================================
    # Item weights
    # ========================================================================

    async def upsert_weights(self, rows: List[UpsertWeightRow], commit: bool = True) -> int:
        """
        Upsert weights keyed by (item_name, game, league) in one transaction.

        Last write wins on weight, rarity, from_boss and loaded_at, also
        between repeated keys within ``rows``.

        Returns:
            Number of distinct keys written
        """
        rows = self._last_per_key(rows)
        if not rows:
            return 0

        now = utcnow()
        try:
            for i in range(0, len(rows), self.batch_size):
                batch = rows[i:i + self.batch_size]
                stmt = self._insert(ItemWeight).values([
                    {
                        "item_name": row.item_name,
                        "game": row.game,
                        "league": row.league,
                        "weight": row.weight,
                        "rarity": int(row.rarity),
                        "from_boss": row.from_boss,
                        "loaded_at": row.loaded_at,
                        "created_at": now,
                        "updated_at": now,
                    }
                    for row in batch
                ])
                stmt = stmt.on_conflict_do_update(
                    index_elements=["item_name", "game", "league"],
                    set_={
                        "weight": stmt.excluded.weight,
                        "rarity": stmt.excluded.rarity,
                        "from_boss": stmt.excluded.from_boss,
                        "loaded_at": stmt.excluded.loaded_at,
                        "updated_at": now,
                    }
                )
                await self.db.execute(stmt)

            await self._finish(commit)

        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpsertError(
                "Failed to upsert item weights",
                context={
                    "game": rows[0].game.value,
                    "league": rows[0].league,
                    "table_name": ItemWeight.__tablename__,
                    "record_count": len(rows),
                },
                original_exception=e
            )

        logger.info(f"Upserted {len(rows)} rows into {ItemWeight.__tablename__}")
        return len(rows)

    @staticmethod
    def _last_per_key(rows: List[UpsertWeightRow]) -> List[UpsertWeightRow]:
        # Postgres rejects a multi-row ON CONFLICT that touches one key twice
        return list({(row.item_name, row.game, row.league): row for row in rows}.values())

    async def get_weights(self, game: Game, league: str) -> List[ItemWeightRecord]:
        """All weights for a game/league, ordered by item name (codepoint order)."""
        result = await self.db.execute(
            select(ItemWeight).where(
                ItemWeight.game == game,
                ItemWeight.league == league
            )
        )
        return self._to_records(result.scalars().all())

    async def get_boss_items(self, game: Game, league: str) -> List[ItemWeightRecord]:
        """Weights filtered to boss-exclusive items."""
        result = await self.db.execute(
            select(ItemWeight).where(
                ItemWeight.game == game,
                ItemWeight.league == league,
                ItemWeight.from_boss.is_(True)
            )
        )
        return self._to_records(result.scalars().all())

    async def count_weights(self, game: Game, league: Optional[str] = None) -> int:
        query = select(func.count()).select_from(ItemWeight).where(ItemWeight.game == game)
        if league is not None:
            query = query.where(ItemWeight.league == league)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def delete_weights(self, game: Game, league: str) -> int:
        """
        Drop all weights for a game/league.

        Maintenance only; loads never delete.
        """
        try:
            result = await self.db.execute(
                delete(ItemWeight).where(
                    ItemWeight.game == game,
                    ItemWeight.league == league
                )
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpsertError(
                "Failed to delete item weights",
                context={"game": game.value, "league": league, "operation": "DELETE"},
                original_exception=e
            )

        logger.info(f"[{game.value}] Deleted {result.rowcount} weights for league \"{league}\"")
        return result.rowcount

    @staticmethod
    def _to_records(rows) -> List[ItemWeightRecord]:
        # Python str ordering is codepoint order, independent of DB collation
        return [
            ItemWeightRecord.model_validate(row)
            for row in sorted(rows, key=lambda r: r.item_name)
        ]

    # ========================================================================
    # Cache metadata
    # ========================================================================

    async def upsert_metadata(
        self,
        game: Game,
        league: str,
        loaded_at: datetime,
        app_version: str,
        card_count: int,
        commit: bool = True
    ):
        """Replace the single metadata row for this game."""
        now = utcnow()
        stmt = self._insert(WeightCacheMetadata).values(
            game=game,
            league=league,
            loaded_at=loaded_at,
            app_version=app_version,
            card_count=card_count,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["game"],
            set_={
                "league": stmt.excluded.league,
                "loaded_at": stmt.excluded.loaded_at,
                "app_version": stmt.excluded.app_version,
                "card_count": stmt.excluded.card_count,
                "updated_at": now,
            }
        )

        try:
            await self.db.execute(stmt)
            await self._finish(commit)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpsertError(
                "Failed to upsert cache metadata",
                context={
                    "game": game.value,
                    "league": league,
                    "table_name": WeightCacheMetadata.__tablename__,
                },
                original_exception=e
            )

    async def get_metadata(self, game: Game) -> Optional[CacheMetadataRecord]:
        """Metadata for a game, or None if nothing was loaded yet."""
        result = await self.db.execute(
            select(WeightCacheMetadata).where(WeightCacheMetadata.game == game)
        )
        row = result.scalar_one_or_none()
        return CacheMetadataRecord.model_validate(row) if row else None

    # ========================================================================
    # from_boss synchronisation
    # ========================================================================

    async def sync_boss_flag(self, game: Game, league: str, commit: bool = True):
        """
        Denormalise from_boss from item_weights into game_items.

        Two set-based updates in one transaction:
          1. from_boss = true for items boss-exclusive in this league's weights
          2. from_boss = false for every other item of the game, including
             items absent from the weights entirely

        Each update only touches rows whose flag actually flips, so a
        repeated sync leaves game_items (updated_at included) unchanged.
        """
        boss_names = select(ItemWeight.item_name).where(
            ItemWeight.game == game,
            ItemWeight.league == league,
            ItemWeight.from_boss.is_(True)
        )

        try:
            marked = await self.db.execute(
                update(GameItem)
                .where(
                    GameItem.game == game,
                    GameItem.from_boss.is_(False),
                    GameItem.name.in_(boss_names)
                )
                .values(from_boss=True)
                .execution_options(synchronize_session=False)
            )
            cleared = await self.db.execute(
                update(GameItem)
                .where(
                    GameItem.game == game,
                    GameItem.from_boss.is_(True),
                    GameItem.name.not_in(boss_names)
                )
                .values(from_boss=False)
                .execution_options(synchronize_session=False)
            )
            await self._finish(commit)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise FlagSyncError(
                "Failed to sync from_boss flags",
                context={"game": game.value, "league": league, "table_name": GameItem.__tablename__},
                original_exception=e
            )

        logger.info(
            f"[{game.value}] Synced from_boss flags for league \"{league}\": "
            f"{marked.rowcount} marked, {cleared.rowcount} cleared"
        )
