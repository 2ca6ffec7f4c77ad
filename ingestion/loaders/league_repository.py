"""
League directory persistence and lookup
"""

from typing import List, Optional
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from models.base import Game, utcnow
from models.league import LeagueDirectoryEntry
from schemas.weights import LeagueEntry
from ingestion.transformers.league_resolver import LeagueDirectory
from core.exceptions import UpsertError
import logging

logger = logging.getLogger(__name__)


class LeagueDirectoryRepository(LeagueDirectory):
    """Reads and refreshes the cached league list"""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_league_by_name(self, game: Game, name: str) -> Optional[LeagueDirectoryEntry]:
        """Case-insensitive match on the league name."""
        result = await self.db.execute(
            select(LeagueDirectoryEntry)
            .where(
                LeagueDirectoryEntry.game == game,
                # lower() on both sides; SQLite folds ASCII only
                func.lower(LeagueDirectoryEntry.name) == func.lower(name)
            )
            .order_by(LeagueDirectoryEntry.is_active.desc(), LeagueDirectoryEntry.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def resolve_canonical_league(self, game: Game, raw_label: str) -> Optional[str]:
        entry = await self.get_league_by_name(game, raw_label)
        return entry.name if entry else None

    async def list_leagues(self, game: Game, active_only: bool = True) -> List[LeagueDirectoryEntry]:
        query = select(LeagueDirectoryEntry).where(LeagueDirectoryEntry.game == game)
        if active_only:
            query = query.where(LeagueDirectoryEntry.is_active.is_(True))
        result = await self.db.execute(query.order_by(LeagueDirectoryEntry.name))
        return list(result.scalars().all())

    async def replace_leagues(self, game: Game, leagues: List[LeagueEntry]) -> int:
        """
        Store a freshly fetched league list.

        Known leagues are updated in place, new ones added, and leagues
        missing from the list are flagged inactive rather than deleted.
        """
        now = utcnow()
        try:
            existing_result = await self.db.execute(
                select(LeagueDirectoryEntry).where(LeagueDirectoryEntry.game == game)
            )
            existing = {entry.id: entry for entry in existing_result.scalars().all()}

            seen_ids = set()
            for league in leagues:
                entry_id = f"{game.value}_{league.league_id}"
                if entry_id in seen_ids:
                    continue
                seen_ids.add(entry_id)
                entry = existing.get(entry_id)

                if entry is None:
                    self.db.add(LeagueDirectoryEntry(
                        id=entry_id,
                        game=game,
                        league_id=league.league_id,
                        name=league.name,
                        start_at=league.start_at,
                        end_at=league.end_at,
                        is_active=league.is_active,
                        fetched_at=now,
                    ))
                else:
                    entry.name = league.name
                    entry.start_at = league.start_at
                    entry.end_at = league.end_at
                    entry.is_active = league.is_active
                    entry.fetched_at = now

            stale_ids = set(existing) - seen_ids
            if stale_ids:
                await self.db.execute(
                    update(LeagueDirectoryEntry)
                    .where(LeagueDirectoryEntry.id.in_(stale_ids))
                    .values(is_active=False)
                    .execution_options(synchronize_session=False)
                )

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpsertError(
                "Failed to store league directory",
                context={
                    "game": game.value,
                    "table_name": LeagueDirectoryEntry.__tablename__,
                    "record_count": len(leagues),
                },
                original_exception=e
            )

        logger.info(f"[{game.value}] Stored {len(seen_ids)} leagues ({len(stale_ids)} marked inactive)")
        return len(seen_ids)
