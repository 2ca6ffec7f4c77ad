import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import build_engine
from core.logging import setup_logging
from models.base import Base
# Import all models to ensure they are registered
from models.item_weight import ItemWeight
from models.cache_metadata import WeightCacheMetadata
from models.game_item import GameItem
from models.league import LeagueDirectoryEntry

logger = logging.getLogger(__name__)


async def init_database(database_url: str = None):
    logger.info("Connecting to database...")
    engine = build_engine(database_url or settings.DATABASE_URL)

    try:
        async with engine.begin() as conn:
            logger.info("Creating tables...")
            await conn.run_sync(Base.metadata.create_all)
            logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
