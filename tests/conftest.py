"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from datetime import datetime
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import build_engine, build_session_maker
from ingestion.extractors.asset_source import BundledAssetSource, WEIGHTS_CSV_FILENAME
from ingestion.notifier import RefreshNotifier
from models.base import Base, Game
from models.game_item import GameItem
from models.league import LeagueDirectoryEntry

# In-memory SQLite shared across sessions through a StaticPool
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

KEEPERS_CSV = (
    "patch,Bucket,Faustus,Ritual,Ultimatum,3.25,3.26,Keepers,All samples\n"
    "Sample Size,,,,,219942,55898,22189,1768829\n"
    "Rain of Chaos,1,5,5,,121400,121400,121400,\n"
    "Emperor's Luck,2,10,5,,51720,49357,55799,\n"
    "The Lover,2,10,5,,63571,65856,64413,\n"
    "Boon of Justice,17,85,4,,7967,7068,9128,\n"
    "The Doctor,26,,5,,0,0,0,\n"
)

BOSS_CSV = (
    "patch,Bucket,Faustus,Ritual,Ultimatum,Keepers,All samples\n"
    "Rain of Chaos,1,5,5,,121400,\n"
    "The Eye of Terror,24,,Boss,,7,\n"
    "The Apothecary,25,,boss,,0,\n"
)

LOAD_TIME = datetime(2025, 1, 15, 10, 0, 0)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine"""
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return build_session_maker(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def notifier():
    return RefreshNotifier()


@pytest.fixture
def write_asset(tmp_path):
    """Write CSV text as the poe1 bundled asset; returns a source over tmp_path"""
    def _write(content: str) -> BundledAssetSource:
        game_dir = tmp_path / Game.POE1.value
        game_dir.mkdir(parents=True, exist_ok=True)
        (game_dir / WEIGHTS_CSV_FILENAME).write_text(content, encoding="utf-8")
        return BundledAssetSource(str(tmp_path))
    return _write


@pytest.fixture
def keepers_asset(write_asset):
    return write_asset(KEEPERS_CSV)


@pytest_asyncio.fixture
async def seed_catalogue(db_session):
    """Insert catalogue rows for the given poe1 card names"""
    async def _seed(*names: str, from_boss: bool = False):
        for name in names:
            slug = name.lower().replace(" ", "-").replace("'", "")
            db_session.add(GameItem(
                id=f"poe1_{slug}",
                name=name,
                game=Game.POE1,
                from_boss=from_boss,
            ))
        await db_session.commit()
    return _seed


@pytest_asyncio.fixture
async def seed_league(db_session):
    """Insert a league directory entry"""
    async def _seed(name: str, game: Game = Game.POE1, is_active: bool = True):
        db_session.add(LeagueDirectoryEntry(
            id=f"{game.value}_{name}",
            game=game,
            league_id=name,
            name=name,
            is_active=is_active,
        ))
        await db_session.commit()
    return _seed
