"""
Database engine and session factories (SQLAlchemy async).

The weights pipeline runs against PostgreSQL in deployment and against
SQLite (aiosqlite) in tests; both go through the helpers below.
"""

from typing import AsyncGenerator, Optional
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool
from core.config import settings
import logging

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker] = None


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine suited to the target database."""
    if database_url.startswith("sqlite"):
        # In-memory SQLite must share one connection across sessions
        return create_async_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        database_url,
        echo=echo,
        poolclass=NullPool,
        future=True
    )


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False
    )


def get_engine() -> AsyncEngine:
    """Process-wide engine built from settings on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings.DATABASE_URL)
        logger.info("Database engine created")
    return _engine


def get_session_maker() -> async_sessionmaker:
    global _session_maker
    if _session_maker is None:
        _session_maker = build_session_maker(get_engine())
    return _session_maker


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session"""
    async with get_session_maker()() as session:
        yield session
