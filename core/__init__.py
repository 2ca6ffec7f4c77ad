"""
Core utilities and configuration for the drop-weights backend.

Modules:
    config: Application configuration and environment variable management
    database: Async engine and session factories
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import get_session_maker
    from core.exceptions import ParseError, PersistenceError
    from core.logging import setup_logging
"""

__all__ = [
    "settings",
    "get_session",
    "setup_logging",
    # Exceptions
    "WeightsException",
    "AssetError",
    "AssetReadError",
    "ParseError",
    "EmptyAssetError",
    "MissingSentinelColumnError",
    "SentinelIsFirstColumnError",
    "LeagueColumnLooksLikeVersionError",
    "PersistenceError",
    "UpsertError",
    "FlagSyncError",
    "LeagueFetchError",
]
