"""
Custom exceptions for the drop-weights pipeline with structured error context.

Every failure the load pipeline can hit is represented here. Each exception
carries context information for debugging and for the typed failure result
returned by the loader.

Exception Hierarchy:
    WeightsException (base)
    ├── AssetError
    │   └── AssetReadError
    ├── ParseError
    │   ├── EmptyAssetError
    │   ├── MissingSentinelColumnError
    │   ├── SentinelIsFirstColumnError
    │   └── LeagueColumnLooksLikeVersionError
    ├── PersistenceError
    │   ├── UpsertError
    │   └── FlagSyncError
    └── LeagueFetchError

A missing asset is not an error: the loader reports it as an empty success.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class WeightsException(Exception):
    """
    Base exception for all drop-weights errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (game, file path, column, ...)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Asset Errors
# ============================================================================

class AssetError(WeightsException):
    """Base exception for asset acquisition failures."""
    pass


class AssetReadError(AssetError):
    """
    Raised when the bundled weights asset exists but cannot be read.

    Context should include:
        - game: The game the asset belongs to
        - file_path: Path to the asset
    """
    pass


# ============================================================================
# Parse Errors
# ============================================================================

class ParseError(WeightsException):
    """Base exception for structural problems in the weights CSV."""
    pass


class EmptyAssetError(ParseError):
    """The asset holds no header row at all."""
    pass


class MissingSentinelColumnError(ParseError):
    """
    The header row has no "All samples" column.

    Context should include:
        - sentinel: The sentinel literal that was searched for
    """
    pass


class SentinelIsFirstColumnError(ParseError):
    """The sentinel is column 0, so there is no current-league column before it."""
    pass


class LeagueColumnLooksLikeVersionError(ParseError):
    """
    The column before the sentinel is headed by a patch version ("3.26")
    instead of a league name. Signals upstream schema drift.

    Context should include:
        - header: The offending header label
    """
    pass


# ============================================================================
# Persistence Errors
# ============================================================================

class PersistenceError(WeightsException):
    """Base exception for database failures. The transaction is rolled back."""
    pass


class UpsertError(PersistenceError):
    """
    Raised when the weights or metadata upsert fails.

    Context should include:
        - game, league
        - table_name
        - record_count
    """
    pass


class FlagSyncError(PersistenceError):
    """Raised when the boss-flag denormalisation fails."""
    pass


# ============================================================================
# League Directory Errors
# ============================================================================

class LeagueFetchError(WeightsException):
    """
    Raised when the public league list cannot be fetched or decoded.

    Context should include:
        - url: The endpoint that failed
        - status_code: HTTP status code (if applicable)
    """
    pass
