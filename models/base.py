from datetime import datetime, timezone
from sqlalchemy import Enum
from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; all DateTime columns store naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================================
# ENUMS
# ============================================================================

class Game(str, enum.Enum):
    """Supported games"""
    POE1 = "poe1"
    POE2 = "poe2"


class Rarity(int, enum.Enum):
    """Ordinal rarity scale derived from drop weights"""
    UNKNOWN = 0
    EXTREMELY_RARE = 1
    RARE = 2
    LESS_COMMON = 3
    COMMON = 4


class LoadState(str, enum.Enum):
    """Load orchestrator states"""
    IDLE = "idle"
    RESOLVING_ASSET = "resolving_asset"
    READING = "reading"
    PARSING = "parsing"
    RESOLVING_LEAGUE = "resolving_league"
    CHECKING_VERSION = "checking_version"
    SKIPPED = "skipped"
    CLASSIFYING = "classifying"
    PERSISTING = "persisting"
    SYNCING_FLAGS = "syncing_flags"
    NOTIFYING = "notifying"
    FAILED = "failed"


def game_column_type() -> Enum:
    """Stores Game by value ("poe1") rather than member name."""
    return Enum(
        Game,
        name="game_type",
        native_enum=False,
        length=8,
        values_callable=lambda enum_cls: [member.value for member in enum_cls],
    )
