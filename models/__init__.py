"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and shared enums (Game, Rarity, LoadState)
    item_weight: Per-item drop weights keyed by (item_name, game, league)
    cache_metadata: Latest-load marker, one row per game
    game_item: Item catalogue carrying the denormalised from_boss flag
    league: Cached public league directory

Usage:
    from models.base import Base, Game, Rarity
    from models.item_weight import ItemWeight
    from models.cache_metadata import WeightCacheMetadata

Relationships:
    - ItemWeight.item_name → GameItem.name (by name + game, no foreign key;
      the catalogue may lag behind the weights asset)
    - WeightCacheMetadata.league → ItemWeight.league (latest loaded league)
"""

__all__ = [
    "Base",
    "Game",
    "Rarity",
    "LoadState",
    "ItemWeight",
    "WeightCacheMetadata",
    "GameItem",
    "LeagueDirectoryEntry",
]
