from sqlalchemy import Column, String, Integer, DateTime
from models.base import Base, game_column_type, utcnow


class WeightCacheMetadata(Base):
    """
    Latest-load marker for the weights asset.

    Purpose:
    - Skip re-parsing when neither the app version nor the league changed
    - Report status (last load time, item count, league)

    Design:
    - One row per game, replaced on every successful load (not a history)
    """
    __tablename__ = "weight_cache_metadata"

    game = Column(game_column_type(), primary_key=True)
    league = Column(String(100), nullable=False)
    loaded_at = Column(DateTime, nullable=False)
    app_version = Column(String(50), nullable=False)
    card_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
