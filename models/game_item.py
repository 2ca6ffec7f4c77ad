from sqlalchemy import Column, String, Integer, Boolean, DateTime, Index
from models.base import Base, game_column_type, utcnow


class GameItem(Base):
    """
    Item catalogue (divination cards) for each game.

    The catalogue is owned elsewhere; the weights pipeline only flips the
    denormalised from_boss flag so card queries don't need a join against
    item_weights.
    """
    __tablename__ = "game_items"

    id = Column(String(255), primary_key=True)  # Slug, e.g. "poe1_the-doctor"
    name = Column(String(255), nullable=False)
    game = Column(game_column_type(), nullable=False)
    stack_size = Column(Integer, nullable=False, default=1)
    from_boss = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_game_items_game_name", "game", "name", unique=True),
    )
