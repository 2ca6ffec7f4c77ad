from sqlalchemy import Column, String, Integer, Boolean, DateTime, Index, CheckConstraint
from models.base import Base, game_column_type, utcnow


class ItemWeight(Base):
    """
    Per-item drop weight for one game/league, parsed from the bundled
    community weights CSV.

    Design:
    - Natural key (item_name, game, league); leagues accumulate side by side
    - Rows are overwritten on reload, never deleted by a load
    - rarity is the 0-4 ordinal computed at load time
    """
    __tablename__ = "item_weights"

    item_name = Column(String(255), primary_key=True)
    game = Column(game_column_type(), primary_key=True)
    league = Column(String(100), primary_key=True)

    weight = Column(Integer, nullable=False)
    rarity = Column(Integer, nullable=False)
    from_boss = Column(Boolean, nullable=False, default=False)

    loaded_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("weight >= 0", name="ck_item_weights_weight"),
        CheckConstraint("rarity BETWEEN 0 AND 4", name="ck_item_weights_rarity"),
        Index("idx_item_weights_game_league", "game", "league"),
        Index("idx_item_weights_item_name", "item_name"),
    )
