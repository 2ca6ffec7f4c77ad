from sqlalchemy import Column, String, Boolean, DateTime, Index
from models.base import Base, game_column_type, utcnow


class LeagueDirectoryEntry(Base):
    """
    Cached copy of the public league list.

    Used to resolve the league label found in the weights CSV header
    to its canonical spelling.
    """
    __tablename__ = "league_directory"

    id = Column(String(255), primary_key=True)  # "<game>_<league_id>"
    game = Column(game_column_type(), nullable=False)
    league_id = Column(String(100), nullable=False)
    name = Column(String(100), nullable=False)
    start_at = Column(DateTime, nullable=True)
    end_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    fetched_at = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_league_directory_game_name", "game", "name"),
    )
