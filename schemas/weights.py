"""
Pydantic schemas for drop-weight rows, load results and status
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime
from models.base import Game, Rarity


class RawWeightRow(BaseModel):
    """
    One data row of the weights CSV after column resolution.

    Column mapping:
        0 = item name
        1 = bucket (community weight tier group)
        3 = boss indicator; only the literal "Boss" matters
        column before "All samples" = current-league weight
    """

    item_name: str = Field(..., min_length=1)
    bucket: int = Field(0, ge=0)
    weight: int = Field(0, ge=0)
    from_boss: bool = False
    raw_league_label: str

    @validator("item_name")
    def clean_item_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Item name cannot be empty after stripping")
        return v


class ClassifiedWeightRow(RawWeightRow):
    """Raw row plus its derived rarity"""
    rarity: Rarity


class ParseResult(BaseModel):
    """Parsed rows and the unresolved league label from the header"""
    rows: List[RawWeightRow] = Field(default_factory=list)
    raw_league_label: str


class UpsertWeightRow(BaseModel):
    """Persistence-ready weight row"""
    item_name: str
    game: Game
    league: str
    weight: int = Field(..., ge=0)
    rarity: Rarity
    from_boss: bool = False
    loaded_at: datetime


class ItemWeightRecord(BaseModel):
    """Stored weight row as returned to consumers"""
    item_name: str
    game: Game
    league: str
    weight: int
    rarity: Rarity
    from_boss: bool
    loaded_at: datetime

    class Config:
        from_attributes = True


class CacheMetadataRecord(BaseModel):
    """Latest-load marker for one game"""
    game: Game
    league: str
    loaded_at: datetime
    app_version: str
    card_count: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoadResult(BaseModel):
    """
    Outcome of one load call.

    A missing asset is success with card_count=0, league="" and loaded_at="".
    Read and parse failures are success=False with error set.
    """
    success: bool
    card_count: int = 0
    league: str = ""
    loaded_at: str = ""
    skipped: bool = False
    error: Optional[str] = None


class WeightStatus(BaseModel):
    """Status snapshot of the stored weights for one game"""
    has_data: bool
    last_loaded_at: Optional[datetime] = None
    card_count: int = 0
    league: Optional[str] = None
    app_version: Optional[str] = None


class LeagueEntry(BaseModel):
    """League as reported by the public league endpoints"""
    league_id: str
    name: str
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    is_active: bool = True
