"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime
from models.base import Game, utcnow
from schemas.weights import ItemWeightRecord, LoadResult, WeightStatus


# ============================================================================
# Weights Schemas
# ============================================================================

class WeightsResponse(BaseModel):
    """Weights for a game, possibly served from the fallback league"""
    game: Game
    requested_league: str
    league: Optional[str] = Field(None, description="League the rows actually belong to")
    fallback_used: bool = False
    count: int = 0
    items: List[ItemWeightRecord] = Field(default_factory=list)

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "game": "poe1",
                "requested_league": "Mercenaries",
                "league": "Keepers",
                "fallback_used": True,
                "count": 1,
                "items": [
                    {
                        "item_name": "Rain of Chaos",
                        "game": "poe1",
                        "league": "Keepers",
                        "weight": 121400,
                        "rarity": 4,
                        "from_boss": False,
                        "loaded_at": "2025-01-15T10:00:00"
                    }
                ]
            }
        }

    @classmethod
    def from_records(cls, game: Game, requested_league: str, records: List[ItemWeightRecord]):
        league = records[0].league if records else None
        return cls(
            game=game,
            requested_league=requested_league,
            league=league,
            fallback_used=league is not None and league != requested_league,
            count=len(records),
            items=records,
        )


class ReloadResponse(BaseModel):
    """Outcome of a forced reload"""
    game: Game
    result: LoadResult

    class Config:
        use_enum_values = True


class StatusResponse(BaseModel):
    game: Game
    status: WeightStatus

    class Config:
        use_enum_values = True


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    timestamp: datetime = Field(default_factory=utcnow)
    database_connected: bool
    games: List[StatusResponse] = Field(default_factory=list)
    status: str = Field("healthy", description="Overall system status: healthy, degraded, unhealthy")

    @validator("status", pre=True, always=True)
    def determine_status(cls, v, values):
        """Unhealthy without a database, degraded while no game has data"""
        if not values.get("database_connected", False):
            return "unhealthy"

        games = values.get("games") or []
        if games and not any(entry.status.has_data for entry in games):
            return "degraded"
        return "healthy"


# ============================================================================
# Error Response Schema
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    detail: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Reload failed",
                "detail": "CSV parse failed: Header is missing the \"All samples\" column",
                "timestamp": "2025-01-15T10:30:00"
            }
        }
