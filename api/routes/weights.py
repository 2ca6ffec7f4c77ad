"""
Drop-weights endpoints: forced reload, status and weight queries
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from api.dependencies import get_weights_service
from ingestion.service import WeightsService
from models.base import Game
from schemas.api import ErrorResponse, ReloadResponse, StatusResponse, WeightsResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/weights", tags=["Weights"])


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


@router.post(
    "/{game}/reload",
    response_model=ReloadResponse,
    responses={500: {"model": ErrorResponse, "description": "Load failed"}}
)
async def reload_weights(
    game: Game,
    request: Request,
    service: WeightsService = Depends(get_weights_service)
):
    """
    Force a reload of the bundled weights asset for a game.

    The version/league check is bypassed. A failed load is reported
    as HTTP 500 with the load error as detail.
    """
    logger.info(f"[{_request_id(request)}] Forced reload requested for {game.value}")
    result = await service.load(game, force=True)

    if not result.success:
        error = ErrorResponse(error="Reload failed", detail=result.error)
        return JSONResponse(status_code=500, content=error.model_dump(mode="json"))

    return ReloadResponse(game=game, result=result)


@router.get("/{game}/status", response_model=StatusResponse)
async def weights_status(
    game: Game,
    service: WeightsService = Depends(get_weights_service)
):
    """Latest load marker for a game."""
    return StatusResponse(game=game, status=await service.status(game))


@router.get("/{game}/boss-items", response_model=WeightsResponse)
async def boss_items(
    game: Game,
    league: str = Query(..., min_length=1, description="League to query"),
    service: WeightsService = Depends(get_weights_service)
):
    """Boss-exclusive items, falling back to the last loaded league."""
    records = await service.boss_items(game, league)
    return WeightsResponse.from_records(game, league, records)


@router.get("/{game}", response_model=WeightsResponse)
async def get_weights(
    game: Game,
    request: Request,
    league: str = Query(..., min_length=1, description="League to query"),
    service: WeightsService = Depends(get_weights_service)
):
    """
    All weights for a game and league, ordered by item name.

    When the league has no rows, the league of the last successful load
    is served instead (fallback_used=true). No data is an empty list,
    not an error.
    """
    records = await service.weights(game, league)
    response = WeightsResponse.from_records(game, league, records)

    logger.info(
        f"[{_request_id(request)}] Returned {response.count} weights for {game.value} "
        f"(requested={league}, served={response.league})"
    )
    return response
