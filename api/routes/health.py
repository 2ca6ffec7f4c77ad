"""
Health check endpoint with database and per-game load status
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from api.dependencies import get_db
from schemas.api import HealthCheckResponse, StatusResponse
from models.base import Game
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Load status for every game (when the weights service is up)
    """
    db_connected = False

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {str(e)}")

    games = []
    service = getattr(request.app.state, "weights_service", None)
    if db_connected and service is not None:
        for game in Game:
            try:
                games.append(StatusResponse(game=game, status=await service.status(game)))
            except SQLAlchemyError as e:
                logger.error(f"[{game.value}] Failed to read load status: {str(e)}")

    return HealthCheckResponse(
        database_connected=db_connected,
        games=games,
    )
