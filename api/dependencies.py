"""
FastAPI dependencies
"""

from typing import AsyncGenerator
from fastapi import HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import get_session
from ingestion.service import WeightsService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_weights_service(request: Request) -> WeightsService:
    """The service instance built at startup."""
    service = getattr(request.app.state, "weights_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Weights service is not initialised")
    return service
