"""
Health check endpoints.

Provides liveness and readiness checks with database connectivity checks.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cubedraft.api.dependencies import get_context
from cubedraft.db.database import get_session
from cubedraft.services.context import DraftContext

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    draft: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness check.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    context: Annotated[DraftContext, Depends(get_context)],
) -> HealthResponse:
    """
    Readiness check.

    Checks database connectivity and that a draft is loaded.
    Returns 503 if either is unavailable.
    """
    draft_state = "loaded" if context.loaded else "loading"
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected", draft=draft_state)

    if not context.loaded:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="connected", draft=draft_state)

    return HealthResponse(status="ready", database="connected", draft=draft_state)
