"""
Health check endpoint.

Provides a simple endpoint to verify the server is running, with session counts.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from ... import __version__
from ...services.registry import SessionRegistry
from ..dependencies import get_registry
from ..schemas import HealthCheckResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> HealthCheckResponse:
    """
    Health check endpoint.

    Returns:
        Service status, version and session counts

    Example:
        GET /health
        Response: {"status": "healthy", "version": "0.1.0", "sessions": 2, "active_sessions": 1}
    """
    return HealthCheckResponse(
        status="healthy",
        version=__version__,
        sessions=registry.session_count(),
        active_sessions=registry.active_session_count(),
    )
