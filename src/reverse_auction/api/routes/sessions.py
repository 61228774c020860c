"""
Read-only session endpoints.

Summaries are derived from the registry; nothing here mutates a session.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from ...models.auction import SessionSnapshot
from ...services.registry import SessionRegistry
from ...utils.exceptions import UnknownSessionError
from ..dependencies import get_registry
from ..schemas import SessionSummaryResponse

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("", response_model=list[SessionSummaryResponse])
async def list_sessions(
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> list[SessionSummaryResponse]:
    """
    List every session held in memory.

    Example:
        GET /api/sessions
        Response: [{"session_id": "lot-42", "state": "active", "participants": 3,
                    "active_users": 2, "bids": 5, "current_bid": 780.0}]
    """
    return [
        SessionSummaryResponse(
            session_id=session.session_id,
            state=session.lifecycle_state,
            participants=len(session.participants),
            active_users=session.active_users,
            bids=session.total_bids,
            current_bid=session.current_bid,
        )
        for session in registry.all()
    ]


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_session(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionSnapshot:
    """
    Get the full snapshot of one session.

    Raises:
        404: Session was never joined (or has been swept)
    """
    session = registry.get(session_id)
    if session is None:
        raise UnknownSessionError(session_id)
    return session.snapshot()
