"""
API request and response schemas.

These Pydantic models define the contract between the server and clients:
HTTP responses for health and session summaries, and the JSON commands
accepted over the WebSocket.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from ..models.auction import LifecycleState


class ErrorResponse(BaseModel):
    """
    Standardized error response format.

    Attributes:
        error: Human-readable error message
        code: Machine-readable error code (SNAKE_CASE)
        details: Optional additional context
    """

    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Machine-readable error code")
    details: dict[str, str] | None = Field(
        default=None, description="Optional additional error context"
    )


class HealthCheckResponse(BaseModel):
    """
    Health check endpoint response.

    Attributes:
        status: Current service status
        version: API version
        sessions: Total sessions held in memory
        active_sessions: Sessions currently accepting bids
    """

    status: str = Field(description="Service status", examples=["healthy"])
    version: str = Field(description="API version", examples=["0.1.0"])
    sessions: int = Field(ge=0, description="Total sessions in memory")
    active_sessions: int = Field(ge=0, description="Sessions accepting bids")


class SessionSummaryResponse(BaseModel):
    """
    Read-only summary of one auction session.

    Attributes:
        session_id: Session identifier
        state: Lifecycle state
        participants: Open connections attached to the session
        active_users: Distinct users attached to the session
        bids: Number of accepted bids
        current_bid: Best bid (or starting price)
    """

    session_id: str
    state: LifecycleState
    participants: int = Field(ge=0)
    active_users: int = Field(ge=0)
    bids: int = Field(ge=0)
    current_bid: float


class JoinCommand(BaseModel):
    """Join (or re-join) an auction session; creates it on first use."""

    type: Literal["join"]
    session_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    username: str | None = None


class LeaveCommand(BaseModel):
    """Leave an auction session."""

    type: Literal["leave"]
    session_id: str = Field(min_length=1)


class PlaceBidCommand(BaseModel):
    """
    Place a bid.

    The amount is passed through unvalidated; the session decides whether
    it is a usable number.
    """

    type: Literal["place_bid"]
    session_id: str = Field(min_length=1)
    amount: Any = None
    username: str | None = None


class HeartbeatCommand(BaseModel):
    """Liveness probe."""

    type: Literal["heartbeat"]
    session_id: str | None = None


InboundCommand = Annotated[
    JoinCommand | LeaveCommand | PlaceBidCommand | HeartbeatCommand,
    Field(discriminator="type"),
]

inbound_command_adapter: TypeAdapter[InboundCommand] = TypeAdapter(InboundCommand)
