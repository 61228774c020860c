"""
Outbound events produced by auction sessions.

An event is addressed either to the connection that issued the command
(Audience.CALLER) or to every subscriber of the session (Audience.SESSION).
The transport layer decides how to deliver it.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .auction import Bid, EndReason, SessionSnapshot


class Audience(str, Enum):
    """Who receives an event."""

    CALLER = "caller"
    SESSION = "session"


class EventName(str, Enum):
    """Wire names of outbound events."""

    AUCTION_STATE = "auction_state"
    ACTIVE_USERS = "active_users"
    COUNTDOWN_UPDATE = "countdown_update"
    AUCTION_STARTED = "auction_started"
    BID_UPDATE = "bid_update"
    BID_ERROR = "bid_error"
    COOLDOWN_UPDATE = "cooldown_update"
    AUCTION_ENDED = "auction_ended"
    HEARTBEAT_ACK = "heartbeat_ack"
    COMMAND_ERROR = "command_error"


class OutboundEvent(BaseModel):
    """
    A single message to publish.

    Attributes:
        event: Event name
        audience: Caller only, or all subscribers of session_id
        session_id: Session the event belongs to (None for session-less acks)
        payload: JSON-serializable event body
    """

    event: EventName
    audience: Audience
    session_id: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        """Wire representation: {"event": ..., "data": {...}}."""
        return {"event": self.event.value, "data": self.payload}


def state_event(snapshot: SessionSnapshot, audience: Audience) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.AUCTION_STATE,
        audience=audience,
        session_id=snapshot.session_id,
        payload=snapshot.model_dump(mode="json"),
    )


def active_users_event(session_id: str, active_users: int) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.ACTIVE_USERS,
        audience=Audience.SESSION,
        session_id=session_id,
        payload={"session_id": session_id, "active_users": active_users},
    )


def countdown_event(session_id: str, start_countdown: int) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.COUNTDOWN_UPDATE,
        audience=Audience.SESSION,
        session_id=session_id,
        payload={"session_id": session_id, "start_countdown": start_countdown},
    )


def started_event(session_id: str) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.AUCTION_STARTED,
        audience=Audience.SESSION,
        session_id=session_id,
        payload={"session_id": session_id},
    )


def bid_event(session_id: str, bid: Bid, cooldown_remaining: int) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.BID_UPDATE,
        audience=Audience.SESSION,
        session_id=session_id,
        payload={
            "session_id": session_id,
            "bid": bid.model_dump(mode="json"),
            "cooldown_remaining": cooldown_remaining,
        },
    )


def bid_error_event(session_id: str | None, code: str, message: str) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.BID_ERROR,
        audience=Audience.CALLER,
        session_id=session_id,
        payload={"code": code, "message": message},
    )


def cooldown_event(session_id: str, cooldown_remaining: int) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.COOLDOWN_UPDATE,
        audience=Audience.SESSION,
        session_id=session_id,
        payload={"session_id": session_id, "cooldown_remaining": cooldown_remaining},
    )


def ended_event(
    session_id: str,
    winner: Bid | None,
    reason: EndReason,
    audience: Audience = Audience.SESSION,
) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.AUCTION_ENDED,
        audience=audience,
        session_id=session_id,
        payload={
            "session_id": session_id,
            "winner": winner.model_dump(mode="json") if winner else None,
            "reason": reason.value,
        },
    )


def heartbeat_event(session_id: str | None, timestamp: datetime) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.HEARTBEAT_ACK,
        audience=Audience.CALLER,
        session_id=session_id,
        payload={"timestamp": timestamp.isoformat()},
    )


def command_error_event(code: str, message: str) -> OutboundEvent:
    return OutboundEvent(
        event=EventName.COMMAND_ERROR,
        audience=Audience.CALLER,
        payload={"code": code, "message": message},
    )
