"""
Core domain models for a reverse auction session.

These models represent the values a session hands out:
- Bid: An accepted bid (immutable)
- Participant: A viewer attached to a session through one connection
- SessionSnapshot: Full externally visible state of one session
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LifecycleState(str, Enum):
    """Auction lifecycle: pending -> active -> ended."""

    PENDING = "pending"
    ACTIVE = "active"
    ENDED = "ended"


class EndReason(str, Enum):
    """Why an auction ended."""

    TIMEOUT = "timeout"
    COOLDOWN = "cooldown"


class Bid(BaseModel):
    """
    An accepted bid.

    Attributes:
        bidder_user_id: User id of the participant who placed the bid
        username: Display name recorded with the bid
        amount: Bid amount (lower is better)
        timestamp: Time the bid was accepted
    """

    model_config = ConfigDict(frozen=True)

    bidder_user_id: str
    username: str
    amount: float
    timestamp: datetime


class Participant(BaseModel):
    """
    A viewer attached to a session.

    Several connections may share one user_id (reconnects, multiple tabs).
    """

    user_id: str
    username: str


class SessionSnapshot(BaseModel):
    """
    Full session state as broadcast to viewers.

    Attributes:
        session_id: Session identifier
        state: Current lifecycle state
        current_bid: Best (lowest) bid, or the starting price before any bid
        leaderboard: Top bids in ascending order
        time_remaining: Seconds left in the total bidding budget
        active_users: Number of distinct users currently present
        cooldown_remaining: Seconds until the auction closes without a new bid
        start_countdown: Seconds until bidding opens
        is_active: Whether bids are currently accepted
        winner: Winning bid once ended, if any
        ended_reason: Why the auction ended, if it has
    """

    session_id: str
    state: LifecycleState
    current_bid: float
    leaderboard: list[Bid] = Field(default_factory=list)
    time_remaining: int = Field(ge=0)
    active_users: int = Field(ge=0)
    cooldown_remaining: int | None = None
    start_countdown: int = Field(ge=0)
    is_active: bool
    winner: Bid | None = None
    ended_reason: EndReason | None = None
