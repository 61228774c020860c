"""
Auction session state machine.

One AuctionSession runs one reverse auction: a start countdown, then an active
bidding window in which every bid must undercut the current best, ending
either when the time budget runs out or when the cooldown after the last bid
elapses with no new bid.
"""

import logging
import math
import numbers
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from ..models.auction import (
    Bid,
    EndReason,
    LifecycleState,
    Participant,
    SessionSnapshot,
)
from ..models.events import (
    Audience,
    OutboundEvent,
    active_users_event,
    bid_event,
    cooldown_event,
    countdown_event,
    ended_event,
    started_event,
    state_event,
)
from ..utils.exceptions import (
    BidTooHighError,
    InvalidBidError,
    NotParticipantError,
    SessionNotActiveError,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Full state is broadcast only when time_remaining is a multiple of this
SNAPSHOT_EVERY_SECONDS = 5


def utc_now() -> datetime:
    return datetime.now(UTC)


class JoinResult(BaseModel):
    """Snapshot returned to a joining connection plus events to publish."""

    snapshot: SessionSnapshot
    events: list[OutboundEvent] = Field(default_factory=list)


class BidResult(BaseModel):
    """Accepted bid plus events to publish."""

    bid: Bid
    events: list[OutboundEvent] = Field(default_factory=list)


class Ack(BaseModel):
    """Heartbeat acknowledgement."""

    session_id: str
    timestamp: datetime


class AuctionSession:
    """
    State machine for a single reverse auction.

    Every public method runs under the session's own lock, so a bid's
    threshold check and the mutation that follows it are one atomic step.

    Attributes:
        session_id: Session identifier
        start_countdown_remaining: Seconds until bidding opens
        time_remaining: Seconds left in the bidding budget
        current_bid: Best (lowest) bid amount, or the starting price
        leaderboard: Best bids, ascending by amount
        participants: Connection id -> Participant
        cooldown_active: Whether a bid has armed the cooldown
        last_bid_time: When the most recent bid was accepted
        bid_cooldown_seconds: Quiet period after which the auction ends
        created_at: Creation time, used by the retention sweep
    """

    def __init__(
        self,
        session_id: str,
        *,
        start_countdown: int = 30,
        duration: int = 1800,
        starting_price: float = 1000.0,
        leaderboard_size: int = 10,
        bid_cooldown: int = 30,
        clock: Clock = utc_now,
    ) -> None:
        if leaderboard_size < 1:
            raise ValueError("leaderboard_size must be at least 1")

        self.session_id = session_id
        self.start_countdown_remaining = max(0, start_countdown)
        self.time_remaining = max(0, duration)
        self.starting_price = starting_price
        self.current_bid = starting_price
        self.leaderboard: list[Bid] = []
        self.leaderboard_size = leaderboard_size
        self.participants: dict[str, Participant] = {}
        self.cooldown_active = False
        self.last_bid_time: datetime | None = None
        self.bid_cooldown_seconds = bid_cooldown
        self.total_bids = 0

        self._clock = clock
        self._lock = threading.Lock()
        self.created_at = clock()

        self.ended_reason: EndReason | None = None
        self.ended_at: datetime | None = None
        self.winner: Bid | None = None
        self._state = (
            LifecycleState.ACTIVE
            if self.start_countdown_remaining == 0
            else LifecycleState.PENDING
        )

    @property
    def lifecycle_state(self) -> LifecycleState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is LifecycleState.ACTIVE

    @property
    def is_ended(self) -> bool:
        return self._state is LifecycleState.ENDED

    @property
    def active_users(self) -> int:
        """Number of distinct user ids present, regardless of connection count."""
        return len({p.user_id for p in self.participants.values()})

    def cooldown_remaining(self) -> int | None:
        """Seconds left before the cooldown closes the auction, or None if unarmed."""
        if not self.cooldown_active or self.last_bid_time is None:
            return None
        elapsed = (self._clock() - self.last_bid_time).total_seconds()
        return max(0, self.bid_cooldown_seconds - int(elapsed))

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            state=self._state,
            current_bid=self.current_bid,
            leaderboard=list(self.leaderboard),
            time_remaining=self.time_remaining,
            active_users=self.active_users,
            cooldown_remaining=self.cooldown_remaining(),
            start_countdown=self.start_countdown_remaining,
            is_active=self.is_active,
            winner=self.winner,
            ended_reason=self.ended_reason,
        )

    def join(self, connection_id: str, user_id: str, username: str) -> JoinResult:
        """
        Register (or re-register) a connection as a participant.

        Args:
            connection_id: Transport-level connection identity
            user_id: User identity, may be shared by several connections
            username: Display name

        Returns:
            JoinResult with the snapshot for the caller and the events to publish

        Note:
            Calling twice for one connection overwrites the entry.
        """
        with self._lock:
            self.participants[connection_id] = Participant(user_id=user_id, username=username)
            snapshot = self._snapshot()
            events = [
                state_event(snapshot, Audience.CALLER),
                active_users_event(self.session_id, snapshot.active_users),
            ]
            if self.is_ended and self.ended_reason is not None:
                events.append(
                    ended_event(self.session_id, self.winner, self.ended_reason, Audience.CALLER)
                )
            return JoinResult(snapshot=snapshot, events=events)

    def leave(self, connection_id: str) -> list[OutboundEvent]:
        """Remove a connection. Unknown connections are ignored."""
        with self._lock:
            if self.participants.pop(connection_id, None) is None:
                return []
            return [active_users_event(self.session_id, self.active_users)]

    def place_bid(
        self,
        connection_id: str,
        amount: Any,
        username: str | None = None,
    ) -> BidResult:
        """
        Validate and apply a bid.

        Args:
            connection_id: Connection placing the bid (must have joined)
            amount: Bid amount
            username: Optional display name overriding the participant's

        Returns:
            BidResult with the accepted bid and the events to broadcast

        Raises:
            SessionNotActiveError: Auction is pending or ended
            NotParticipantError: Connection has not joined this session
            InvalidBidError: Amount missing, non-numeric, non-finite or not positive
            BidTooHighError: Amount does not undercut the current bid
        """
        with self._lock:
            if not self.is_active:
                raise SessionNotActiveError(
                    f"Auction is {self._state.value}, bids are not accepted"
                )

            participant = self.participants.get(connection_id)
            if participant is None:
                raise NotParticipantError()

            value = _parse_amount(amount)
            if self.leaderboard and value >= self.current_bid:
                raise BidTooHighError(value, self.current_bid)

            now = self._clock()
            bid = Bid(
                bidder_user_id=participant.user_id,
                username=username or participant.username,
                amount=value,
                timestamp=now,
            )
            self.leaderboard.append(bid)
            # list.sort is stable: equal amounts keep arrival order
            self.leaderboard.sort(key=lambda b: b.amount)
            del self.leaderboard[self.leaderboard_size :]
            self.current_bid = self.leaderboard[0].amount
            self.last_bid_time = now
            self.cooldown_active = True
            self.total_bids += 1

            logger.debug(
                f"Session {self.session_id}: accepted bid {value:g} from {participant.user_id}"
            )
            return BidResult(
                bid=bid,
                events=[
                    bid_event(self.session_id, bid, self.bid_cooldown_seconds),
                    state_event(self._snapshot(), Audience.SESSION),
                ],
            )

    def heartbeat(self) -> Ack:
        return Ack(session_id=self.session_id, timestamp=self._clock())

    def tick(self) -> list[OutboundEvent]:
        """
        Advance the session by one second.

        Returns:
            Events produced by this tick

        Note:
            A session that becomes active during this tick starts consuming its
            time budget on the next one.
        """
        with self._lock:
            if self._state is LifecycleState.PENDING:
                return self._tick_pending()
            if self._state is LifecycleState.ACTIVE:
                return self._tick_active()
            return []

    def _tick_pending(self) -> list[OutboundEvent]:
        self.start_countdown_remaining = max(0, self.start_countdown_remaining - 1)
        events = [countdown_event(self.session_id, self.start_countdown_remaining)]
        if self.start_countdown_remaining == 0:
            self._state = LifecycleState.ACTIVE
            logger.info(f"Session {self.session_id}: bidding opened")
            events.append(started_event(self.session_id))
        return events

    def _tick_active(self) -> list[OutboundEvent]:
        self.time_remaining = max(0, self.time_remaining - 1)
        events: list[OutboundEvent] = []

        if self.cooldown_active:
            remaining = self.cooldown_remaining()
            if remaining == 0:
                events.append(self._end(EndReason.COOLDOWN))
                return events
            events.append(cooldown_event(self.session_id, remaining))

        if self.time_remaining % SNAPSHOT_EVERY_SECONDS == 0:
            events.append(state_event(self._snapshot(), Audience.SESSION))

        if self.time_remaining == 0:
            events.append(self._end(EndReason.TIMEOUT))
        return events

    def _end(self, reason: EndReason) -> OutboundEvent:
        self._state = LifecycleState.ENDED
        self.ended_reason = reason
        self.ended_at = self._clock()
        self.winner = self.leaderboard[0] if self.leaderboard else None
        logger.info(
            f"Session {self.session_id}: ended ({reason.value}), "
            f"winner={self.winner.bidder_user_id if self.winner else None}"
        )
        return ended_event(self.session_id, self.winner, reason)

    def is_expired(self, retention_seconds: float, now: datetime | None = None) -> bool:
        """
        Check whether an ended session is past the retention window.

        Args:
            retention_seconds: Retention window measured from creation
            now: Reference time (defaults to the session clock)

        Returns:
            True only for ended sessions older than the window
        """
        if not self.is_ended:
            return False
        age_seconds = ((now or self._clock()) - self.created_at).total_seconds()
        return age_seconds > retention_seconds


def _parse_amount(amount: Any) -> float:
    if amount is None:
        raise InvalidBidError("Bid amount is required")
    if isinstance(amount, bool) or not isinstance(amount, numbers.Real):
        raise InvalidBidError(f"Bid amount must be a number, got {type(amount).__name__}")
    try:
        value = float(amount)
    except OverflowError:
        raise InvalidBidError("Bid amount must be a finite number") from None
    if not math.isfinite(value):
        raise InvalidBidError("Bid amount must be a finite number")
    if value <= 0:
        raise InvalidBidError("Bid amount must be positive")
    return value
