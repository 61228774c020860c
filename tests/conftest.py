"""
Pytest configuration and shared fixtures.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from reverse_auction.config import Settings
from reverse_auction.models.events import OutboundEvent
from reverse_auction.services.auction import AuctionSession
from reverse_auction.services.registry import SessionRegistry


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Settings with the standard auction defaults."""
    return Settings(
        start_countdown=30,
        auction_duration=1800,
        starting_price=1000.0,
        leaderboard_size=10,
        bid_cooldown=30,
    )


@pytest.fixture
def registry(settings: Settings, clock: FakeClock) -> SessionRegistry:
    """Create a registry driven by the fake clock."""
    return SessionRegistry(settings, clock=clock)


@pytest.fixture
def session(clock: FakeClock) -> AuctionSession:
    """A session still in its start countdown."""
    return AuctionSession("lot-1", clock=clock)


@pytest.fixture
def active_session(clock: FakeClock) -> AuctionSession:
    """A session accepting bids, with two joined bidders."""
    session = AuctionSession("lot-1", start_countdown=0, clock=clock)
    session.join("conn-a", "alice", "Alice")
    session.join("conn-b", "bob", "Bob")
    return session


@pytest.fixture
def advance(clock: FakeClock) -> Callable[[AuctionSession, int], list[OutboundEvent]]:
    """Return a helper that ticks a session n times, one second apart."""

    def _advance(session: AuctionSession, ticks: int = 1) -> list[OutboundEvent]:
        events: list[OutboundEvent] = []
        for _ in range(ticks):
            clock.advance(1)
            events.extend(session.tick())
        return events

    return _advance
