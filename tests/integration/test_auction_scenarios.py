"""
Integration tests for complete auctions.

Drives sessions through the command router and scheduler with a fake clock,
one tick per simulated second.

Tests cover:
- Countdown to active (scenario A)
- Strict-decrease bidding (scenario B)
- Cooldown ending with a winner (scenario C)
- Timeout ending without a winner (scenario D)
- Shared-user presence (scenario E)
"""

import random

import pytest

from reverse_auction.models.auction import EndReason, LifecycleState
from reverse_auction.models.events import EventName, OutboundEvent
from reverse_auction.services.commands import CommandRouter
from reverse_auction.services.registry import SessionRegistry
from reverse_auction.services.scheduler import AuctionScheduler


@pytest.fixture
def router(registry: SessionRegistry) -> CommandRouter:
    return CommandRouter(registry)


@pytest.fixture
def scheduler(registry: SessionRegistry, clock) -> AuctionScheduler:
    return AuctionScheduler(registry, clock=clock)


@pytest.fixture
def run(scheduler: AuctionScheduler, clock):
    """Return a helper running n scheduler ticks one second apart."""

    def _run(ticks: int) -> list[OutboundEvent]:
        events: list[OutboundEvent] = []
        for _ in range(ticks):
            clock.advance(1)
            events.extend(scheduler.tick())
        return events

    return _run


def open_auction(router: CommandRouter, run) -> None:
    router.join("conn-a", "lot-1", "alice", "Alice")
    router.join("conn-b", "lot-1", "bob", "Bob")
    run(30)


class TestScenarios:
    """End-to-end auction scenarios."""

    def test_countdown_to_active(self, router: CommandRouter, registry: SessionRegistry, run) -> None:
        """Scenario A: 30 quiet ticks open bidding."""
        router.join("conn-a", "lot-1", "alice", "Alice")
        session = registry.get("lot-1")
        assert session.current_bid == 1000.0
        assert session.time_remaining == 1800

        events = run(29)
        assert session.lifecycle_state is LifecycleState.PENDING
        assert EventName.AUCTION_STARTED not in {e.event for e in events}

        events = run(1)
        assert session.is_active
        assert [e.event for e in events].count(EventName.AUCTION_STARTED) == 1

    def test_strict_decrease(self, router: CommandRouter, registry: SessionRegistry, run) -> None:
        """Scenario B: 900 accepted, 950 rejected, 800 accepted."""
        open_auction(router, run)
        session = registry.get("lot-1")

        router.place_bid("conn-a", "lot-1", 900)
        assert session.current_bid == 900

        rejected = router.place_bid("conn-b", "lot-1", 950)
        assert rejected[0].payload["code"] == "BID_TOO_HIGH"
        assert session.current_bid == 900

        router.place_bid("conn-b", "lot-1", 800)
        assert session.current_bid == 800
        assert [bid.amount for bid in session.leaderboard] == [800, 900]

    def test_cooldown_winner(self, router: CommandRouter, registry: SessionRegistry, run) -> None:
        """Scenario C: 30 quiet seconds after a bid end the auction."""
        open_auction(router, run)
        session = registry.get("lot-1")
        router.place_bid("conn-a", "lot-1", 900)
        router.place_bid("conn-b", "lot-1", 850)

        events = run(30)

        assert session.lifecycle_state is LifecycleState.ENDED
        ended = [e for e in events if e.event is EventName.AUCTION_ENDED]
        assert len(ended) == 1
        assert ended[0].payload["reason"] == "cooldown"
        assert ended[0].payload["winner"]["amount"] == 850
        assert ended[0].payload["winner"]["bidder_user_id"] == "bob"

    def test_bid_extends_auction(self, router: CommandRouter, registry: SessionRegistry, run) -> None:
        """A bid inside the cooldown window restarts it."""
        open_auction(router, run)
        session = registry.get("lot-1")
        router.place_bid("conn-a", "lot-1", 900)
        run(20)
        router.place_bid("conn-b", "lot-1", 850)

        run(29)
        assert session.is_active

        run(1)
        assert session.ended_reason is EndReason.COOLDOWN

    def test_timeout_without_bids(self, router: CommandRouter, registry: SessionRegistry, run) -> None:
        """Scenario D: the full time budget runs out with no winner."""
        open_auction(router, run)
        session = registry.get("lot-1")

        run(1799)
        assert session.is_active
        assert session.time_remaining == 1

        events = run(1)

        assert session.time_remaining == 0
        assert session.ended_reason is EndReason.TIMEOUT
        assert events[-1].event is EventName.AUCTION_ENDED
        assert events[-1].payload["winner"] is None
        assert run(5) == []

    def test_shared_user_presence(self, router: CommandRouter, registry: SessionRegistry) -> None:
        """Scenario E: two connections of one user count as one active user."""
        router.join("conn-1", "lot-1", "alice", "Alice")
        events = router.join("conn-2", "lot-1", "alice", "Alice")

        assert events[-1].payload["active_users"] == 1

        events = router.leave("conn-1", "lot-1")

        assert events[0].payload["active_users"] == 1
        assert registry.get("lot-1").active_users == 1

    def test_random_bids_keep_leaderboard_invariants(
        self, router: CommandRouter, registry: SessionRegistry, run
    ) -> None:
        """Leaderboard stays sorted, bounded and led by current_bid."""
        open_auction(router, run)
        session = registry.get("lot-1")
        rng = random.Random(7)

        for _ in range(200):
            previous = session.current_bid
            had_bids = bool(session.leaderboard)
            amount = rng.uniform(1, 1000)
            events = router.place_bid(rng.choice(["conn-a", "conn-b"]), "lot-1", amount)

            if events[0].event is EventName.BID_UPDATE:
                assert not had_bids or amount < previous
            else:
                assert events[0].payload["code"] == "BID_TOO_HIGH"
                assert session.current_bid == previous

            amounts = [bid.amount for bid in session.leaderboard]
            assert amounts == sorted(amounts)
            assert len(amounts) <= 10
            assert session.current_bid == amounts[0]

    def test_sessions_are_independent(self, router: CommandRouter, registry: SessionRegistry, run) -> None:
        """Bids and endings in one session leave another untouched."""
        open_auction(router, run)
        router.join("conn-c", "lot-2", "carol", "Carol")
        router.place_bid("conn-a", "lot-1", 900)

        run(30)

        assert registry.get("lot-1").is_ended
        assert registry.get("lot-2").is_active
        assert registry.get("lot-2").current_bid == 1000.0
