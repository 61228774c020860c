"""
Auction scheduler.

Drives every session forward once per tick and periodically sweeps ended
sessions past their retention window. The tick and sweep steps are plain
methods so tests can feed synthetic ticks; run_ticks/run_sweeps wrap them
in asyncio loops for the running server.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..models.events import OutboundEvent
from .auction import Clock, utc_now
from .registry import SessionRegistry

logger = logging.getLogger(__name__)

Publisher = Callable[[list[OutboundEvent]], Awaitable[None]]


class AuctionScheduler:
    """
    Periodic driver for all sessions in a registry.

    Attributes:
        registry: Sessions to drive
        publisher: Coroutine receiving the events produced by each tick
        tick_interval: Seconds between ticks
        sweep_interval: Seconds between retention sweeps
        retention_seconds: Age after which ended sessions are removed
    """

    def __init__(
        self,
        registry: SessionRegistry,
        publisher: Publisher | None = None,
        *,
        tick_interval: float = 1.0,
        sweep_interval: float = 3600,
        retention_seconds: float = 86400,
        clock: Clock = utc_now,
    ) -> None:
        self.registry = registry
        self.publisher = publisher
        self.tick_interval = tick_interval
        self.sweep_interval = sweep_interval
        self.retention_seconds = retention_seconds
        self._clock = clock

    def tick(self) -> list[OutboundEvent]:
        """
        Advance every session by one tick.

        Returns:
            Events produced across all sessions

        Note:
            A session whose tick raises is logged and skipped; the remaining
            sessions still tick.
        """
        events: list[OutboundEvent] = []
        for session in self.registry.all():
            try:
                events.extend(session.tick())
            except Exception:
                logger.exception(f"Tick failed for session {session.session_id}")
        return events

    def sweep(self) -> int:
        """
        Remove ended sessions older than the retention window.

        Returns:
            Number of sessions removed
        """
        now = self._clock()
        sessions = self.registry.all()
        expired = [s for s in sessions if s.is_expired(self.retention_seconds, now)]
        for session in expired:
            self.registry.remove(session.session_id)

        active = sum(1 for s in sessions if s.is_active)
        ended = sum(1 for s in sessions if s.is_ended)
        logger.info(
            f"Session sweep: {len(sessions)} total, {active} active, "
            f"{ended} ended, {len(expired)} removed"
        )
        return len(expired)

    async def _publish(self, events: list[OutboundEvent]) -> None:
        if not events or self.publisher is None:
            return
        try:
            await self.publisher(events)
        except Exception:
            logger.exception("Failed to publish tick events")

    async def run_ticks(self, shutdown_event: asyncio.Event) -> None:
        """
        Tick all sessions every tick_interval seconds until shutdown.

        Args:
            shutdown_event: Set to stop the loop
        """
        while not shutdown_event.is_set():
            try:
                # Wait for tick interval or shutdown signal
                await asyncio.wait_for(shutdown_event.wait(), timeout=self.tick_interval)
                break
            except TimeoutError:
                await self._publish(self.tick())

    async def run_sweeps(self, shutdown_event: asyncio.Event) -> None:
        """
        Sweep expired sessions every sweep_interval seconds until shutdown.

        Args:
            shutdown_event: Set to stop the loop
        """
        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self.sweep_interval)
                break
            except TimeoutError:
                self.sweep()
