"""
Command routing.

Maps inbound commands to the session they address and turns bid failures
into caller-only error events.
"""

import logging
from collections.abc import Iterable
from typing import Any

from ..models.events import OutboundEvent, bid_error_event, heartbeat_event
from ..utils.exceptions import BidRejectedError, UnknownSessionError
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class CommandRouter:
    """
    Routes join/leave/place_bid/heartbeat commands to sessions.

    Every method returns the events to publish; none of them raises for
    caller mistakes.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry

    def join(
        self,
        connection_id: str,
        session_id: str,
        user_id: str,
        username: str,
    ) -> list[OutboundEvent]:
        session = self.registry.get_or_create(session_id)
        result = session.join(connection_id, user_id, username)
        logger.info(
            f"Connection {connection_id} joined session {session_id} as {user_id} "
            f"({result.snapshot.active_users} active users)"
        )
        return result.events

    def leave(self, connection_id: str, session_id: str) -> list[OutboundEvent]:
        session = self.registry.get(session_id)
        if session is None:
            return []
        return session.leave(connection_id)

    def place_bid(
        self,
        connection_id: str,
        session_id: str,
        amount: Any,
        username: str | None = None,
    ) -> list[OutboundEvent]:
        """
        Submit a bid on behalf of a connection.

        Returns:
            Broadcast events when accepted, or a single caller-only bid_error
            event when rejected
        """
        try:
            session = self.registry.get(session_id)
            if session is None:
                raise UnknownSessionError(session_id)
            return session.place_bid(connection_id, amount, username).events
        except (BidRejectedError, UnknownSessionError) as e:
            logger.debug(f"Rejected bid on {session_id} from {connection_id}: {e.code}")
            return [bid_error_event(session_id, e.code, e.message)]

    def heartbeat(self, session_id: str | None = None) -> list[OutboundEvent]:
        session = self.registry.get(session_id) if session_id else None
        if session is None:
            return [heartbeat_event(session_id, self.registry.clock())]
        ack = session.heartbeat()
        return [heartbeat_event(ack.session_id, ack.timestamp)]

    def disconnect(self, connection_id: str, session_ids: Iterable[str]) -> list[OutboundEvent]:
        """Leave every session a closing connection had joined."""
        events: list[OutboundEvent] = []
        for session_id in session_ids:
            events.extend(self.leave(connection_id, session_id))
        return events
