"""
WebSocket connection manager.

Keeps one room per auction session and fans outbound events out to the
caller or to every subscriber of a session. Delivery is fire-and-forget: a
failed send drops that subscriber and never reaches session state.
"""

import logging
import uuid
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

from ..models.events import Audience, OutboundEvent

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Tracks open WebSockets and their session subscriptions.

    Attributes:
        _connections: connection_id -> WebSocket
        _rooms: session_id -> subscribed connection ids
        _memberships: connection_id -> joined session ids
    """

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._rooms: dict[str, set[str]] = defaultdict(set)
        self._memberships: dict[str, set[str]] = defaultdict(set)

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept a WebSocket and assign it a connection id.

        Returns:
            New connection identifier
        """
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self._connections[connection_id] = websocket
        return connection_id

    def subscribe(self, connection_id: str, session_id: str) -> None:
        self._rooms[session_id].add(connection_id)
        self._memberships[connection_id].add(session_id)

    def unsubscribe(self, connection_id: str, session_id: str) -> None:
        room = self._rooms.get(session_id)
        if room is not None:
            room.discard(connection_id)
            if not room:
                del self._rooms[session_id]
        self._memberships.get(connection_id, set()).discard(session_id)

    def disconnect(self, connection_id: str) -> set[str]:
        """
        Forget a connection.

        Returns:
            Session ids the connection had joined
        """
        session_ids = self._memberships.pop(connection_id, set())
        for session_id in session_ids:
            self.unsubscribe(connection_id, session_id)
        self._connections.pop(connection_id, None)
        return session_ids

    def subscriber_count(self, session_id: str) -> int:
        return len(self._rooms.get(session_id, ()))

    async def publish(self, events: list[OutboundEvent], caller_id: str | None = None) -> None:
        """
        Deliver events to their audience.

        Args:
            events: Events to deliver, in order
            caller_id: Connection that issued the command (for caller-only events)
        """
        for event in events:
            if event.audience is Audience.CALLER:
                targets = [caller_id] if caller_id else []
            else:
                targets = list(self._rooms.get(event.session_id or "", ()))

            message = event.to_message()
            for connection_id in targets:
                await self._send(connection_id, message)

    async def _send(self, connection_id: str, message: dict[str, Any]) -> None:
        websocket = self._connections.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.warning(f"Dropping connection {connection_id} after failed send: {e}")
            self._connections.pop(connection_id, None)
            for room in self._rooms.values():
                room.discard(connection_id)
