"""
WebSocket endpoint for live auctions.

Each frame is a JSON command ({"type": "join" | "leave" | "place_bid" |
"heartbeat", ...}). Replies and broadcasts are sent as
{"event": <name>, "data": {...}}.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ...models.events import OutboundEvent, command_error_event
from ...services.commands import CommandRouter
from ..connections import ConnectionManager
from ..dependencies import get_command_router, get_connection_manager
from ..schemas import (
    HeartbeatCommand,
    InboundCommand,
    JoinCommand,
    LeaveCommand,
    PlaceBidCommand,
    inbound_command_adapter,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auction"])


def dispatch(
    connection_id: str,
    command: InboundCommand,
    commands: CommandRouter,
    connections: ConnectionManager,
) -> list[OutboundEvent]:
    """Apply one parsed command and keep room membership in step with it."""
    if isinstance(command, JoinCommand):
        # Subscribe first so the joiner also receives the active_users broadcast
        connections.subscribe(connection_id, command.session_id)
        return commands.join(
            connection_id,
            command.session_id,
            command.user_id,
            command.username or command.user_id,
        )
    if isinstance(command, LeaveCommand):
        events = commands.leave(connection_id, command.session_id)
        connections.unsubscribe(connection_id, command.session_id)
        return events
    if isinstance(command, PlaceBidCommand):
        return commands.place_bid(
            connection_id, command.session_id, command.amount, command.username
        )
    if isinstance(command, HeartbeatCommand):
        return commands.heartbeat(command.session_id)
    return []


@router.websocket("/ws")
async def auction_socket(
    websocket: WebSocket,
    commands: Annotated[CommandRouter, Depends(get_command_router)],
    connections: Annotated[ConnectionManager, Depends(get_connection_manager)],
) -> None:
    """Serve one client connection until it disconnects."""
    connection_id = await connections.connect(websocket)
    logger.info(f"Connection {connection_id} opened")
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                command = inbound_command_adapter.validate_json(raw)
            except ValidationError as e:
                events = [command_error_event("INVALID_COMMAND", _first_error(e))]
            else:
                events = dispatch(connection_id, command, commands, connections)
            await connections.publish(events, caller_id=connection_id)
    except WebSocketDisconnect:
        pass
    finally:
        session_ids = connections.disconnect(connection_id)
        await connections.publish(commands.disconnect(connection_id, session_ids))
        logger.info(f"Connection {connection_id} closed")


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return "Invalid command"
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid')}" if location else first.get("msg", "invalid")
