"""
FastAPI dependency injection helpers.

The registry, command router and connection manager are created once per
application in create_app() and kept on app.state; these helpers hand them
to HTTP routes and WebSocket endpoints alike.
"""

from fastapi.requests import HTTPConnection

from ..services.commands import CommandRouter
from ..services.registry import SessionRegistry
from .connections import ConnectionManager


def get_registry(connection: HTTPConnection) -> SessionRegistry:
    return connection.app.state.registry


def get_command_router(connection: HTTPConnection) -> CommandRouter:
    return connection.app.state.commands


def get_connection_manager(connection: HTTPConnection) -> ConnectionManager:
    return connection.app.state.connections
