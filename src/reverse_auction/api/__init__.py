"""
FastAPI application and API components.

Main exports:
    create_app: Application factory function
    ConnectionManager: WebSocket fan-out by session
    ErrorResponse: Standardized error response schema
    HealthCheckResponse: Health check response schema
"""

from .app import create_app
from .connections import ConnectionManager
from .schemas import ErrorResponse, HealthCheckResponse

__all__ = ["create_app", "ConnectionManager", "ErrorResponse", "HealthCheckResponse"]
