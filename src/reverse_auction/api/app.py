"""
FastAPI application factory.

Creates and configures the FastAPI application with middleware, routes and
the background tick and sweep loops.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings, get_settings
from ..services.commands import CommandRouter
from ..services.registry import SessionRegistry
from ..services.scheduler import AuctionScheduler
from .connections import ConnectionManager
from .middleware import error_handler_middleware
from .routes import auction, health, sessions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager for startup/shutdown tasks.

    Starts the per-second tick loop and the retention sweep loop on startup,
    stops them on shutdown.
    """
    scheduler: AuctionScheduler = app.state.scheduler

    # Startup
    shutdown_event = asyncio.Event()
    tick_task = asyncio.create_task(scheduler.run_ticks(shutdown_event))
    sweep_task = asyncio.create_task(scheduler.run_sweeps(shutdown_event))
    logger.info(
        f"Scheduler started (tick every {scheduler.tick_interval}s, "
        f"sweep every {scheduler.sweep_interval}s)"
    )

    yield

    # Shutdown
    shutdown_event.set()
    await tick_task
    await sweep_task


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to use (defaults to environment-loaded settings)

    Returns:
        Configured FastAPI application instance

    Configuration:
        - CORS middleware for cross-origin requests
        - Error handling middleware for domain exceptions
        - Session registry, command router and connection manager on app.state
        - Background tick and sweep tasks
        - WebSocket endpoint at /ws, health check, session summaries
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Reverse Auction Server",
        description="Live reverse auctions over WebSockets",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    registry = SessionRegistry(settings)
    connections = ConnectionManager()
    app.state.settings = settings
    app.state.registry = registry
    app.state.connections = connections
    app.state.commands = CommandRouter(registry)
    app.state.scheduler = AuctionScheduler(
        registry,
        connections.publish,
        tick_interval=settings.tick_interval,
        sweep_interval=settings.sweep_interval,
        retention_seconds=settings.session_retention,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handling middleware
    app.middleware("http")(error_handler_middleware)

    # Register routes
    app.include_router(health.router)
    app.include_router(sessions.router)
    app.include_router(auction.router)

    return app
