"""
Application entry point.

Run with: python -m reverse_auction
"""

import uvicorn

from .api.app import create_app
from .config import get_settings
from .utils.logging_config import configure_logging


def main() -> None:
    """Start the FastAPI application server."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
