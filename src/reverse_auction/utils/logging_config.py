"""Logging configuration for text or JSON formatted logs."""

import logging
import sys
from typing import Literal

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def build_formatter(fmt: Literal["json", "text"] = "text") -> logging.Formatter:
    """Return the formatter for the configured log format."""
    if fmt == "json":
        return jsonlogger.JsonFormatter(
            fmt=LOG_FORMAT,
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
            },
        )
    return logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")


def configure_logging(level: str = "INFO", fmt: Literal["json", "text"] = "text") -> None:
    """
    Configure the root logger and route uvicorn's loggers through it.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
        fmt: "json" for structured output, "text" for human-readable lines

    Note:
        Replaces existing handlers so repeated calls don't duplicate output.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(fmt))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())

    for name in ("uvicorn.access", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False
