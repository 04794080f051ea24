"""
Logging setup for harness runs.
"""

from __future__ import annotations

import logging

from paytester.config import settings


def configure_logging() -> None:
    """Configure root logging from settings (stream + optional file handler)."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(settings.LOG_FILE)
            if settings.LOG_FILE
            else logging.NullHandler(),
        ],
    )

    # Per-request lines from the health poller and RPC client drown the flow logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
