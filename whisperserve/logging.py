"""
whisperserve.logging - Centralized logging configuration.

Provides a simple logging setup with optional verbose mode for debugging.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("whisperserve")

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(verbose: bool = False, level: str | None = None) -> None:
    """Configure logging for the whisperserve package.

    Args:
        verbose: If True, enable DEBUG level logging regardless of level
        level: Level name from the server config (debug, info, warning, error);
            defaults to INFO
    """
    if verbose:
        resolved = logging.DEBUG
    else:
        resolved = LEVELS.get((level or "info").lower(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.setLevel(resolved)
