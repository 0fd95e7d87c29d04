"""Logging setup for the editor service."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: str | int = logging.INFO, stream=sys.stderr) -> None:
    """Configure root logging once at startup."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream,
    )
