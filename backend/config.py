"""
Editor service configuration — all environment variables in one place.

Read from environment at runtime. The kernel never reads the environment;
values are passed in from here.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # History
    EDITOR_HISTORY_LIMIT: int = int(os.environ.get("EDITOR_HISTORY_LIMIT", "100"))  # 0 = unbounded

    # Block ids: "counter" (block-1, block-2, ...) or "uuid"
    EDITOR_ID_STRATEGY: str = os.environ.get("EDITOR_ID_STRATEGY", "counter")

    # Type of the root block of new documents
    EDITOR_ROOT_TYPE: str = os.environ.get("EDITOR_ROOT_TYPE", "EmailLayout")

    # Sessions
    EDITOR_MAX_SESSIONS: int = int(os.environ.get("EDITOR_MAX_SESSIONS", "1000"))

    # Logging
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")


# Singleton instance
settings = Settings()

if settings.EDITOR_ID_STRATEGY not in ("counter", "uuid"):
    raise RuntimeError("EDITOR_ID_STRATEGY must be 'counter' or 'uuid'")
if settings.EDITOR_HISTORY_LIMIT < 0:
    raise RuntimeError("EDITOR_HISTORY_LIMIT must be >= 0")
