"""Repository for open editor sessions (in-memory)."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from uuid import uuid4

from backend.config import settings
from engine.kernel import Document, Editor

logger = logging.getLogger(__name__)


@dataclass
class DocumentSession:
    """One Editor plus the lock that serialises requests against it."""

    id: str
    editor: Editor
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionLimitReached(Exception):
    """Too many open sessions."""

    pass


class DocumentRepo:
    """All session bookkeeping. Sessions live only as long as the process."""

    def __init__(self, max_sessions: int | None = None):
        self._sessions: dict[str, DocumentSession] = {}
        self._max_sessions = max_sessions if max_sessions is not None else settings.EDITOR_MAX_SESSIONS

    def create(self, document: Document | None = None) -> DocumentSession:
        """
        Open a session, optionally starting from a loaded document.

        Raises:
            SessionLimitReached: when EDITOR_MAX_SESSIONS sessions are open
        """
        if len(self._sessions) >= self._max_sessions:
            raise SessionLimitReached(f"{self._max_sessions} sessions already open")

        editor = Editor(
            document=document,
            history_limit=settings.EDITOR_HISTORY_LIMIT or None,
            id_strategy=settings.EDITOR_ID_STRATEGY,
            root_type=settings.EDITOR_ROOT_TYPE,
        )
        session = DocumentSession(id=uuid4().hex, editor=editor)
        self._sessions[session.id] = session
        logger.info("Opened editor session %s", session.id)
        return session

    def get(self, doc_id: str) -> DocumentSession | None:
        return self._sessions.get(doc_id)

    def delete(self, doc_id: str) -> bool:
        session = self._sessions.pop(doc_id, None)
        if session is None:
            return False
        logger.info("Closed editor session %s", doc_id)
        return True

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
