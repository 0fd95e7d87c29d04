"""
Editor Kernel — History

Linear undo/redo over Document snapshots.

    S[0] ... S[c] ... S[n]
             ^ cursor

commit() drops everything after the cursor and appends. undo()/redo() only
move the cursor. Snapshots are immutable Documents, so keeping them costs
one dict of shared BlockNodes each.
"""

from __future__ import annotations

from engine.kernel.document import Document
from engine.kernel.errors import NothingToRedoError, NothingToUndoError
from engine.kernel.types import CommandResult


class History:
    def __init__(self, initial: Document | None = None, limit: int | None = None):
        """
        `limit` caps the number of retained snapshots (None or 0 = unbounded).
        When exceeded the oldest snapshots are dropped.
        """
        if limit is not None and limit < 0:
            raise ValueError("History limit must be >= 0")
        self._limit = limit or None
        self._snapshots: list[Document] = [initial if initial is not None else Document.empty()]
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def current(self) -> Document:
        return self._snapshots[self._cursor]

    def commit(self, doc: Document) -> None:
        """Record `doc` as the newest state, discarding any redo branch."""
        del self._snapshots[self._cursor + 1 :]
        self._snapshots.append(doc)
        self._cursor += 1

        if self._limit is not None and len(self._snapshots) > self._limit:
            overflow = len(self._snapshots) - self._limit
            del self._snapshots[:overflow]
            self._cursor -= overflow

    def undo(self) -> CommandResult:
        if not self.can_undo:
            return CommandResult(document=self.current(), applied=False, error=NothingToUndoError("Nothing to undo"))
        self._cursor -= 1
        return CommandResult(document=self.current(), applied=True)

    def redo(self) -> CommandResult:
        if not self.can_redo:
            return CommandResult(document=self.current(), applied=False, error=NothingToRedoError("Nothing to redo"))
        self._cursor += 1
        return CommandResult(document=self.current(), applied=True)

    def reset(self, doc: Document) -> None:
        """Start over from `doc` with an empty history."""
        self._snapshots = [doc]
        self._cursor = 0
