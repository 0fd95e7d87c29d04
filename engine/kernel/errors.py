"""
Editor Kernel — Error Taxonomy

Every failure the engine can report. All errors are recoverable by the
caller: a rejected command leaves the Document and History untouched.

Kernel functions return these inside result objects (CommandResult,
PlacementResult) rather than raising them. Hosts that prefer exceptions
call `result.unwrap()`.
"""

from __future__ import annotations

from typing import Any


class EditorError(Exception):
    """Base class. `code` is stable and safe to show to API clients."""

    code = "EDITOR_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" if self.message else self.code


class NotFoundError(EditorError):
    code = "BLOCK_NOT_FOUND"


class ParentNotFoundError(EditorError):
    code = "PARENT_NOT_FOUND"


class UnknownTypeError(EditorError):
    code = "UNKNOWN_BLOCK_TYPE"


class SchemaValidationError(EditorError):
    """Payload rejected by the block type's schema."""

    code = "SCHEMA_VALIDATION_FAILED"

    def __init__(self, message: str = "", errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["errors"] = self.errors
        return d


class NotAContainerError(EditorError):
    code = "NOT_A_CONTAINER"


class IndexOutOfRangeError(EditorError):
    code = "INDEX_OUT_OF_RANGE"


class RootRemovalError(EditorError):
    code = "CANT_REMOVE_ROOT"


class CycleRejectedError(EditorError):
    code = "CYCLE_REJECTED"


class DepthLimitError(EditorError):
    """The edit would nest a block deeper than MAX_DEPTH."""

    code = "DEPTH_LIMIT_EXCEEDED"


class NothingToUndoError(EditorError):
    code = "NOTHING_TO_UNDO"


class NothingToRedoError(EditorError):
    code = "NOTHING_TO_REDO"


class UnknownCommandError(EditorError):
    code = "UNKNOWN_COMMAND"


class RegistryFrozenError(EditorError):
    code = "REGISTRY_FROZEN"


class InvariantViolationError(EditorError):
    """
    The Document breaks a tree invariant. Indicates a bad load or a write
    that bypassed the command layer. Never repaired silently.
    """

    code = "INVARIANT_VIOLATION"

    def __init__(self, message: str = "", violations: list[str] | None = None):
        super().__init__(message)
        self.violations = violations or []

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["violations"] = self.violations
        return d
