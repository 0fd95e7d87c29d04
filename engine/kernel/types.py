"""
Editor Kernel — Shared Types

Data classes used across registry, document, commands, history, placement,
and renderer. These are the contracts that bind the kernel together.

Key points:
- `root` is the reserved id of the top-level container
- `children_ids` is None for leaf blocks, a tuple for containers
- BlockNode is frozen; commands build new nodes instead of editing old ones
- style/props are copied in and stored as read-only FrozenPayloads, so a
  node handed out by one Document can never change under another
- Commands never throw; they return a CommandResult
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from engine.kernel.errors import EditorError, InvariantViolationError

if TYPE_CHECKING:
    from engine.kernel.document import Document

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ROOT_ID = "root"
DEFAULT_ROOT_TYPE = "EmailLayout"

# Deepest a block may sit below root (root itself is depth 0)
MAX_DEPTH = 100


# ---------------------------------------------------------------------------
# Read-only payloads
# ---------------------------------------------------------------------------


class FrozenPayload(dict):
    """
    Read-only dict holding a block's style or props.

    Still a dict, so json, pydantic and isinstance checks accept it.
    copy.deepcopy() hands back plain, editable dicts and lists.
    """

    __slots__ = ()

    def _readonly(self, *args: Any, **kwargs: Any) -> Any:
        raise TypeError("block payloads are read-only; build a new payload instead")

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

    def __copy__(self) -> FrozenPayload:
        return self

    def __deepcopy__(self, memo: dict) -> dict[str, Any]:
        return thaw(self)

    def __reduce__(self):
        return (freeze, (thaw(self),))


def freeze(value: Any) -> Any:
    """Copy a JSON-like value into read-only form: mappings frozen, lists made tuples."""
    if isinstance(value, FrozenPayload):
        return value
    if isinstance(value, Mapping):
        return FrozenPayload((k, freeze(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Deep copy a payload back into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BlockNode:
    """
    One typed block in the document tree.

    style and props are opaque payloads. Only the schema registry looks
    inside them, and only to accept or reject.
    """

    id: str
    type: str
    style: dict[str, Any] = field(default_factory=dict)
    props: dict[str, Any] = field(default_factory=dict)
    children_ids: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "style", freeze(self.style))
        object.__setattr__(self, "props", freeze(self.props))

    @property
    def is_container(self) -> bool:
        return self.children_ids is not None

    def with_children(self, children_ids: list[str] | tuple[str, ...]) -> BlockNode:
        return replace(self, children_ids=tuple(children_ids))

    def with_props(self, props: dict[str, Any]) -> BlockNode:
        return replace(self, props=props)

    def with_style(self, style: dict[str, Any]) -> BlockNode:
        return replace(self, style=style)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "style": thaw(self.style),
            "props": thaw(self.props),
        }
        if self.children_ids is not None:
            d["childrenIds"] = list(self.children_ids)
        return d

    @classmethod
    def from_dict(cls, block_id: str, d: dict[str, Any]) -> BlockNode:
        children = d.get("childrenIds")
        return cls(
            id=block_id,
            type=d["type"],
            style=d.get("style") or {},
            props=d.get("props") or {},
            children_ids=tuple(children) if children is not None else None,
        )


@dataclass
class CommandResult:
    """
    Result of running one command (or undo/redo) against a Document.

    On rejection `document` is the untouched input and `error` says why.
    """

    document: Document
    applied: bool
    error: EditorError | None = None
    block_id: str | None = None

    def unwrap(self) -> Document:
        """Return the document, raising the error if the command was rejected."""
        if self.error is not None:
            raise self.error
        return self.document


@dataclass(frozen=True)
class DropIntent:
    """
    What the drag subsystem hands over when the pointer is released.

    Exactly one of block_type (a new block from the sidebar) or block_id
    (an existing block being moved) is set.
    """

    container_id: str
    index: int
    block_type: str | None = None
    block_id: str | None = None
    style: dict[str, Any] | None = None
    props: dict[str, Any] | None = None

    @property
    def is_new_block(self) -> bool:
        return self.block_type is not None


@dataclass
class PlacementResult:
    """Validated (container, index) for a drop, or the reason it was refused."""

    accepted: bool
    container_id: str | None = None
    index: int | None = None
    error: EditorError | None = None

    def unwrap(self) -> tuple[str, int]:
        if self.error is not None:
            raise self.error
        if self.container_id is None or self.index is None:
            raise InvariantViolationError("accepted placement has no container or index")
        return self.container_id, self.index
