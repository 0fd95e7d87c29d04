"""
Editor Kernel — Placement Resolver

Turns a drop intent from the drag subsystem into a validated
(container, index) pair, or refuses it. The resolver is the single source
of truth for which container receives a dropped block.

Rules:
  - the target must exist and be able to hold children
  - a new block's type must be registered
  - an existing block cannot be dropped into itself or its own subtree
  - the pointer's index estimate is clamped to the container's bounds
"""

from __future__ import annotations

from engine.kernel.blocks import default_registry
from engine.kernel.document import Document
from engine.kernel.errors import (
    CycleRejectedError,
    EditorError,
    NotAContainerError,
    NotFoundError,
    ParentNotFoundError,
    UnknownTypeError,
)
from engine.kernel.registry import SchemaRegistry
from engine.kernel.types import DropIntent, PlacementResult


def resolve(doc: Document, intent: DropIntent, registry: SchemaRegistry | None = None) -> PlacementResult:
    registry = registry or default_registry()

    if (intent.block_type is None) == (intent.block_id is None):
        return _refuse(NotFoundError("Drop intent needs exactly one of block_type or block_id"))

    target = doc.find(intent.container_id)
    if target is None:
        return _refuse(ParentNotFoundError(f"Container '{intent.container_id}' not found"))
    if not target.is_container or not registry.can_have_children(target.type):
        return _refuse(NotAContainerError(f"'{intent.container_id}' ({target.type}) cannot have children"))

    children = list(target.children_ids or ())

    if intent.is_new_block:
        if intent.block_type not in registry:
            return _refuse(UnknownTypeError(f"Unknown block type: {intent.block_type}"))
        return PlacementResult(accepted=True, container_id=target.id, index=_clamp(intent.index, len(children)))

    block_id = intent.block_id
    assert block_id is not None
    if block_id not in doc:
        return _refuse(NotFoundError(f"Block '{block_id}' not found"))
    if target.id == block_id or target.id in doc.descendants(block_id):
        return _refuse(CycleRejectedError(f"Cannot drop '{block_id}' into itself or its descendant '{target.id}'"))

    index = intent.index
    if block_id in children:
        # The pointer saw the list with the dragged block still in it
        if index > children.index(block_id):
            index -= 1
        children.remove(block_id)
    return PlacementResult(accepted=True, container_id=target.id, index=_clamp(index, len(children)))


def _clamp(index: int, size: int) -> int:
    return max(0, min(index, size))


def _refuse(error: EditorError) -> PlacementResult:
    return PlacementResult(accepted=False, error=error)
