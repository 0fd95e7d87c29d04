"""
Editor Kernel — Command Layer

Pure functions: (document, args) → CommandResult
No side effects. No IO. No history.

The only writer of Documents. Each command checks its preconditions first
and either returns a brand-new Document or rejects with a typed error;
nothing is ever half-applied. The input Document is never modified.

Callers decide whether a result goes into History; previews skip it.
"""

from __future__ import annotations

import copy
from typing import Any, Callable

from engine.kernel.blocks import default_registry
from engine.kernel.document import Document, IdAllocator
from engine.kernel.errors import (
    CycleRejectedError,
    DepthLimitError,
    EditorError,
    IndexOutOfRangeError,
    InvariantViolationError,
    NotAContainerError,
    NotFoundError,
    ParentNotFoundError,
    RootRemovalError,
    UnknownCommandError,
)
from engine.kernel.registry import SchemaRegistry
from engine.kernel.types import MAX_DEPTH, ROOT_ID, BlockNode, CommandResult

# Process-wide allocator so ids stay unique across documents
_default_allocator = IdAllocator()

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def create_and_insert(
    doc: Document,
    parent_id: str,
    block_type: str,
    style: dict[str, Any] | None = None,
    props: dict[str, Any] | None = None,
    index: int | None = None,
    *,
    registry: SchemaRegistry | None = None,
    allocator: IdAllocator | None = None,
) -> CommandResult:
    """
    Create a block of `block_type` and splice it into `parent_id` at `index`
    (append when None). Returns the new id in `result.block_id`.
    """
    registry = registry or default_registry()
    allocator = allocator or _default_allocator
    style = copy.deepcopy(style) if style is not None else {}
    props = copy.deepcopy(props) if props is not None else {}

    parent = doc.find(parent_id)
    if parent is None:
        return _reject(doc, ParentNotFoundError(f"Parent '{parent_id}' not found"))
    if not parent.is_container or not registry.can_have_children(parent.type):
        return _reject(doc, NotAContainerError(f"'{parent_id}' ({parent.type}) cannot have children"))
    if doc.depth_of(parent_id) + 1 > MAX_DEPTH:
        return _reject(doc, DepthLimitError(f"'{parent_id}' is already {MAX_DEPTH} levels deep"))

    error = registry.validate(block_type, props, style)
    if error is not None:
        return _reject(doc, error)

    children = list(parent.children_ids or ())
    if index is None:
        index = len(children)
    elif index < 0 or index > len(children):
        return _reject(doc, IndexOutOfRangeError(f"Index {index} outside [0, {len(children)}] for '{parent_id}'"))

    block_id = allocator.next_id(doc)
    node = BlockNode(
        id=block_id,
        type=block_type,
        style=style,
        props=props,
        children_ids=() if registry.can_have_children(block_type) else None,
    )
    children.insert(index, block_id)

    new_doc = doc.replace({block_id: node, parent_id: parent.with_children(children)})
    return _ok(new_doc, block_id)


def remove(doc: Document, block_id: str) -> CommandResult:
    """Delete a block and every descendant, and splice it out of its parent."""
    if block_id == ROOT_ID:
        return _reject(doc, RootRemovalError("Cannot remove root"))
    if block_id not in doc:
        return _reject(doc, NotFoundError(f"Block '{block_id}' not found"))

    # Collect block and all descendants
    to_remove = [block_id, *doc.descendants(block_id)]

    updates: dict[str, BlockNode] = {}
    parent_id = doc.parent_of(block_id)
    if parent_id is not None:
        parent = doc[parent_id]
        updates[parent_id] = parent.with_children([c for c in parent.children_ids or () if c != block_id])

    return _ok(doc.replace(updates, set(to_remove)), block_id)


def reorder(doc: Document, parent_id: str, from_index: int, to_index: int) -> CommandResult:
    """Move the child at `from_index` to `to_index` within one parent."""
    parent = doc.find(parent_id)
    if parent is None:
        return _reject(doc, ParentNotFoundError(f"Parent '{parent_id}' not found"))
    if not parent.is_container:
        return _reject(doc, NotAContainerError(f"'{parent_id}' ({parent.type}) has no children"))

    children = list(parent.children_ids or ())
    size = len(children)
    for name, value in (("from_index", from_index), ("to_index", to_index)):
        if value < 0 or value >= size:
            return _reject(doc, IndexOutOfRangeError(f"{name} {value} outside [0, {size}) for '{parent_id}'"))

    moved = children.pop(from_index)
    children.insert(to_index, moved)
    return _ok(doc.replace({parent_id: parent.with_children(children)}), moved)


def update_props(
    doc: Document,
    block_id: str,
    props: dict[str, Any],
    *,
    registry: SchemaRegistry | None = None,
    merge: bool = True,
) -> CommandResult:
    """Shallow-merge into a block's props; merge=False replaces it outright."""
    return _update_payload(doc, block_id, "props", props, registry or default_registry(), merge)


def update_style(
    doc: Document,
    block_id: str,
    style: dict[str, Any],
    *,
    registry: SchemaRegistry | None = None,
    merge: bool = True,
) -> CommandResult:
    """Shallow-merge into a block's style; merge=False replaces it outright."""
    return _update_payload(doc, block_id, "style", style, registry or default_registry(), merge)


def move(
    doc: Document,
    block_id: str,
    parent_id: str,
    index: int | None = None,
    *,
    registry: SchemaRegistry | None = None,
) -> CommandResult:
    """
    Detach a block from its parent and attach it to `parent_id` at `index`,
    as one step. `index` counts positions in the target list with the block
    already detached; None appends.
    """
    registry = registry or default_registry()

    if block_id == ROOT_ID:
        return _reject(doc, RootRemovalError("Cannot move root"))
    if block_id not in doc:
        return _reject(doc, NotFoundError(f"Block '{block_id}' not found"))
    target = doc.find(parent_id)
    if target is None:
        return _reject(doc, ParentNotFoundError(f"Parent '{parent_id}' not found"))
    if not target.is_container or not registry.can_have_children(target.type):
        return _reject(doc, NotAContainerError(f"'{parent_id}' ({target.type}) cannot have children"))
    if parent_id == block_id or parent_id in doc.descendants(block_id):
        return _reject(doc, CycleRejectedError(f"Cannot move '{block_id}' into itself or its descendant '{parent_id}'"))
    if doc.depth_of(parent_id) + 1 + doc.subtree_height(block_id) > MAX_DEPTH:
        return _reject(
            doc, DepthLimitError(f"Moving '{block_id}' under '{parent_id}' would nest deeper than {MAX_DEPTH} levels")
        )

    old_parent_id = doc.parent_of(block_id)
    updates: dict[str, BlockNode] = {}
    if old_parent_id is not None:
        old_parent = doc[old_parent_id]
        updates[old_parent_id] = old_parent.with_children([c for c in old_parent.children_ids or () if c != block_id])

    base = updates.get(parent_id, target)
    children = list(base.children_ids or ())
    if index is None:
        index = len(children)
    elif index < 0 or index > len(children):
        return _reject(doc, IndexOutOfRangeError(f"Index {index} outside [0, {len(children)}] for '{parent_id}'"))
    children.insert(index, block_id)
    updates[parent_id] = base.with_children(children)

    return _ok(doc.replace(updates), block_id)


def duplicate(doc: Document, block_id: str, *, allocator: IdAllocator | None = None) -> CommandResult:
    """
    Copy a block and its whole subtree under fresh ids, placing the copy
    right after the original. Returns the copy's id.
    """
    allocator = allocator or _default_allocator

    if block_id == ROOT_ID:
        return _reject(doc, RootRemovalError("Cannot duplicate root"))
    if block_id not in doc:
        return _reject(doc, NotFoundError(f"Block '{block_id}' not found"))

    new_nodes: dict[str, BlockNode] = {}

    parent_id = doc.parent_of(block_id)
    if parent_id is None:
        return _reject(doc, InvariantViolationError(f"Block '{block_id}' has no parent"))

    # Fresh ids in depth-first order, then nodes rewired to them
    new_ids: dict[str, str] = {}
    for bid in (block_id, *doc.descendants(block_id)):
        new_id = allocator.next_id(doc)
        while new_id in new_nodes:
            new_id = allocator.next_id(doc)
        new_nodes[new_id] = doc[bid]
        new_ids[bid] = new_id

    for old_id, new_id in new_ids.items():
        node = doc[old_id]
        children = None
        if node.children_ids is not None:
            children = tuple(new_ids[c] for c in node.children_ids)
        new_nodes[new_id] = BlockNode(
            id=new_id,
            type=node.type,
            style=node.style,
            props=node.props,
            children_ids=children,
        )

    copy_id = new_ids[block_id]
    parent = doc[parent_id]
    children = list(parent.children_ids or ())
    children.insert(children.index(block_id) + 1, copy_id)
    new_nodes[parent_id] = parent.with_children(children)

    return _ok(doc.replace(new_nodes), copy_id)


def apply(
    doc: Document,
    name: str,
    payload: dict[str, Any],
    *,
    registry: SchemaRegistry | None = None,
    allocator: IdAllocator | None = None,
) -> CommandResult:
    """
    Run a command by name with a JSON-style payload.

    block.create        {parent, type, style?, props?, index?}
    block.remove        {id}
    block.reorder       {parent, from, to}
    block.move          {id, parent, index?}
    block.duplicate     {id}
    block.update_props  {id, props, merge?}
    block.update_style  {id, style, merge?}
    """
    handler = _HANDLERS.get(name)
    if handler is None:
        return _reject(doc, UnknownCommandError(f"Unknown command: {name}"))
    try:
        return handler(doc, payload, registry or default_registry(), allocator or _default_allocator)
    except KeyError as exc:
        return _reject(doc, UnknownCommandError(f"{name} requires {exc}"))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(doc: Document, error: EditorError) -> CommandResult:
    return CommandResult(document=doc, applied=False, error=error)


def _ok(doc: Document, block_id: str | None = None) -> CommandResult:
    return CommandResult(document=doc, applied=True, block_id=block_id)


def _update_payload(
    doc: Document,
    block_id: str,
    part: str,
    payload: dict[str, Any],
    registry: SchemaRegistry,
    merge: bool,
) -> CommandResult:
    node = doc.find(block_id)
    if node is None:
        return _reject(doc, NotFoundError(f"Block '{block_id}' not found"))

    current = node.props if part == "props" else node.style
    if merge and isinstance(payload, dict):
        new_payload = {**copy.deepcopy(current), **copy.deepcopy(payload)}
    else:
        new_payload = copy.deepcopy(payload)

    if part == "props":
        error = registry.validate(node.type, new_payload, node.style)
    else:
        error = registry.validate(node.type, node.props, new_payload)
    if error is not None:
        return _reject(doc, error)

    new_node = node.with_props(new_payload) if part == "props" else node.with_style(new_payload)
    return _ok(doc.replace({block_id: new_node}), block_id)


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------


def _handle_create(doc: Document, p: dict, registry: SchemaRegistry, allocator: IdAllocator) -> CommandResult:
    return create_and_insert(
        doc,
        p["parent"],
        p["type"],
        p.get("style"),
        p.get("props"),
        p.get("index"),
        registry=registry,
        allocator=allocator,
    )


def _handle_remove(doc: Document, p: dict, registry: SchemaRegistry, allocator: IdAllocator) -> CommandResult:
    return remove(doc, p["id"])


def _handle_reorder(doc: Document, p: dict, registry: SchemaRegistry, allocator: IdAllocator) -> CommandResult:
    return reorder(doc, p["parent"], p["from"], p["to"])


def _handle_move(doc: Document, p: dict, registry: SchemaRegistry, allocator: IdAllocator) -> CommandResult:
    return move(doc, p["id"], p["parent"], p.get("index"), registry=registry)


def _handle_duplicate(doc: Document, p: dict, registry: SchemaRegistry, allocator: IdAllocator) -> CommandResult:
    return duplicate(doc, p["id"], allocator=allocator)


def _handle_update_props(doc: Document, p: dict, registry: SchemaRegistry, allocator: IdAllocator) -> CommandResult:
    return update_props(doc, p["id"], p["props"], registry=registry, merge=p.get("merge", True))


def _handle_update_style(doc: Document, p: dict, registry: SchemaRegistry, allocator: IdAllocator) -> CommandResult:
    return update_style(doc, p["id"], p["style"], registry=registry, merge=p.get("merge", True))


_HANDLERS: dict[str, Callable[..., CommandResult]] = {
    "block.create": _handle_create,
    "block.remove": _handle_remove,
    "block.reorder": _handle_reorder,
    "block.move": _handle_move,
    "block.duplicate": _handle_duplicate,
    "block.update_props": _handle_update_props,
    "block.update_style": _handle_update_style,
}
