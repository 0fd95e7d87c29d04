"""
Editor Kernel — Document Store

A Document is an immutable value: a flat map of block id → BlockNode with
exactly one `root`. Commands never edit a Document; they build a new one
that shares every unchanged BlockNode with its predecessor (copy-on-write).
That makes any Document safe to hand to the renderer or keep in history.

Also here:
  - check_invariants: the tree invariants, as a list of violations
  - from_canonical_json: rebuild a Document from the nested export shape
  - IdAllocator: fresh block ids, never reused within the process
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterator, Mapping
from typing import Any

from engine.kernel.blocks import default_registry
from engine.kernel.errors import InvariantViolationError, NotFoundError
from engine.kernel.registry import SchemaRegistry
from engine.kernel.types import DEFAULT_ROOT_TYPE, MAX_DEPTH, ROOT_ID, BlockNode


class Document(Mapping):
    """Read-only mapping of block id → BlockNode."""

    __slots__ = ("_blocks",)

    def __init__(self, blocks: dict[str, BlockNode]):
        # Callers hand over ownership of `blocks`; use from_blocks() for untrusted input
        self._blocks = blocks

    # -- construction -------------------------------------------------------

    @classmethod
    def empty(
        cls,
        root_type: str = DEFAULT_ROOT_TYPE,
        root_props: dict[str, Any] | None = None,
        root_style: dict[str, Any] | None = None,
    ) -> Document:
        root = BlockNode(
            id=ROOT_ID,
            type=root_type,
            style=dict(root_style or {}),
            props=dict(root_props or {}),
            children_ids=(),
        )
        return cls({ROOT_ID: root})

    @classmethod
    def from_blocks(
        cls,
        blocks: Mapping[str, BlockNode | dict[str, Any]],
        registry: SchemaRegistry | None = None,
    ) -> Document:
        """
        Load a flat map (BlockNodes or `{type, style, props, childrenIds}`
        dicts). Raises InvariantViolationError if the tree is malformed.
        """
        nodes: dict[str, BlockNode] = {}
        for block_id, block in blocks.items():
            if isinstance(block, BlockNode):
                nodes[block_id] = block
            elif isinstance(block, dict) and "type" in block:
                nodes[block_id] = BlockNode.from_dict(block_id, block)
            else:
                raise InvariantViolationError(
                    f"Block '{block_id}' is not a block object",
                    violations=[f"block '{block_id}' has no type"],
                )

        doc = cls(nodes)
        violations = check_invariants(doc, registry)
        if violations:
            raise InvariantViolationError(
                f"{len(violations)} invariant violation(s): {violations[0]}",
                violations=violations,
            )
        return doc

    # -- Mapping protocol ---------------------------------------------------

    def __getitem__(self, block_id: str) -> BlockNode:
        return self._blocks[block_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Document):
            return self._blocks == other._blocks
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Document({len(self._blocks)} blocks)"

    # -- queries ------------------------------------------------------------

    @property
    def root(self) -> BlockNode:
        return self._blocks[ROOT_ID]

    def get(self, block_id: str) -> BlockNode:  # type: ignore[override]
        """Return the block, raising NotFoundError if absent."""
        node = self._blocks.get(block_id)
        if node is None:
            raise NotFoundError(f"Block '{block_id}' not found")
        return node

    def find(self, block_id: str) -> BlockNode | None:
        return self._blocks.get(block_id)

    def ids(self) -> list[str]:
        return list(self._blocks)

    def parent_of(self, block_id: str) -> str | None:
        for node in self._blocks.values():
            if node.children_ids and block_id in node.children_ids:
                return node.id
        return None

    def descendants(self, block_id: str) -> list[str]:
        """All ids below `block_id`, depth-first in child order."""
        result: list[str] = []
        seen: set[str] = {block_id}
        node = self._blocks.get(block_id)
        stack = list(reversed(node.children_ids or ())) if node is not None else []
        while stack:
            bid = stack.pop()
            if bid in seen:
                continue
            seen.add(bid)
            result.append(bid)
            node = self._blocks.get(bid)
            if node is not None and node.children_ids:
                stack.extend(reversed(node.children_ids))
        return result

    def depth_of(self, block_id: str) -> int:
        """Levels between root and `block_id`; root is 0. Raises NotFoundError."""
        self.get(block_id)
        parents = {child: node.id for node in self._blocks.values() for child in node.children_ids or ()}
        depth = 0
        seen: set[str] = set()
        while block_id != ROOT_ID and block_id in parents and block_id not in seen:
            seen.add(block_id)
            block_id = parents[block_id]
            depth += 1
        return depth

    def subtree_height(self, block_id: str) -> int:
        """Levels below `block_id`; 0 for a leaf or an empty container."""
        height = 0
        seen: set[str] = set()
        stack = [(block_id, 0)]
        while stack:
            bid, level = stack.pop()
            if bid in seen:
                continue
            seen.add(bid)
            height = max(height, level)
            node = self._blocks.get(bid)
            if node is not None and node.children_ids:
                stack.extend((child, level + 1) for child in node.children_ids)
        return height

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Plain flat-map copy, JSON-serialisable."""
        return {block_id: node.to_dict() for block_id, node in self._blocks.items()}

    # -- copy-on-write helper -----------------------------------------------

    def replace(
        self,
        updates: Mapping[str, BlockNode] | None = None,
        removals: set[str] | list[str] | None = None,
    ) -> Document:
        """New Document with `updates` written and `removals` dropped. Self is untouched."""
        blocks = dict(self._blocks)
        if updates:
            blocks.update(updates)
        for block_id in removals or ():
            blocks.pop(block_id, None)
        return Document(blocks)


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------


def check_invariants(doc: Mapping[str, BlockNode], registry: SchemaRegistry | None = None) -> list[str]:
    """
    Return every violated tree invariant as a human-readable string.
    Empty list = valid.

    1. root exists and is a container
    2. every listed child exists
    3. every non-root block has exactly one parent
    4. no duplicate ids within one children list
    5. no cycles
    6. nothing nested deeper than MAX_DEPTH below root
    """
    violations: list[str] = []

    root = doc[ROOT_ID] if ROOT_ID in doc else None
    if root is None:
        return ["root block is missing"]
    if not root.is_container:
        violations.append("root block has no children list")
    elif registry is not None and root.type in registry and not registry.can_have_children(root.type):
        violations.append(f"root type '{root.type}' cannot have children")

    owners: dict[str, list[str]] = {}
    for block_id, node in doc.items():
        if node.id != block_id:
            violations.append(f"block keyed '{block_id}' carries id '{node.id}'")
        if node.children_ids is None:
            continue
        if registry is not None and node.type in registry and not registry.can_have_children(node.type):
            violations.append(f"block '{block_id}' of type '{node.type}' cannot have children")
        seen: set[str] = set()
        for child in node.children_ids:
            if child in seen:
                violations.append(f"block '{child}' listed twice under '{block_id}'")
                continue
            seen.add(child)
            if child not in doc:
                violations.append(f"block '{block_id}' lists missing child '{child}'")
            owners.setdefault(child, []).append(block_id)

    if ROOT_ID in owners:
        violations.append("root block is listed as a child")
    for block_id in doc:
        if block_id == ROOT_ID:
            continue
        parents = owners.get(block_id, [])
        if not parents:
            violations.append(f"block '{block_id}' is orphaned")
        elif len(parents) > 1:
            violations.append(f"block '{block_id}' has {len(parents)} parents: {sorted(parents)}")

    # Anything unreachable from root while having a parent sits on a cycle
    reachable: set[str] = set()
    stack = [(ROOT_ID, 0)]
    while stack:
        bid, depth = stack.pop()
        if bid in reachable:
            continue
        reachable.add(bid)
        if depth == MAX_DEPTH + 1:
            violations.append(f"block '{bid}' is nested deeper than {MAX_DEPTH} levels")
        node = doc[bid] if bid in doc else None
        if node is not None and node.children_ids:
            stack.extend((c, depth + 1) for c in node.children_ids if c in doc)
    for block_id in doc:
        if block_id not in reachable and owners.get(block_id):
            violations.append(f"block '{block_id}' is part of a cycle")

    return violations


# ---------------------------------------------------------------------------
# Canonical JSON loading
# ---------------------------------------------------------------------------


def from_canonical_json(data: str | dict[str, Any], registry: SchemaRegistry | None = None) -> Document:
    """
    Rebuild a Document from the nested `{id, type, style, props, children}`
    shape produced by renderer.to_canonical_json. Raises
    InvariantViolationError on malformed input.

    Leaves are exported with an empty `children` list, so whether a block
    gets a children list back is decided by the registry: container types
    always do, other types only when children are actually listed.
    """
    registry = registry or default_registry()
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise InvariantViolationError(f"Canonical JSON is malformed: {exc}", violations=[str(exc)]) from exc

    if not isinstance(data, dict) or data.get("id") != ROOT_ID:
        raise InvariantViolationError("Canonical JSON must be rooted at 'root'", violations=["root block is missing"])

    blocks: dict[str, dict[str, Any]] = {}
    duplicates: list[str] = []

    # Explicit stack; each entry carries the children list its id belongs in
    stack: list[tuple[Any, list[str] | None]] = [(data, None)]
    try:
        while stack:
            tree, siblings = stack.pop()
            block_id = tree["id"]
            if block_id in blocks:
                duplicates.append(f"block '{block_id}' appears more than once")
                continue
            entry: dict[str, Any] = {
                "type": tree["type"],
                "style": tree.get("style") or {},
                "props": tree.get("props") or {},
            }
            blocks[block_id] = entry
            if siblings is not None:
                siblings.append(block_id)
            children = tree.get("children") or []
            if children or registry.can_have_children(entry["type"]):
                entry["childrenIds"] = []
                stack.extend((child, entry["childrenIds"]) for child in reversed(children))
    except (KeyError, TypeError, AttributeError) as exc:
        raise InvariantViolationError(f"Canonical JSON node is malformed: {exc}", violations=[repr(exc)]) from exc

    if duplicates:
        raise InvariantViolationError(duplicates[0], violations=duplicates)
    return Document.from_blocks(blocks, registry)


# ---------------------------------------------------------------------------
# Id allocation
# ---------------------------------------------------------------------------


class IdAllocator:
    """
    Hands out block ids.

    "counter" yields block-1, block-2, ... from a generation counter that only
    moves forward, so an id dropped by undo is never handed out again.
    "uuid" yields block-<32 hex>.
    Either way an id already present in the given Document is skipped.
    """

    def __init__(self, strategy: str = "counter", prefix: str = "block"):
        if strategy not in ("counter", "uuid"):
            raise ValueError(f"Unknown id strategy: {strategy}")
        self.strategy = strategy
        self.prefix = prefix
        self._counter = 0

    def next_id(self, doc: Mapping[str, Any] | None = None) -> str:
        while True:
            if self.strategy == "uuid":
                candidate = f"{self.prefix}-{uuid.uuid4().hex}"
            else:
                self._counter += 1
                candidate = f"{self.prefix}-{self._counter}"
            if doc is None or candidate not in doc:
                return candidate
