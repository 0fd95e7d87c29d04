"""
Editor Kernel — the pure block-document engine.

Components:
  registry   — block type → schema, container capability, renderer
  document   — immutable flat map of blocks rooted at "root"
  commands   — (document, args) → CommandResult  (pure, never partial)
  history    — linear undo/redo over document snapshots
  placement  — drop intent → (container, index) or refusal
  renderer   — document → HTML / canonical JSON  (pure, deterministic)
  editor     — Editor object owning document + history
"""

from engine.kernel.blocks import default_registry
from engine.kernel.commands import (
    apply,
    create_and_insert,
    duplicate,
    move,
    remove,
    reorder,
    update_props,
    update_style,
)
from engine.kernel.document import Document, IdAllocator, check_invariants, from_canonical_json
from engine.kernel.editor import Editor
from engine.kernel.history import History
from engine.kernel.placement import resolve
from engine.kernel.registry import BlockSchema, SchemaRegistry
from engine.kernel.renderer import render_document, to_canonical_json, to_canonical_tree, to_markup
from engine.kernel.types import MAX_DEPTH, ROOT_ID, BlockNode, CommandResult, DropIntent, FrozenPayload, PlacementResult

__all__ = [
    "default_registry",
    "SchemaRegistry",
    "BlockSchema",
    "Document",
    "IdAllocator",
    "check_invariants",
    "from_canonical_json",
    "create_and_insert",
    "remove",
    "reorder",
    "move",
    "duplicate",
    "update_props",
    "update_style",
    "apply",
    "History",
    "resolve",
    "to_markup",
    "render_document",
    "to_canonical_tree",
    "to_canonical_json",
    "Editor",
    "ROOT_ID",
    "MAX_DEPTH",
    "BlockNode",
    "FrozenPayload",
    "CommandResult",
    "DropIntent",
    "PlacementResult",
]
