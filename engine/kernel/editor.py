"""
Editor Kernel — Editor

The engine object a host holds per open document. Owns the current
Document, its History and an id allocator; every edit goes through the
command layer and, when applied, is committed to History.

The UI side only dispatches commands and re-renders from the snapshots it
is handed (or subscribes to them). It never mutates engine state.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from engine.kernel import commands, placement, renderer
from engine.kernel.blocks import default_registry
from engine.kernel.document import Document, IdAllocator
from engine.kernel.errors import UnknownTypeError
from engine.kernel.history import History
from engine.kernel.registry import SchemaRegistry
from engine.kernel.types import DEFAULT_ROOT_TYPE, ROOT_ID, BlockNode, CommandResult, DropIntent, PlacementResult

logger = logging.getLogger(__name__)

Listener = Callable[[Document], None]


class Editor:
    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        document: Document | None = None,
        history_limit: int | None = None,
        id_strategy: str = "counter",
        root_type: str = DEFAULT_ROOT_TYPE,
    ):
        self.registry = registry or default_registry()
        if document is None:
            defaults = self.registry.defaults_for(root_type)
            root_props, root_style = defaults if defaults else ({}, {})
            document = Document.empty(root_type, root_props=root_props, root_style=root_style)
        self.allocator = IdAllocator(strategy=id_strategy)
        self.history = History(document, limit=history_limit)
        self._listeners: list[Listener] = []

    # -- state --------------------------------------------------------------

    @property
    def document(self) -> Document:
        return self.history.current()

    def get(self, block_id: str) -> BlockNode:
        return self.document.get(block_id)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def load(self, document: Document) -> None:
        """Replace the document and clear history."""
        self.history.reset(document)
        logger.debug("Loaded document with %d blocks", len(document))
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(document)` after every change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- commands -----------------------------------------------------------

    def create_block(
        self,
        parent_id: str,
        block_type: str,
        style: dict[str, Any] | None = None,
        props: dict[str, Any] | None = None,
        index: int | None = None,
    ) -> CommandResult:
        return self._commit(
            commands.create_and_insert(
                self.document,
                parent_id,
                block_type,
                style,
                props,
                index,
                registry=self.registry,
                allocator=self.allocator,
            )
        )

    def add_default_block(self, parent_id: str, block_type: str, index: int | None = None) -> CommandResult:
        """Create a block pre-filled with its type's default props and style."""
        defaults = self.registry.defaults_for(block_type)
        if defaults is None:
            result = CommandResult(
                document=self.document,
                applied=False,
                error=UnknownTypeError(f"Unknown block type: {block_type}"),
            )
            return self._commit(result)
        props, style = defaults
        return self.create_block(parent_id, block_type, style, props, index)

    def remove_block(self, block_id: str) -> CommandResult:
        return self._commit(commands.remove(self.document, block_id))

    def reorder(self, parent_id: str, from_index: int, to_index: int) -> CommandResult:
        return self._commit(commands.reorder(self.document, parent_id, from_index, to_index))

    def move_block(self, block_id: str, parent_id: str, index: int | None = None) -> CommandResult:
        return self._commit(commands.move(self.document, block_id, parent_id, index, registry=self.registry))

    def duplicate_block(self, block_id: str) -> CommandResult:
        return self._commit(commands.duplicate(self.document, block_id, allocator=self.allocator))

    def update_props(self, block_id: str, props: dict[str, Any], merge: bool = True) -> CommandResult:
        return self._commit(commands.update_props(self.document, block_id, props, registry=self.registry, merge=merge))

    def update_style(self, block_id: str, style: dict[str, Any], merge: bool = True) -> CommandResult:
        return self._commit(commands.update_style(self.document, block_id, style, registry=self.registry, merge=merge))

    def execute(self, name: str, payload: dict[str, Any]) -> CommandResult:
        """Run a named command (see commands.apply) and commit it."""
        return self._commit(self.preview(name, payload))

    def preview(self, name: str, payload: dict[str, Any]) -> CommandResult:
        """Run a named command without touching history."""
        return commands.apply(self.document, name, payload, registry=self.registry, allocator=self.allocator)

    # -- drag and drop ------------------------------------------------------

    def resolve_drop(self, intent: DropIntent) -> PlacementResult:
        return placement.resolve(self.document, intent, self.registry)

    def drop(self, intent: DropIntent) -> CommandResult:
        """Resolve a drop and apply it: create for new blocks, move for existing ones."""
        placed = self.resolve_drop(intent)
        if not placed.accepted:
            logger.debug("Drop refused: %s", placed.error)
            return CommandResult(document=self.document, applied=False, error=placed.error)

        container_id, index = placed.unwrap()
        if intent.is_new_block:
            assert intent.block_type is not None
            props, style = intent.props, intent.style
            defaults = self.registry.defaults_for(intent.block_type)
            if defaults is not None:
                props = props if props is not None else defaults[0]
                style = style if style is not None else defaults[1]
            return self.create_block(container_id, intent.block_type, style, props, index)

        assert intent.block_id is not None
        return self.move_block(intent.block_id, container_id, index)

    # -- history ------------------------------------------------------------

    def undo(self) -> CommandResult:
        result = self.history.undo()
        if result.applied:
            self._notify()
        return result

    def redo(self) -> CommandResult:
        result = self.history.redo()
        if result.applied:
            self._notify()
        return result

    # -- rendering ----------------------------------------------------------

    def to_markup(self, root_id: str = ROOT_ID) -> str:
        return renderer.to_markup(self.document, root_id, self.registry)

    def render_document(self, title: str = "") -> str:
        return renderer.render_document(self.document, registry=self.registry, title=title)

    def to_canonical_json(self, indent: int | None = None) -> str:
        return renderer.to_canonical_json(self.document, indent=indent)

    # -- internal -----------------------------------------------------------

    def _commit(self, result: CommandResult) -> CommandResult:
        if not result.applied:
            logger.debug("Command rejected: %s", result.error)
            return result
        self.history.commit(result.document)
        self._notify()
        return result

    def _notify(self) -> None:
        doc = self.document
        for listener in list(self._listeners):
            listener(doc)
