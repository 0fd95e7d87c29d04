"""
Editor Kernel — Schema Registry

Maps a block type name to:
  - a BlockSchema (pydantic models for props and style)
  - whether the type may own children
  - an optional markup renderer
  - default props/style used when a block is dropped from the sidebar

Populated once at startup, then frozen. Lookups of an unknown type return
an UnknownTypeError value instead of raising.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from engine.kernel.errors import RegistryFrozenError, SchemaValidationError, UnknownTypeError

# (node, rendered children in order) -> markup fragment
BlockRenderer = Callable[[Any, list[str]], str]


@dataclass(frozen=True)
class BlockSchema:
    """Pair of pydantic models describing a block type's payloads."""

    props: type[BaseModel]
    style: type[BaseModel]


@dataclass(frozen=True)
class BlockTypeEntry:
    type: str
    schema: BlockSchema
    can_have_children: bool
    renderer: BlockRenderer | None = None
    default_props: dict[str, Any] = field(default_factory=dict)
    default_style: dict[str, Any] = field(default_factory=dict)


class SchemaRegistry:
    def __init__(self) -> None:
        self._entries: dict[str, BlockTypeEntry] = {}
        self._frozen = False

    # -- population ---------------------------------------------------------

    def register(
        self,
        type: str,
        schema: BlockSchema,
        can_have_children: bool = False,
        renderer: BlockRenderer | None = None,
        default_props: dict[str, Any] | None = None,
        default_style: dict[str, Any] | None = None,
    ) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register '{type}' after startup")
        self._entries[type] = BlockTypeEntry(
            type=type,
            schema=schema,
            can_have_children=can_have_children,
            renderer=renderer,
            default_props=default_props or {},
            default_style=default_style or {},
        )

    def freeze(self) -> SchemaRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- queries ------------------------------------------------------------

    def __contains__(self, type: str) -> bool:
        return type in self._entries

    def types(self) -> list[str]:
        return sorted(self._entries)

    def entry(self, type: str) -> BlockTypeEntry | None:
        return self._entries.get(type)

    def can_have_children(self, type: str) -> bool:
        entry = self._entries.get(type)
        return entry is not None and entry.can_have_children

    def renderer_for(self, type: str) -> BlockRenderer | None:
        entry = self._entries.get(type)
        return entry.renderer if entry else None

    def defaults_for(self, type: str) -> tuple[dict[str, Any], dict[str, Any]] | None:
        """(props, style) defaults as fresh copies, or None for unknown types."""
        entry = self._entries.get(type)
        if entry is None:
            return None
        return copy.deepcopy(entry.default_props), copy.deepcopy(entry.default_style)

    def validate(
        self,
        type: str,
        props: dict[str, Any],
        style: dict[str, Any],
    ) -> UnknownTypeError | SchemaValidationError | None:
        """
        Check a payload against the type's schema.
        Returns None when valid, otherwise the error (never raises).
        """
        entry = self._entries.get(type)
        if entry is None:
            return UnknownTypeError(f"Unknown block type: {type}")

        problems: list[dict[str, Any]] = []
        for part, model, payload in (
            ("props", entry.schema.props, props),
            ("style", entry.schema.style, style),
        ):
            if not isinstance(payload, dict):
                problems.append({"loc": [part], "msg": f"'{part}' must be an object", "type": "dict_type"})
                continue
            try:
                model.model_validate(payload)
            except ValidationError as exc:
                for err in exc.errors(include_url=False, include_context=False, include_input=False):
                    problems.append({"loc": [part, *err["loc"]], "msg": err["msg"], "type": err["type"]})

        if problems:
            first = problems[0]
            where = ".".join(str(p) for p in first["loc"])
            return SchemaValidationError(f"{type}: {where}: {first['msg']}", errors=problems)
        return None
