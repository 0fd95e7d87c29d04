"""
Editor Kernel — Renderer

Pure functions: (document, root_id) → markup string / canonical JSON
No IO. Deterministic: same input → same output, always. Rendering never
touches the Document.

Two projections over the same depth-first walk (child order honoured):
  - to_markup: each block rendered by the renderer its type registered;
    unregistered types become a visible placeholder and the walk goes on
  - to_canonical_json: nested {id, type, style, props, children} tree,
    independent of the Document's internal key order
"""

from __future__ import annotations

import json
from html import escape as _html_escape
from typing import Any

from engine.kernel.blocks import default_registry
from engine.kernel.document import Document
from engine.kernel.registry import SchemaRegistry
from engine.kernel.types import ROOT_ID, thaw

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def to_markup(doc: Document, root_id: str = ROOT_ID, registry: SchemaRegistry | None = None) -> str:
    """
    Render the subtree at `root_id` to an HTML fragment.
    Pure function. No side effects. No IO.
    """
    return _render_block(root_id, doc, registry or default_registry())


def render_block(block_id: str, doc: Document, registry: SchemaRegistry | None = None) -> str:
    """Render a single block and everything below it."""
    return _render_block(block_id, doc, registry or default_registry())


def render_document(
    doc: Document,
    root_id: str = ROOT_ID,
    registry: SchemaRegistry | None = None,
    title: str = "",
) -> str:
    """
    Render a complete HTML email document.
    Returns a UTF-8 HTML string.
    """
    body = to_markup(doc, root_id, registry)
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1">',
        f"<title>{escape(title)}</title>" if title else "",
        "</head>",
        '<body style="margin:0;padding:0">',
        body,
        "</body>",
        "</html>",
    ]
    return "\n".join(p for p in parts if p)


def to_canonical_tree(doc: Document, root_id: str = ROOT_ID) -> dict[str, Any]:
    """
    Nested tree rooted at `root_id`: {id, type, style, props, children}.
    style and props are plain copies; editing them never reaches the Document.
    """
    tree: dict[str, Any] = {}
    seen: set[str] = set()
    # Each stack entry carries the children list its node is appended to
    stack: list[tuple[str, list[dict[str, Any]] | None]] = [(root_id, None)]
    while stack:
        block_id, siblings = stack.pop()
        if block_id in seen:
            continue
        seen.add(block_id)
        node = doc[block_id]
        entry: dict[str, Any] = {
            "id": node.id,
            "type": node.type,
            "style": thaw(node.style),
            "props": thaw(node.props),
            "children": [],
        }
        if siblings is None:
            tree = entry
        else:
            siblings.append(entry)
        stack.extend((c, entry["children"]) for c in reversed(node.children_ids or ()) if c in doc)
    return tree


def to_canonical_json(doc: Document, root_id: str = ROOT_ID, indent: int | None = None) -> str:
    """Canonical JSON string. Keys sorted so output is byte-stable."""
    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(
        to_canonical_tree(doc, root_id),
        sort_keys=True,
        separators=separators,
        indent=indent,
        ensure_ascii=False,
    )


def escape(text: str) -> str:
    """HTML-escape user content."""
    return _html_escape(str(text), quote=True)


# ---------------------------------------------------------------------------
# Block rendering
# ---------------------------------------------------------------------------


def _render_block(block_id: str, doc: Document, registry: SchemaRegistry) -> str:
    # Post-order over an explicit stack: children are rendered before their parent
    rendered: dict[str, str] = {}
    expanding: set[str] = set()
    stack = [(block_id, False)]
    while stack:
        bid, children_done = stack.pop()
        node = doc.find(bid)
        if node is None:
            rendered[bid] = ""
            continue
        if not children_done:
            if bid in expanding:
                continue
            expanding.add(bid)
            stack.append((bid, True))
            stack.extend((c, False) for c in reversed(node.children_ids or ()))
            continue

        children = [rendered.get(c, "") for c in node.children_ids or ()]
        renderer = registry.renderer_for(node.type)
        if renderer is None:
            rendered[bid] = _render_unknown(node.type, children)
        else:
            rendered[bid] = renderer(node, children)
    return rendered.get(block_id, "")


def _render_unknown(block_type: str, children: list[str]) -> str:
    """Placeholder for a type with no registered renderer."""
    label = escape(block_type) if block_type else "(missing)"
    return (
        f'<div class="block-unknown" data-block-type="{label}" '
        f'style="padding:12px;border:2px dashed #ef4444;background-color:#fef2f2;margin:8px 0">'
        f"Unknown block type: {label}"
        f"{''.join(children)}"
        f"</div>"
    )
