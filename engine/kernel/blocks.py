"""
Editor Kernel — Built-in Email Blocks

The block types offered by the email editor sidebar:
  Text, Heading, Button, Image, Avatar, Divider, Spacer, Html (leaves)
  Container, ColumnsContainer, EmailLayout (containers)

For each type this module declares the pydantic payload schemas, the
default payload a freshly dropped block starts with, and a mustache
template used by the renderer. `default_registry()` wires them into a
frozen SchemaRegistry shared by the whole process.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Any, Literal

import chevron
from pydantic import BaseModel, Field

from engine.kernel.registry import BlockSchema, SchemaRegistry
from engine.kernel.types import BlockNode

# ---------------------------------------------------------------------------
# Payload schemas
# ---------------------------------------------------------------------------


class FontFamily(str, Enum):
    MODERN_SANS = "MODERN_SANS"
    BOOK_SANS = "BOOK_SANS"
    ORGANIC_SANS = "ORGANIC_SANS"
    GEOMETRIC_SANS = "GEOMETRIC_SANS"
    HEAVY_SANS = "HEAVY_SANS"
    ROUNDED_SANS = "ROUNDED_SANS"
    MODERN_SERIF = "MODERN_SERIF"
    BOOK_SERIF = "BOOK_SERIF"
    MONOSPACE = "MONOSPACE"


FONT_STACKS: dict[str, str] = {
    "MODERN_SANS": '"Helvetica Neue", "Arial Nova", "Nimbus Sans", Arial, sans-serif',
    "BOOK_SANS": 'Optima, Candara, "Noto Sans", source-sans-pro, sans-serif',
    "ORGANIC_SANS": 'Seravek, "Gill Sans Nova", Ubuntu, Calibri, "DejaVu Sans", source-sans-pro, sans-serif',
    "GEOMETRIC_SANS": 'Avenir, "Avenir Next LT Pro", Montserrat, Corbel, "URW Gothic", source-sans-pro, sans-serif',
    "HEAVY_SANS": (
        'Bahnschrift, "DIN Alternate", "Franklin Gothic Medium", "Nimbus Sans Narrow", '
        "sans-serif-condensed, sans-serif"
    ),
    "ROUNDED_SANS": (
        'ui-rounded, "Hiragino Maru Gothic ProN", Quicksand, Comfortaa, Manjari, '
        '"Arial Rounded MT Bold", Calibri, source-sans-pro, sans-serif'
    ),
    "MODERN_SERIF": 'Charter, "Bitstream Charter", "Sitka Text", Cambria, serif',
    "BOOK_SERIF": '"Iowan Old Style", "Palatino Linotype", "URW Palladio L", P052, serif',
    "MONOSPACE": '"Nimbus Mono PS", "Courier New", "Cutive Mono", monospace',
}


class Padding(BaseModel):
    top: int = Field(default=0, ge=0)
    bottom: int = Field(default=0, ge=0)
    right: int = Field(default=0, ge=0)
    left: int = Field(default=0, ge=0)


class BlockStyle(BaseModel):
    """Style keys shared by every block type."""

    padding: Padding | None = None
    color: str | None = None
    backgroundColor: str | None = None
    fontSize: int | None = Field(default=None, ge=1)
    fontWeight: Literal["normal", "bold"] | None = None
    fontFamily: FontFamily | None = None
    textAlign: Literal["left", "center", "right"] | None = None
    borderColor: str | None = None
    borderRadius: int | None = Field(default=None, ge=0)


class EmptyProps(BaseModel):
    pass


class TextProps(BaseModel):
    text: str | None = None
    markdown: bool | None = None


class HeadingProps(BaseModel):
    text: str | None = None
    level: Literal["h1", "h2", "h3"] | None = None


class ButtonProps(BaseModel):
    text: str | None = None
    url: str | None = None
    fullWidth: bool | None = None
    size: Literal["x-small", "small", "medium", "large"] | None = None
    buttonStyle: Literal["rectangle", "pill", "rounded"] | None = None
    buttonTextColor: str | None = None
    buttonColor: str | None = None
    buttonBackgroundColor: str | None = None


class ImageProps(BaseModel):
    url: str | None = None
    alt: str | None = None
    linkHref: str | None = None
    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)
    contentAlignment: Literal["top", "middle", "bottom"] | None = None


class AvatarProps(BaseModel):
    imageUrl: str | None = None
    alt: str | None = None
    shape: Literal["circle", "square", "rounded"] | None = None
    size: int | None = Field(default=None, ge=1)


class DividerProps(BaseModel):
    lineColor: str | None = None
    lineHeight: int | None = Field(default=None, ge=0)


class SpacerProps(BaseModel):
    height: int | None = Field(default=None, ge=0)


class HtmlProps(BaseModel):
    contents: str | None = None


class ColumnsContainerProps(BaseModel):
    columnsGap: int | None = Field(default=None, ge=0)
    contentAlignment: Literal["top", "middle", "bottom"] | None = None


class EmailLayoutProps(BaseModel):
    backdropColor: str | None = None
    canvasColor: str | None = None
    textColor: str | None = None
    fontFamily: FontFamily | None = None
    borderColor: str | None = None
    borderRadius: int | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Inline CSS
# ---------------------------------------------------------------------------


def style_css(style: dict[str, Any]) -> str:
    """Translate a block style payload into an inline CSS declaration list."""
    decls: list[str] = []
    padding = style.get("padding")
    if isinstance(padding, dict):
        decls.append(
            "padding:{}px {}px {}px {}px".format(
                padding.get("top", 0),
                padding.get("right", 0),
                padding.get("bottom", 0),
                padding.get("left", 0),
            )
        )
    if style.get("color"):
        decls.append(f"color:{style['color']}")
    if style.get("backgroundColor"):
        decls.append(f"background-color:{style['backgroundColor']}")
    if style.get("fontSize"):
        decls.append(f"font-size:{style['fontSize']}px")
    if style.get("fontWeight"):
        decls.append(f"font-weight:{style['fontWeight']}")
    if style.get("fontFamily"):
        decls.append(f"font-family:{FONT_STACKS.get(style['fontFamily'], FONT_STACKS['MODERN_SANS'])}")
    if style.get("textAlign"):
        decls.append(f"text-align:{style['textAlign']}")
    if style.get("borderColor"):
        decls.append(f"border:1px solid {style['borderColor']}")
    if style.get("borderRadius") is not None:
        decls.append(f"border-radius:{style['borderRadius']}px")
    return ";".join(decls)


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

TEXT_TEMPLATE = '<div style="{{css}}">{{text}}</div>'

HEADING_TEMPLATE = '<{{tag}} style="{{css}}">{{text}}</{{tag}}>'

BUTTON_TEMPLATE = (
    '<div style="{{css}}">'
    '<a href="{{url}}" style="{{button_css}}" target="_blank">{{text}}</a>'
    "</div>"
)

IMAGE_TEMPLATE = (
    '<div style="{{css}}">'
    "{{#link}}<a href=\"{{link}}\" target=\"_blank\">{{/link}}"
    '<img alt="{{alt}}" src="{{url}}"{{#width}} width="{{width}}"{{/width}}{{#height}} height="{{height}}"{{/height}}'
    ' style="display:block;max-width:100%;outline:none;border:none;text-decoration:none">'
    "{{#link}}</a>{{/link}}"
    "</div>"
)

AVATAR_TEMPLATE = (
    '<div style="{{css}}">'
    '<img alt="{{alt}}" src="{{url}}" height="{{size}}" width="{{size}}"'
    ' style="display:inline-block;object-fit:cover;height:{{size}}px;width:{{size}}px;border-radius:{{radius}}">'
    "</div>"
)

DIVIDER_TEMPLATE = (
    '<div style="{{css}}">'
    '<hr style="width:100%;border:none;border-top:{{line_height}}px solid {{line_color}};margin:0">'
    "</div>"
)

SPACER_TEMPLATE = '<div style="height:{{height}}px"></div>'

HTML_TEMPLATE = '<div style="{{css}}">{{{contents}}}</div>'

CONTAINER_TEMPLATE = '<div style="{{css}}">{{{children}}}</div>'

COLUMNS_TEMPLATE = (
    '<div style="{{css}}">'
    '<table align="center" width="100%" cellpadding="0" border="0" style="table-layout:fixed;border-collapse:collapse">'
    "<tbody style=\"width:100%\"><tr style=\"width:100%\">{{{children}}}</tr></tbody>"
    "</table>"
    "</div>"
)

COLUMN_CELL_TEMPLATE = '<td style="box-sizing:content-box;vertical-align:{{align}};padding:0 {{gap}}px">{{{cell}}}</td>'

EMAIL_LAYOUT_TEMPLATE = (
    '<div style="background-color:{{backdrop}};color:{{text_color}};font-family:{{font}};'
    'font-size:16px;font-weight:400;letter-spacing:0.15008px;line-height:1.5;margin:0;padding:32px 0;'
    'min-height:100%;width:100%">'
    '<table align="center" width="100%" style="margin:0 auto;max-width:600px;background-color:{{canvas}}'
    "{{#border}};border:1px solid {{border}}{{/border}}{{#radius}};border-radius:{{radius}}px{{/radius}}\""
    ' role="presentation" cellspacing="0" cellpadding="0" border="0">'
    '<tbody><tr style="width:100%"><td>{{{children}}}</td></tr></tbody>'
    "</table>"
    "</div>"
)

_BUTTON_PADDING = {
    "x-small": "4px 8px",
    "small": "8px 12px",
    "medium": "12px 20px",
    "large": "16px 32px",
}

_BUTTON_RADIUS = {"rectangle": "0", "rounded": "4px", "pill": "64px"}

_AVATAR_RADIUS = {"circle": "50%", "square": "0", "rounded": "8px"}

_VERTICAL_ALIGN = {"top": "top", "middle": "middle", "bottom": "bottom"}


# ---------------------------------------------------------------------------
# Renderers: (node, rendered children) -> markup
# ---------------------------------------------------------------------------


def _render_text(node: BlockNode, children: list[str]) -> str:
    return chevron.render(TEXT_TEMPLATE, {"css": style_css(node.style), "text": node.props.get("text") or ""})


def _render_heading(node: BlockNode, children: list[str]) -> str:
    return chevron.render(
        HEADING_TEMPLATE,
        {
            "tag": node.props.get("level") or "h2",
            "css": style_css(node.style),
            "text": node.props.get("text") or "",
        },
    )


def _render_button(node: BlockNode, children: list[str]) -> str:
    p = node.props
    button_css = [
        f"background-color:{p.get('buttonBackgroundColor') or '#999999'}",
        f"color:{p.get('buttonTextColor') or p.get('buttonColor') or '#FFFFFF'}",
        f"padding:{_BUTTON_PADDING.get(p.get('size') or 'medium')}",
        f"border-radius:{_BUTTON_RADIUS.get(p.get('buttonStyle') or 'rounded')}",
        "display:block" if p.get("fullWidth") else "display:inline-block",
        "text-decoration:none",
    ]
    return chevron.render(
        BUTTON_TEMPLATE,
        {
            "css": style_css(node.style),
            "url": p.get("url") or "#",
            "button_css": ";".join(button_css),
            "text": p.get("text") or "",
        },
    )


def _render_image(node: BlockNode, children: list[str]) -> str:
    p = node.props
    return chevron.render(
        IMAGE_TEMPLATE,
        {
            "css": style_css(node.style),
            "url": p.get("url") or "",
            "alt": p.get("alt") or "",
            "link": p.get("linkHref") or "",
            "width": p.get("width") or "",
            "height": p.get("height") or "",
        },
    )


def _render_avatar(node: BlockNode, children: list[str]) -> str:
    p = node.props
    return chevron.render(
        AVATAR_TEMPLATE,
        {
            "css": style_css(node.style),
            "url": p.get("imageUrl") or "",
            "alt": p.get("alt") or "",
            "size": p.get("size") or 64,
            "radius": _AVATAR_RADIUS.get(p.get("shape") or "square"),
        },
    )


def _prop_or(node: BlockNode, key: str, default: Any) -> Any:
    """Prop value, or `default` when it is missing or null. 0 is kept."""
    value = node.props.get(key)
    return default if value is None else value


def _render_divider(node: BlockNode, children: list[str]) -> str:
    return chevron.render(
        DIVIDER_TEMPLATE,
        {
            "css": style_css(node.style),
            "line_height": _prop_or(node, "lineHeight", 1),
            "line_color": node.props.get("lineColor") or "#333333",
        },
    )


def _render_spacer(node: BlockNode, children: list[str]) -> str:
    return chevron.render(SPACER_TEMPLATE, {"height": _prop_or(node, "height", 16)})


def _render_html(node: BlockNode, children: list[str]) -> str:
    return chevron.render(HTML_TEMPLATE, {"css": style_css(node.style), "contents": node.props.get("contents") or ""})


def _render_container(node: BlockNode, children: list[str]) -> str:
    return chevron.render(CONTAINER_TEMPLATE, {"css": style_css(node.style), "children": "".join(children)})


def _render_columns(node: BlockNode, children: list[str]) -> str:
    # one table cell per child
    gap = (node.props.get("columnsGap") or 0) // 2
    align = _VERTICAL_ALIGN.get(node.props.get("contentAlignment") or "middle")
    cells = [chevron.render(COLUMN_CELL_TEMPLATE, {"align": align, "gap": gap, "cell": fragment}) for fragment in children]
    return chevron.render(COLUMNS_TEMPLATE, {"css": style_css(node.style), "children": "".join(cells)})


def _render_email_layout(node: BlockNode, children: list[str]) -> str:
    p = node.props
    return chevron.render(
        EMAIL_LAYOUT_TEMPLATE,
        {
            "backdrop": p.get("backdropColor") or "#F5F5F5",
            "canvas": p.get("canvasColor") or "#FFFFFF",
            "text_color": p.get("textColor") or "#262626",
            "font": FONT_STACKS.get(p.get("fontFamily") or "MODERN_SANS", FONT_STACKS["MODERN_SANS"]),
            "border": p.get("borderColor") or "",
            "radius": p.get("borderRadius") or "",
            "children": "".join(children),
        },
    )


# ---------------------------------------------------------------------------
# Defaults and sidebar catalog
# ---------------------------------------------------------------------------

_PADDING = {"top": 16, "bottom": 16, "right": 24, "left": 24}

DEFAULT_BLOCK_DATA: dict[str, dict[str, dict[str, Any]]] = {
    "Text": {
        "style": {"padding": _PADDING, "color": "#262626", "fontSize": 16},
        "props": {"text": "Enter your text here..."},
    },
    "Heading": {
        "style": {"padding": _PADDING, "color": "#262626", "fontSize": 24, "fontWeight": "bold"},
        "props": {"text": "Heading Text", "level": "h2"},
    },
    "Button": {
        "style": {
            "padding": _PADDING,
            "backgroundColor": "#6366F1",
            "color": "#FFFFFF",
            "borderRadius": 4,
            "fontSize": 16,
            "textAlign": "center",
        },
        "props": {
            "text": "Click Me",
            "url": "#",
            "buttonBackgroundColor": "#6366F1",
            "buttonColor": "#FFFFFF",
        },
    },
    "Image": {
        "style": {"padding": _PADDING},
        "props": {"url": "https://via.placeholder.com/600x400", "alt": "Image", "contentAlignment": "middle"},
    },
    "Avatar": {
        "style": {"padding": _PADDING},
        "props": {"imageUrl": "https://via.placeholder.com/150", "alt": "Avatar", "shape": "circle", "size": 64},
    },
    "Divider": {
        "style": {"padding": _PADDING},
        "props": {"lineColor": "#E5E7EB", "lineHeight": 1},
    },
    "Spacer": {
        "style": {},
        "props": {"height": 32},
    },
    "Container": {
        "style": {"padding": _PADDING, "backgroundColor": "#F9FAFB", "borderRadius": 4},
        "props": {},
    },
    "ColumnsContainer": {
        "style": {"padding": _PADDING},
        "props": {"columnsGap": 16, "contentAlignment": "middle"},
    },
    "Html": {
        "style": {"padding": _PADDING},
        "props": {"contents": "<div>Custom HTML content</div>"},
    },
    "EmailLayout": {
        "style": {},
        "props": {
            "backdropColor": "#F5F5F5",
            "canvasColor": "#FFFFFF",
            "textColor": "#262626",
            "fontFamily": "MODERN_SANS",
        },
    },
}

# Sidebar entries, in display order
BLOCK_DEFINITIONS: list[dict[str, str]] = [
    {"type": "Text", "label": "Text", "icon": "Type", "description": "Add text content", "category": "Basic"},
    {"type": "Heading", "label": "Heading", "icon": "Heading", "description": "Add headings", "category": "Basic"},
    {
        "type": "Button",
        "label": "Button",
        "icon": "RectangleHorizontal",
        "description": "Call-to-action button",
        "category": "Basic",
    },
    {"type": "Image", "label": "Image", "icon": "Image", "description": "Add images", "category": "Media"},
    {"type": "Avatar", "label": "Avatar", "icon": "User", "description": "Profile picture", "category": "Media"},
    {"type": "Divider", "label": "Divider", "icon": "Minus", "description": "Horizontal line", "category": "Layout"},
    {
        "type": "Spacer",
        "label": "Spacer",
        "icon": "MoveVertical",
        "description": "Add vertical space",
        "category": "Layout",
    },
    {"type": "Container", "label": "Container", "icon": "Square", "description": "Group elements", "category": "Layout"},
    {
        "type": "ColumnsContainer",
        "label": "Columns",
        "icon": "Columns",
        "description": "Side-by-side layout",
        "category": "Layout",
    },
    {"type": "Html", "label": "HTML", "icon": "Code", "description": "Custom HTML", "category": "Advanced"},
]


# ---------------------------------------------------------------------------
# Registry wiring
# ---------------------------------------------------------------------------

# type -> (props model, can_have_children, renderer)
_BUILTINS: dict[str, tuple[type[BaseModel], bool, Any]] = {
    "Text": (TextProps, False, _render_text),
    "Heading": (HeadingProps, False, _render_heading),
    "Button": (ButtonProps, False, _render_button),
    "Image": (ImageProps, False, _render_image),
    "Avatar": (AvatarProps, False, _render_avatar),
    "Divider": (DividerProps, False, _render_divider),
    "Spacer": (SpacerProps, False, _render_spacer),
    "Html": (HtmlProps, False, _render_html),
    "Container": (EmptyProps, True, _render_container),
    "ColumnsContainer": (ColumnsContainerProps, True, _render_columns),
    "EmailLayout": (EmailLayoutProps, True, _render_email_layout),
}


def register_builtin_blocks(registry: SchemaRegistry) -> SchemaRegistry:
    """Register every built-in email block on `registry` (left unfrozen)."""
    for type_name, (props_model, container, renderer) in _BUILTINS.items():
        defaults = DEFAULT_BLOCK_DATA[type_name]
        registry.register(
            type_name,
            BlockSchema(props=props_model, style=BlockStyle),
            can_have_children=container,
            renderer=renderer,
            default_props=defaults["props"],
            default_style=defaults["style"],
        )
    return registry


@lru_cache(maxsize=1)
def default_registry() -> SchemaRegistry:
    """The process-wide registry of built-in blocks. Frozen."""
    return register_builtin_blocks(SchemaRegistry()).freeze()
