"""
Static tag lookup tables used by the schema normalizer.

All tables are keyed by lowercase tag name and are read-only.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import FrozenSet, Mapping

from uxdoctor.app.schemas.ui_schema import ElementType


_HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

ELEMENT_TYPES: Mapping[str, ElementType] = MappingProxyType(
    {
        "button": ElementType.BUTTON,
        "input": ElementType.INPUT,
        "textarea": ElementType.INPUT,
        "select": ElementType.INPUT,
        **{tag: ElementType.HEADING for tag in _HEADING_TAGS},
        "img": ElementType.IMAGE,
        "a": ElementType.LINK,
        "nav": ElementType.NAV,
        "header": ElementType.BANNER,
        "footer": ElementType.CONTENTINFO,
        "aside": ElementType.COMPLEMENTARY,
        "main": ElementType.MAIN,
        "form": ElementType.FORM,
        "section": ElementType.REGION,
        "article": ElementType.ARTICLE,
    }
)

DEFAULT_ROLES: Mapping[str, str] = MappingProxyType(
    {
        "button": "button",
        "input": "textbox",
        "textarea": "textbox",
        "select": "combobox",
        "a": "link",
        "img": "img",
        **{tag: "heading" for tag in _HEADING_TAGS},
        "nav": "navigation",
        "header": "banner",
        "footer": "contentinfo",
        "aside": "complementary",
        "main": "main",
        "form": "form",
        "section": "region",
        "article": "article",
    }
)

DEFAULT_FONT_SIZES_PX: Mapping[str, float] = MappingProxyType(
    {
        "h1": 32.0,
        "h2": 24.0,
        "h3": 18.0,
        "h4": 16.0,
        "h5": 14.0,
        "h6": 12.0,
        "p": 16.0,
        "button": 14.0,
        "input": 16.0,
    }
)

FALLBACK_TYPE = ElementType.GENERIC
FALLBACK_ROLE = "generic"
FALLBACK_FONT_SIZE_PX = 16.0

# input[type=...] values rendered as buttons
BUTTON_INPUT_TYPES: FrozenSet[str] = frozenset({"submit", "button", "reset"})

CLICKABLE_TAGS: FrozenSet[str] = frozenset(
    {"button", "a", "input", "select", "textarea"}
)

# Tags whose text comes from value/placeholder instead of children
INPUT_LIKE_TAGS: FrozenSet[str] = frozenset({"input", "textarea"})

# Tags that can be the target of <label for="...">
LABELABLE_TAGS: FrozenSet[str] = frozenset(
    {"input", "select", "textarea", "button"}
)


def element_type_for(tag: str, input_type: str = "") -> ElementType:
    if tag == "input" and input_type in BUTTON_INPUT_TYPES:
        return ElementType.BUTTON
    return ELEMENT_TYPES.get(tag, FALLBACK_TYPE)


def default_role_for(tag: str, input_type: str = "") -> str:
    if tag == "input" and input_type in BUTTON_INPUT_TYPES:
        return "button"
    return DEFAULT_ROLES.get(tag, FALLBACK_ROLE)


def default_font_size_for(tag: str) -> float:
    return DEFAULT_FONT_SIZES_PX.get(tag, FALLBACK_FONT_SIZE_PX)
