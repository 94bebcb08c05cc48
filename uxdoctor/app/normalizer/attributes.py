"""
Attribute coercion and per-node fact extraction.

Raw snapshot nodes are untrusted, dynamically shaped mappings. Every helper
here degrades malformed input to "absent" and never raises for data-shape
reasons.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from uxdoctor.app.normalizer.contrast import contrast_from_css
from uxdoctor.app.normalizer.tables import (
    CLICKABLE_TAGS,
    INPUT_LIKE_TAGS,
    LABELABLE_TAGS,
    default_font_size_for,
)
from uxdoctor.app.schemas.ui_schema import DOM_PATH_SEPARATOR


_PX_VALUE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(px)?\s*$", re.IGNORECASE)
_FALSE_VALUES = {"false", "0", "no", "off"}


# ---------------------------------------------------------------------------
# Node access
# ---------------------------------------------------------------------------


def node_kind(node: object) -> str:
    if not isinstance(node, Mapping):
        return ""
    kind = node.get("type")
    return kind if isinstance(kind, str) else ""


def node_tag(node: Mapping[str, Any]) -> str:
    tag = node.get("tagName")
    return tag.strip().lower() if isinstance(tag, str) else ""


def node_children(node: Mapping[str, Any]) -> List[Any]:
    children = node.get("children")
    if isinstance(children, (list, tuple)):
        return list(children)
    return []


def node_content(node: Mapping[str, Any]) -> str:
    content = node.get("content")
    return content if isinstance(content, str) else ""


# ---------------------------------------------------------------------------
# Attribute coercion
# ---------------------------------------------------------------------------


def coerce_attributes(raw: object) -> Dict[str, Any]:
    """Return a plain attribute dict; non-mapping input becomes empty."""
    if not isinstance(raw, Mapping):
        return {}
    return {str(key): value for key, value in raw.items()}


def string_attr(attributes: Mapping[str, Any], name: str) -> str:
    """Attribute value when it is a string, otherwise empty."""
    value = attributes.get(name)
    return value if isinstance(value, str) else ""


def flag_attr(attributes: Mapping[str, Any], name: str) -> bool:
    """
    Boolean HTML attribute presence.

    Present with an empty string or its own name means true; explicit
    false-like values and None mean absent.
    """
    if name not in attributes:
        return False
    value = attributes[name]
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_VALUES
    return True


def class_list(attributes: Mapping[str, Any]) -> List[str]:
    raw = string_attr(attributes, "class") or string_attr(
        attributes, "className"
    )
    return raw.split()


def element_id_attr(attributes: Mapping[str, Any]) -> str:
    return string_attr(attributes, "id").strip()


def input_type(tag: str, attributes: Mapping[str, Any]) -> str:
    if tag != "input":
        return ""
    return string_attr(attributes, "type").strip().lower()


# ---------------------------------------------------------------------------
# Locators
# ---------------------------------------------------------------------------


def path_segment(tag: str, attributes: Mapping[str, Any]) -> str:
    """`tag#id`, else `tag.cls.cls`, else `tag`."""
    element_id = element_id_attr(attributes)
    if element_id:
        return f"{tag}#{element_id}"
    classes = class_list(attributes)
    if classes:
        return tag + "." + ".".join(classes)
    return tag


def join_path(parent_path: str, segment: str) -> str:
    return f"{parent_path}{DOM_PATH_SEPARATOR}{segment}"


def css_selector(tag: str, attributes: Mapping[str, Any]) -> str:
    """`#id`, else `tag.cls.cls`, else `tag`."""
    element_id = element_id_attr(attributes)
    if element_id:
        return f"#{element_id}"
    return path_segment(tag, attributes)


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]


def text_index(root: object, limit: int) -> Dict[int, str]:
    """
    Visible text of every node under `root`, keyed by `id(node)`.

    Input-like elements report value, then placeholder. Containers join the
    non-blank text of their children with single spaces. Each entry is
    truncated to `limit`; since only a prefix survives, children are
    truncated before joining.

    Computed in one iterative post-order pass, so depth is unbounded.
    """
    texts: Dict[int, str] = {}
    if not isinstance(root, Mapping):
        return texts

    stack: List[Tuple[Any, bool]] = [
        (child, False) for child in reversed(node_children(root))
    ]

    while stack:
        node, children_done = stack.pop()
        if not isinstance(node, Mapping):
            continue

        kind = node_kind(node)
        if kind == "text":
            texts[id(node)] = truncate(node_content(node).strip(), limit)
            continue
        if kind != "element":
            continue

        children = node_children(node)
        if not children_done:
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(children))
            continue

        if node_tag(node) in INPUT_LIKE_TAGS:
            attributes = coerce_attributes(node.get("attributes"))
            text = (
                string_attr(attributes, "value").strip()
                or string_attr(attributes, "placeholder").strip()
            )
        else:
            text = " ".join(
                part
                for part in (texts.get(id(child), "") for child in children)
                if part
            )
        texts[id(node)] = truncate(text, limit)

    return texts


# ---------------------------------------------------------------------------
# Accessibility
# ---------------------------------------------------------------------------


def resolve_label(
    tag: str,
    attributes: Mapping[str, Any],
    label_index: Mapping[str, str],
) -> str:
    """
    Accessible name resolution order:
    aria-label, alt (img only), <label for=id> text (labelable tags
    only), title.
    """
    label = string_attr(attributes, "aria-label").strip()
    if label:
        return label

    if tag == "img":
        alt = string_attr(attributes, "alt").strip()
        if alt:
            return alt

    element_id = element_id_attr(attributes)
    if tag in LABELABLE_TAGS and element_id and label_index.get(element_id):
        return label_index[element_id]

    return string_attr(attributes, "title").strip()


def resolve_role(attributes: Mapping[str, Any], default_role: str) -> str:
    role = string_attr(attributes, "role").strip().lower()
    return role or default_role


def is_clickable(tag: str, attributes: Mapping[str, Any], role: str) -> bool:
    if tag in CLICKABLE_TAGS:
        return True
    if attributes.get("onclick") not in (None, False, ""):
        return True
    return role == "button"


def is_required(attributes: Mapping[str, Any]) -> bool:
    if flag_attr(attributes, "required"):
        return True
    return string_attr(attributes, "aria-required").strip().lower() == "true"


# ---------------------------------------------------------------------------
# Measured facts
# ---------------------------------------------------------------------------


def positive_number(value: object) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def parse_px(value: object) -> Optional[float]:
    """Parse `14`, `14px` or `14.5px`; other units parse to None."""
    number = positive_number(value)
    if number is not None:
        return number
    if not isinstance(value, str):
        return None
    match = _PX_VALUE.match(value)
    if not match:
        return None
    return positive_number(float(match.group(1)))


def parse_bounding_box(
    value: object,
) -> Optional[Tuple[float, float, float, float]]:
    """Accept `[x, y, w, h]` or `{x, y, width, height}` with finite numbers."""
    if isinstance(value, Mapping):
        value = [
            value.get("x"),
            value.get("y"),
            value.get("width"),
            value.get("height"),
        ]
    if not isinstance(value, (list, tuple)) or len(value) != 4:
        return None

    box = []
    for component in value:
        if isinstance(component, bool) or not isinstance(
            component, (int, float)
        ):
            return None
        number = float(component)
        if not math.isfinite(number):
            return None
        box.append(number)

    if box[2] < 0 or box[3] < 0:
        return None
    return (box[0], box[1], box[2], box[3])


def computed_style(node: Mapping[str, Any]) -> Mapping[str, Any]:
    style = node.get("computedStyle")
    return style if isinstance(style, Mapping) else {}


def font_size_px(tag: str, style: Mapping[str, Any]) -> float:
    measured = parse_px(style.get("fontSize"))
    if measured is not None:
        return measured
    return default_font_size_for(tag)


def measured_contrast(
    node: Mapping[str, Any], style: Mapping[str, Any]
) -> Optional[float]:
    explicit = positive_number(node.get("contrastRatio"))
    if explicit is not None:
        return explicit
    return contrast_from_css(
        style.get("color"),
        style.get("backgroundColor"),
    )


def node_bounding_box(
    node: Mapping[str, Any],
) -> Optional[Tuple[float, float, float, float]]:
    box = parse_bounding_box(node.get("boundingBox"))
    if box is None:
        box = parse_bounding_box(node.get("bbox"))
    return box
