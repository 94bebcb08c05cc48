"""
Schema normalizer.

Converts a raw DOM/accessibility snapshot into the Unified UI Schema.

IMPORTANT:
- Traversal is depth-first pre-order; ids are assigned in visitation order
  (e1, e2, ...).
- Text nodes inherit their parent's dom_path and are not path segments.
- Unknown facts stay None. Nothing is estimated or defaulted into a
  measurement, except the per-tag default font size.
- An absent snapshot yields None, never an exception.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from uxdoctor.app.normalizer.attributes import (
    coerce_attributes,
    computed_style,
    css_selector,
    font_size_px,
    input_type,
    is_clickable,
    is_required,
    join_path,
    measured_contrast,
    node_bounding_box,
    node_children,
    node_content,
    node_kind,
    node_tag,
    path_segment,
    positive_number,
    resolve_label,
    resolve_role,
    string_attr,
    text_index,
    truncate,
)
from uxdoctor.app.normalizer.key_flow import infer_key_user_flow
from uxdoctor.app.normalizer.tables import (
    default_role_for,
    element_type_for,
)
from uxdoctor.app.schemas.ui_schema import (
    AriaInfo,
    ElementType,
    PageMeta,
    UIElement,
    UnifiedSchema,
    Viewport,
)

logger = logging.getLogger(__name__)


DEFAULT_MAX_ELEMENTS = 100
DEFAULT_TEXT_LIMIT = 100
ROOT_PATH = "body"

ELEMENT_CONFIDENCE = 0.9
TEXT_NODE_CONFIDENCE = 0.8
TEXT_TAG = "#text"


# ---------------------------------------------------------------------------
# Snapshot access
# ---------------------------------------------------------------------------


def dom_root(raw_snapshot: object) -> Optional[Mapping[str, Any]]:
    """Return the DOM tree root (`domTree`, or legacy `domNodes`)."""
    if not isinstance(raw_snapshot, Mapping):
        return None
    for key in ("domTree", "domNodes"):
        root = raw_snapshot.get(key)
        if isinstance(root, Mapping):
            return root
    return None


def count_nodes(raw_snapshot: object) -> int:
    """Number of DOM nodes in the snapshot, root excluded."""
    root = dom_root(raw_snapshot)
    if root is None:
        return 0
    total = 0
    stack = list(node_children(root))
    while stack:
        node = stack.pop()
        if not isinstance(node, Mapping):
            continue
        total += 1
        stack.extend(node_children(node))
    return total


def _viewport(raw_snapshot: Mapping[str, Any]) -> Viewport:
    raw = raw_snapshot.get("viewport")
    if not isinstance(raw, Mapping):
        return Viewport()
    width = raw.get("width")
    height = raw.get("height")
    if (
        isinstance(width, int)
        and isinstance(height, int)
        and not isinstance(width, bool)
        and not isinstance(height, bool)
        and width > 0
        and height > 0
    ):
        return Viewport(width=width, height=height)
    return Viewport()


def _axe_violations(raw_snapshot: Mapping[str, Any]) -> Tuple[Dict[str, Any], ...]:
    violations = raw_snapshot.get("axeViolations")
    if violations is None:
        axe_results = raw_snapshot.get("axeResults")
        if isinstance(axe_results, Mapping):
            violations = axe_results.get("violations")
    if not isinstance(violations, (list, tuple)):
        return ()
    return tuple(dict(v) for v in violations if isinstance(v, Mapping))


def _label_index(
    root: Mapping[str, Any], texts: Mapping[int, str]
) -> Dict[str, str]:
    """Map `<label for=...>` targets to the label text (first label wins)."""
    index: Dict[str, str] = {}
    stack = list(reversed(node_children(root)))
    while stack:
        node = stack.pop()
        if node_kind(node) != "element":
            continue
        if node_tag(node) == "label":
            attributes = coerce_attributes(node.get("attributes"))
            target = string_attr(attributes, "for").strip()
            text = texts.get(id(node), "")
            if target and text and target not in index:
                index[target] = text
        stack.extend(reversed(node_children(node)))
    return index


# ---------------------------------------------------------------------------
# Element construction
# ---------------------------------------------------------------------------


def _element_from_node(
    node: Mapping[str, Any],
    *,
    element_id: str,
    tag: str,
    parent_path: str,
    label_index: Mapping[str, str],
    texts: Mapping[int, str],
    text_limit: int,
) -> UIElement:
    attributes = coerce_attributes(node.get("attributes"))
    kind_of_input = input_type(tag, attributes)
    role = resolve_role(attributes, default_role_for(tag, kind_of_input))
    style = computed_style(node)

    return UIElement(
        id=element_id,
        type=element_type_for(tag, kind_of_input),
        tag=tag,
        text=texts.get(id(node), ""),
        dom_path=join_path(parent_path, path_segment(tag, attributes)),
        css_selector=css_selector(tag, attributes),
        aria=AriaInfo(
            role=role,
            label=truncate(
                resolve_label(tag, attributes, label_index), text_limit
            ),
        ),
        is_clickable=is_clickable(tag, attributes, role),
        is_required=is_required(attributes),
        contrast_ratio=measured_contrast(node, style),
        font_size_px=font_size_px(tag, style),
        bounding_box=node_bounding_box(node),
        confidence=ELEMENT_CONFIDENCE,
    )


def _text_element(
    node: Mapping[str, Any],
    *,
    element_id: str,
    text: str,
    parent: Optional[UIElement],
    parent_path: str,
    text_limit: int,
) -> UIElement:
    return UIElement(
        id=element_id,
        type=ElementType.TEXT,
        tag=TEXT_TAG,
        text=truncate(text, text_limit),
        dom_path=parent_path,
        css_selector=parent.css_selector if parent is not None else "",
        aria=AriaInfo(role="text", label=""),
        is_clickable=False,
        is_required=False,
        contrast_ratio=positive_number(node.get("contrastRatio")),
        font_size_px=parent.font_size_px if parent is not None else None,
        bounding_box=node_bounding_box(node),
        confidence=TEXT_NODE_CONFIDENCE,
    )


def _flatten(
    root: Mapping[str, Any],
    *,
    label_index: Mapping[str, str],
    texts: Mapping[int, str],
    text_limit: int,
) -> List[UIElement]:
    elements: List[UIElement] = []

    # (node, parent path, parent element)
    stack: List[Tuple[Any, str, Optional[UIElement]]] = [
        (child, ROOT_PATH, None)
        for child in reversed(node_children(root))
    ]

    while stack:
        node, parent_path, parent = stack.pop()
        kind = node_kind(node)

        if kind == "text":
            text = node_content(node).strip()
            if not text:
                continue
            elements.append(
                _text_element(
                    node,
                    element_id=f"e{len(elements) + 1}",
                    text=text,
                    parent=parent,
                    parent_path=parent_path,
                    text_limit=text_limit,
                )
            )
            continue

        if kind != "element":
            continue

        tag = node_tag(node)
        if not tag:
            # Malformed node: keep its subtree under the current parent.
            stack.extend(
                (child, parent_path, parent)
                for child in reversed(node_children(node))
            )
            continue

        element = _element_from_node(
            node,
            element_id=f"e{len(elements) + 1}",
            tag=tag,
            parent_path=parent_path,
            label_index=label_index,
            texts=texts,
            text_limit=text_limit,
        )
        elements.append(element)

        stack.extend(
            (child, element.dom_path, element)
            for child in reversed(node_children(node))
        )

    return elements


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize(
    raw_snapshot: object,
    page_url: str = "",
    *,
    max_elements: Optional[int] = DEFAULT_MAX_ELEMENTS,
    key_action: Optional[str] = None,
    text_limit: int = DEFAULT_TEXT_LIMIT,
) -> Optional[UnifiedSchema]:
    """
    Normalize a raw snapshot into a UnifiedSchema.

    `max_elements=None` requests the full element set. The key user flow
    is inferred over the full set before any truncation.
    """
    if text_limit < 1:
        raise ValueError("text_limit must be positive")

    root = dom_root(raw_snapshot)
    if root is None or not isinstance(raw_snapshot, Mapping):
        logger.info(
            "No DOM tree in snapshot for %s; nothing to normalize", page_url
        )
        return None

    texts = text_index(root, text_limit)
    label_index = _label_index(root, texts)
    elements = _flatten(
        root, label_index=label_index, texts=texts, text_limit=text_limit
    )

    schema = UnifiedSchema(
        page_meta=PageMeta(
            source_type="url",
            page_url=page_url or "",
            viewport=_viewport(raw_snapshot),
            platform="desktop",
            has_accessibility_tree=raw_snapshot.get("accessibilityTree")
            is not None,
        ),
        elements=tuple(elements),
        axe_issues=_axe_violations(raw_snapshot),
        key_user_flow=infer_key_user_flow(elements, key_action),
        total_element_count=len(elements),
        truncated=False,
    )

    bounded = schema.bounded(max_elements)
    if bounded.truncated:
        logger.debug(
            "Schema for %s truncated to %s of %s elements",
            page_url,
            len(bounded.elements),
            schema.total_element_count,
        )
    return bounded
