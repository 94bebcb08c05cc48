"""
Key user flow inference.

Locates the element a described key action most likely refers to, by
matching the description against the text of clickable elements.
"""

from __future__ import annotations

from typing import Iterable, Optional

from uxdoctor.app.context.business_context import KEY_ACTION_VOCABULARY
from uxdoctor.app.schemas.ui_schema import KeyUserFlow, UIElement


def _candidate_text(element: UIElement) -> str:
    return (element.text or element.aria.label).strip().lower()


def infer_action_element(
    elements: Iterable[UIElement],
    key_action: str,
) -> Optional[UIElement]:
    """
    Return the first clickable element matching `key_action`.

    Matching passes, in order:
    1. element text contained in the description, or the reverse
    2. a key-action vocabulary word present in both
    """
    description = key_action.strip().lower()
    if not description:
        return None

    clickable = [e for e in elements if e.is_clickable and _candidate_text(e)]

    for element in clickable:
        text = _candidate_text(element)
        if text in description or description in text:
            return element

    words = [w for w in KEY_ACTION_VOCABULARY if w in description]
    for element in clickable:
        text = _candidate_text(element)
        if any(word in text for word in words):
            return element

    return None


def infer_key_user_flow(
    elements: Iterable[UIElement],
    key_action: Optional[str],
) -> Optional[KeyUserFlow]:
    if not key_action or not key_action.strip():
        return None

    target = infer_action_element(elements, key_action)
    return KeyUserFlow(
        description=key_action.strip(),
        action_element_id=target.id if target is not None else None,
        action_selector=target.css_selector if target is not None else None,
    )
