"""
Business-impact prioritization.

Orders issues by:
1. severity, descending
2. relation to the key user action, only for conversion-oriented goals
3. confidence, descending

The sort is stable: issues with equal keys keep their input order.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

from uxdoctor.app.context.business_context import (
    KEY_ACTION_VOCABULARY,
    BusinessContext,
    parse_business_context,
)
from uxdoctor.app.schemas.issues import Issue
from uxdoctor.app.schemas.ui_schema import UIElement, UnifiedSchema


KEY_ACTION_TAGS = frozenset({"button", "a", "input"})


def is_key_action_related(
    element: Optional[UIElement],
    context: BusinessContext,
    schema: Optional[UnifiedSchema] = None,
) -> bool:
    """
    Whether an issue's element is tied to the key user action.

    Unresolvable elements are never related.
    """
    if element is None:
        return False

    if schema is not None and schema.key_user_flow is not None:
        if schema.key_user_flow.action_element_id == element.id:
            return True

    if element.is_clickable or element.tag in KEY_ACTION_TAGS:
        return True

    text = element.text.lower()
    if not text:
        return False
    if any(word in text for word in KEY_ACTION_VOCABULARY):
        return True
    return context.has_key_action and context.key_action.lower() in text


def _as_context(
    business_context: Union[BusinessContext, str, None],
) -> BusinessContext:
    if isinstance(business_context, BusinessContext):
        return business_context
    return parse_business_context(business_context)


def prioritize(
    issues: Iterable[Issue],
    business_context: Union[BusinessContext, str, None] = None,
    schema: Optional[UnifiedSchema] = None,
) -> List[Issue]:
    """Return a new, stably sorted list; the input is left untouched."""
    context = _as_context(business_context)
    elements = schema.element_index() if schema is not None else {}
    boost_key_action = context.is_conversion_oriented

    def sort_key(issue: Issue):
        related = boost_key_action and is_key_action_related(
            elements.get(issue.element_id), context, schema
        )
        return (-issue.severity.rank, 0 if related else 1, -issue.confidence)

    return sorted(issues, key=sort_key)
