"""
Dimension scoring.

Every dimension starts at 100 and loses a fixed deduction per attributed
issue (critical 20, high 10, medium 5, low 2), floored at 0.

Attribution order:
1. an explicit dimension category on the issue (e.g. 'accessibility')
2. the tag family of the referenced element
3. the visual dimension (explicit fallback, never dropped)
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping, Optional

from uxdoctor.app.schemas.issues import Issue, Severity
from uxdoctor.app.schemas.report import ScoreCard
from uxdoctor.app.schemas.ui_schema import UIElement, UnifiedSchema


ACCESSIBILITY = "accessibility"
VISUAL = "visual"
FORM = "form"
NAVIGATION = "navigation"
PERFORMANCE = "performance"

DIMENSIONS = (ACCESSIBILITY, VISUAL, FORM, NAVIGATION, PERFORMANCE)

MAX_SCORE = 100

SEVERITY_DEDUCTIONS: Mapping[Severity, int] = {
    Severity.CRITICAL: 20,
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 2,
}

_TAG_FAMILIES = (
    (frozenset({"h1", "h2", "h3", "h4", "h5", "h6", "p", "span"}), VISUAL),
    (frozenset({"input", "select", "textarea", "form"}), FORM),
    (frozenset({"a", "nav", "header", "footer"}), NAVIGATION),
)


def attribute_dimension(
    issue: Issue, element: Optional[UIElement] = None
) -> str:
    """Return the dimension an issue's deduction is charged to."""
    category = issue.category
    if category is not None and category in DIMENSIONS:
        return category

    if element is not None:
        for tags, dimension in _TAG_FAMILIES:
            if element.tag in tags:
                return dimension

    return VISUAL


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score(
    issues: Iterable[Issue],
    schema: Optional[UnifiedSchema] = None,
) -> ScoreCard:
    """
    Score issues per dimension.

    Without a schema no element can be resolved, so every issue without an
    explicit dimension category falls back to the visual dimension.
    """
    elements = schema.element_index() if schema is not None else {}
    deductions: Dict[str, int] = {dimension: 0 for dimension in DIMENSIONS}

    for issue in issues:
        dimension = attribute_dimension(issue, elements.get(issue.element_id))
        deductions[dimension] += SEVERITY_DEDUCTIONS[issue.severity]

    dimension_scores = {
        dimension: max(0, MAX_SCORE - deductions[dimension])
        for dimension in DIMENSIONS
    }

    return ScoreCard(
        dimension_scores=dimension_scores,
        overall_score=_round_half_up(
            sum(dimension_scores.values()) / len(dimension_scores)
        ),
    )
