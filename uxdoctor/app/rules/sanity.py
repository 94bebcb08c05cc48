"""
Issue sanity checker.

Cross-validates externally sourced (LLM) issues against the facts measured
in the Unified UI Schema.

IMPORTANT:
- A contradicted claim is NEVER dropped and NEVER silently corrected.
  It is passed through with status=pending_review and an explanatory note,
  because the discrepancy itself is diagnostic signal.
- Issues whose element or rule cannot be verified pass through unchanged.
- Output has the same length and order as the input.
- Input that is not a sequence of Issue objects is returned as received;
  non-Issue items inside a sequence pass through untouched.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Sequence

from uxdoctor.app.rules.catalog import CONTRAST_RULE_ID
from uxdoctor.app.rules.engine import CONTRAST_AA_MIN, format_number
from uxdoctor.app.schemas.issues import Issue, IssueStatus
from uxdoctor.app.schemas.ui_schema import UIElement, UnifiedSchema

logger = logging.getLogger(__name__)


# A verifier returns a contradiction note, or None when the measured facts
# do not contradict the claim.
Verifier = Callable[[Issue, UIElement], Optional[str]]


def verify_contrast(issue: Issue, element: UIElement) -> Optional[str]:
    ratio = element.contrast_ratio
    if ratio is None or ratio < CONTRAST_AA_MIN:
        return None
    return (
        f"[Review: the measured contrast ratio is {format_number(ratio)}:1, "
        f"which meets the 4.5:1 threshold; manual review recommended]"
    )


DEFAULT_VERIFIERS: Mapping[str, Verifier] = MappingProxyType(
    {
        CONTRAST_RULE_ID: verify_contrast,
    }
)


def reconcile(
    candidate_issues: Any,
    schema: Optional[UnifiedSchema],
    *,
    verifiers: Mapping[str, Verifier] = DEFAULT_VERIFIERS,
) -> Any:
    """
    Reconcile candidate issues with the measured facts of `schema`.

    `None` issues yield an empty list and a missing schema returns the issues
    unchanged. Anything that is not a sequence (strings included) is
    returned as-is.
    """
    if candidate_issues is None:
        return []

    if isinstance(candidate_issues, (str, bytes)) or not isinstance(
        candidate_issues, Sequence
    ):
        return candidate_issues

    if schema is None:
        return list(candidate_issues)

    elements = schema.element_index()
    reconciled: List[Any] = []

    for issue in candidate_issues:
        if not isinstance(issue, Issue):
            reconciled.append(issue)
            continue

        verifier = verifiers.get(issue.rule_id)
        element = elements.get(issue.element_id)

        if verifier is None or element is None:
            reconciled.append(issue)
            continue

        note = verifier(issue, element)
        if note is None:
            reconciled.append(issue)
            continue

        logger.info(
            "Issue %s on %s contradicts measured facts; marked for review",
            issue.rule_id,
            issue.element_id,
        )
        explanation = f"{issue.explanation} {note}" if issue.explanation else note
        reconciled.append(
            issue.model_copy(
                update={
                    "status": IssueStatus.PENDING_REVIEW,
                    "explanation": explanation,
                }
            )
        )

    return reconciled
