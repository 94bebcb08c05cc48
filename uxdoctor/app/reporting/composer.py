"""
Report composition helpers.

Presentation-oriented, deterministic transformations of the final issue
list: canonical suggestion fill-in, severity counts and the executive
summary.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from uxdoctor.app.context.business_context import UNSPECIFIED, BusinessContext
from uxdoctor.app.rules.catalog import DEFAULT_SUGGESTION, get_engine_rule
from uxdoctor.app.schemas.issues import Issue, Severity
from uxdoctor.app.schemas.report import ExecutiveSummary, ScoreCard


# Suggestions at or below this length are considered placeholders
MIN_ACTIONABLE_SUGGESTION_LENGTH = 10


def canonical_suggestion(rule_id: str) -> str:
    rule = get_engine_rule(rule_id)
    return rule.suggestion if rule is not None else DEFAULT_SUGGESTION


def fill_actionable_suggestions(issues: Iterable[Issue]) -> List[Issue]:
    """Replace missing or placeholder suggestions with the rule's own text."""
    filled = []
    for issue in issues:
        if len(issue.suggestion.strip()) > MIN_ACTIONABLE_SUGGESTION_LENGTH:
            filled.append(issue)
            continue
        filled.append(
            issue.model_copy(
                update={"suggestion": canonical_suggestion(issue.rule_id)}
            )
        )
    return filled


def severity_counts(issues: Iterable[Issue]) -> Dict[str, int]:
    """Counts per severity, every severity present, most severe first."""
    counts = {severity.value: 0 for severity in Severity}
    for issue in issues:
        counts[issue.severity.value] += 1
    return counts


def executive_summary(
    issues: List[Issue],
    context: BusinessContext,
    score_card: Optional[ScoreCard] = None,
) -> ExecutiveSummary:
    counts = severity_counts(issues)
    pending = sum(1 for issue in issues if issue.is_pending_review)

    subject = (
        f"this {context.industry} page"
        if context.industry != UNSPECIFIED
        else "this page"
    )
    goal = (
        context.business_goal
        if context.business_goal != UNSPECIFIED
        else "a better user experience"
    )

    headline = (
        f"The usability check of {subject} found {len(issues)} issue(s): "
        f"{counts['critical']} critical, {counts['high']} high, "
        f"{counts['medium']} medium and {counts['low']} low. "
        f"They may hold back the goal of {goal}; address critical and "
        f"high issues first."
    )
    if pending:
        headline += f" {pending} issue(s) contradict measured facts and await review."

    return ExecutiveSummary(
        total_issues=len(issues),
        severity_counts=counts,
        pending_review_count=pending,
        overall_score=score_card.overall_score if score_card else None,
        scenario=context.scenario.value,
        headline=headline,
    )
