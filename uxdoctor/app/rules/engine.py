"""
Deterministic rule engine.

Runs a fixed, ordered set of quantitative checks against every element of
a UnifiedSchema and produces raw Issues.

IMPORTANT:
- Each check reads exactly one element and emits at most one Issue.
- Checks never mutate the schema.
- Output depends on the schema only (no time, no randomness), so equal
  schemas always yield equal issue lists.
- Every issue carries evidence.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from uxdoctor.app.rules.catalog import (
    ALT_TEXT_RULE_ID,
    ARIA_LABEL_RULE_ID,
    CLICKABLE_SIZE_RULE_ID,
    CONTRAST_RULE_ID,
    ENGINE_RULES,
    FONT_SIZE_RULE_ID,
    FORM_LABEL_RULE_ID,
    REQUIRED_FIELD_RULE_ID,
)
from uxdoctor.app.schemas.issues import Issue, IssueSource, Severity
from uxdoctor.app.schemas.ui_schema import ElementType, UIElement, UnifiedSchema

logger = logging.getLogger(__name__)


# WCAG 2.x AA thresholds
CONTRAST_AA_MIN = 4.5
CONTRAST_SEVERE_BELOW = 3.0

MIN_BODY_FONT_PX = 14.0
MIN_TOUCH_TARGET_PX = 44.0

# Alt text that only restates the element type
PLACEHOLDER_ALT_TEXT = "image"

REQUIRED_MARKERS: Tuple[str, ...] = ("*", "required", "必填")

REQUIRED_FIELD_MODES = ("attribute", "dom_path_marker")

_TEXTUAL_TYPES = frozenset({ElementType.TEXT, ElementType.HEADING})
_NAMED_INTERACTIVE_TYPES = frozenset(
    {ElementType.BUTTON, ElementType.LINK, ElementType.IMAGE}
)


def format_number(value: float) -> str:
    """Compact decimal rendering used in evidence (2.1, 4.49, 30)."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


Check = Callable[[UIElement], Optional[Issue]]


class RuleEngine:
    """
    Ordered per-element rule evaluation.

    Check order (MUST remain stable):
        contrast, font size, clickable size, form label, required field,
        aria label, alt text.
    """

    def __init__(self, *, required_field_detection: str = "attribute") -> None:
        if required_field_detection not in REQUIRED_FIELD_MODES:
            raise ValueError(
                f"Unsupported required field detection mode "
                f"'{required_field_detection}'"
            )
        self._required_field_detection = required_field_detection

        self._checks: Tuple[Check, ...] = (
            self._check_contrast,
            self._check_font_size,
            self._check_clickable_size,
            self._check_form_label,
            self._check_required_field,
            self._check_aria_label,
            self._check_alt_text,
        )

    @property
    def required_field_detection(self) -> str:
        return self._required_field_detection

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate(self, schema: Optional[UnifiedSchema]) -> List[Issue]:
        if schema is None:
            return []

        issues: List[Issue] = []
        for element in schema.elements:
            for check in self._checks:
                issue = check(element)
                if issue is not None:
                    issues.append(issue)

        logger.debug(
            "Rule engine produced %s issues for %s elements",
            len(issues),
            len(schema.elements),
        )
        return issues

    # ------------------------------------------------------------------
    # Issue construction
    # ------------------------------------------------------------------

    @staticmethod
    def _issue(
        element: UIElement,
        rule_id: str,
        *,
        explanation: str,
        evidence: str,
        severity: Optional[Severity] = None,
    ) -> Issue:
        rule = ENGINE_RULES[rule_id]
        return Issue(
            element_id=element.id,
            rule_id=rule_id,
            severity=severity or rule.severity,
            confidence=element.confidence,
            explanation=explanation,
            suggestion=rule.suggestion,
            evidence=evidence,
            source=IssueSource.RULE_ENGINE,
        )

    # ------------------------------------------------------------------
    # Checks (one element each)
    # ------------------------------------------------------------------

    def _check_contrast(self, element: UIElement) -> Optional[Issue]:
        ratio = element.contrast_ratio
        if ratio is None or ratio >= CONTRAST_AA_MIN:
            return None

        severity = Severity.HIGH if ratio < CONTRAST_SEVERE_BELOW else Severity.MEDIUM
        font = (
            f"{format_number(element.font_size_px)}px"
            if element.font_size_px is not None
            else "unknown"
        )
        return self._issue(
            element,
            CONTRAST_RULE_ID,
            severity=severity,
            explanation=(
                f"Text to background contrast is {format_number(ratio)}:1, "
                f"below the WCAG AA minimum of 4.5:1; low-vision users may "
                f"be unable to read it."
            ),
            evidence=f"contrast_ratio={format_number(ratio)}, font_size={font}",
        )

    def _check_font_size(self, element: UIElement) -> Optional[Issue]:
        size = element.font_size_px
        if element.type not in _TEXTUAL_TYPES or size is None:
            return None
        if size >= MIN_BODY_FONT_PX:
            return None

        return self._issue(
            element,
            FONT_SIZE_RULE_ID,
            explanation=(
                f"Font size is {format_number(size)}px, smaller than the "
                f"recommended 14px, which makes the text hard to read."
            ),
            evidence=f"font_size={format_number(size)}px",
        )

    def _check_clickable_size(self, element: UIElement) -> Optional[Issue]:
        if not element.is_clickable or element.bounding_box is None:
            return None

        width, height = element.width, element.height
        if width >= MIN_TOUCH_TARGET_PX and height >= MIN_TOUCH_TARGET_PX:
            return None

        box = ",".join(format_number(v) for v in element.bounding_box)
        return self._issue(
            element,
            CLICKABLE_SIZE_RULE_ID,
            explanation=(
                f"Clickable element is {format_number(width)}x"
                f"{format_number(height)}px, smaller than the recommended "
                f"44x44px; users may struggle to hit it accurately."
            ),
            evidence=f"bbox=[{box}]",
        )

    def _check_form_label(self, element: UIElement) -> Optional[Issue]:
        if element.type != ElementType.INPUT or element.aria.label:
            return None

        return self._issue(
            element,
            FORM_LABEL_RULE_ID,
            explanation=(
                "Form control has no associated label; screen reader users "
                "cannot tell what to enter."
            ),
            evidence="type=input, aria.label=missing",
        )

    def _check_required_field(self, element: UIElement) -> Optional[Issue]:
        if element.type != ElementType.INPUT:
            return None

        if self._required_field_detection == "dom_path_marker":
            if "*" not in element.dom_path:
                return None
            evidence = "type=input, required=indicated by * in dom_path"
        else:
            if not element.is_required or _has_required_marker(element):
                return None
            evidence = "type=input, required=true, marker=missing"

        return self._issue(
            element,
            REQUIRED_FIELD_RULE_ID,
            explanation=(
                "Required field is not visibly marked; users may only learn "
                "it is mandatory when the form is rejected on submit."
            ),
            evidence=evidence,
        )

    def _check_aria_label(self, element: UIElement) -> Optional[Issue]:
        if element.type not in _NAMED_INTERACTIVE_TYPES:
            return None
        if element.aria.label or element.text:
            return None

        return self._issue(
            element,
            ARIA_LABEL_RULE_ID,
            explanation=(
                "Interactive element has neither an accessible label nor "
                "text; screen reader users cannot tell what it does."
            ),
            evidence=(
                f"type={element.type.value}, aria.label=missing, text=missing"
            ),
        )

    def _check_alt_text(self, element: UIElement) -> Optional[Issue]:
        if element.type != ElementType.IMAGE:
            return None
        label = element.aria.label
        if label and label != PLACEHOLDER_ALT_TEXT:
            return None

        return self._issue(
            element,
            ALT_TEXT_RULE_ID,
            explanation=(
                "Image has no meaningful alternative text; visually impaired "
                "users cannot understand its content."
            ),
            evidence=f"type=image, aria.label={label or 'missing'}",
        )


def _has_required_marker(element: UIElement) -> bool:
    haystack = f"{element.aria.label} {element.text}".lower()
    return any(marker in haystack for marker in REQUIRED_MARKERS)


_DEFAULT_ENGINE = RuleEngine()


def evaluate(schema: Optional[UnifiedSchema]) -> List[Issue]:
    """Evaluate `schema` with the default (attribute-based) engine."""
    return _DEFAULT_ENGINE.evaluate(schema)
