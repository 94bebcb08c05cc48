"""
Usability rule catalog.

Static, immutable catalog of the usability checks UXDoctor reports on,
grouped into weighted categories, plus the definitions of the rules the
deterministic engine evaluates.

The catalog is module-level constant data:
- it is constructed once at import time
- every model is frozen and every collection is a tuple or a read-only
  mapping
- nothing in the application mutates it

Category weights feed aggregate reporting only. They never change the
severity of an individual issue.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from uxdoctor.app.schemas.issues import Severity


# ---------------------------------------------------------------------------
# Catalog models
# ---------------------------------------------------------------------------


class RuleCheck(BaseModel):
    """A single usability check of the catalog."""

    id: str
    name: str
    description: str
    severity: Severity
    category: str = Field(..., description="Id of the owning RuleCategory")
    example: str

    model_config = ConfigDict(frozen=True, extra="forbid")


class RuleCategory(BaseModel):
    """A weighted group of usability checks."""

    id: str
    name: str
    description: str
    weight: float = Field(..., gt=0, le=1)
    checks: Tuple[RuleCheck, ...]

    model_config = ConfigDict(frozen=True, extra="forbid")


class EngineRule(BaseModel):
    """
    A rule evaluated by the deterministic rule engine.

    `check_id` links the rule to its catalog check when one exists.
    """

    rule_id: str
    name: str
    severity: Severity = Field(
        ...,
        description="Default severity; contrast escalates below 3:1",
    )
    default_confidence: float = Field(..., ge=0, le=1)
    check_id: Optional[str] = None
    suggestion: str

    model_config = ConfigDict(frozen=True, extra="forbid")


def _category(
    category_id: str,
    name: str,
    description: str,
    weight: float,
    checks: Tuple[Tuple[str, str, str, Severity, str], ...],
) -> RuleCategory:
    return RuleCategory(
        id=category_id,
        name=name,
        description=description,
        weight=weight,
        checks=tuple(
            RuleCheck(
                id=check_id,
                name=check_name,
                description=check_description,
                severity=severity,
                category=category_id,
                example=example,
            )
            for check_id, check_name, check_description, severity, example
            in checks
        ),
    )


# ---------------------------------------------------------------------------
# Catalog (FROZEN DATA)
# ---------------------------------------------------------------------------

RULE_CATEGORIES: Tuple[RuleCategory, ...] = (
    _category(
        "navigation",
        "Navigation & information architecture",
        "Navigation structure and organization of information",
        0.15,
        (
            (
                "navEntrySufficiency",
                "Sufficient navigation entries",
                "Top or side navigation covers the 3-5 main functions",
                Severity.MEDIUM,
                "The home page only offers a 'More' menu, hiding features",
            ),
            (
                "navConsistency",
                "Navigation consistency",
                "Navigation structure and order are the same on every page",
                Severity.HIGH,
                "'Contact us' is on the home page but missing on inner pages",
            ),
            (
                "breadcrumb",
                "Breadcrumbs",
                "Deep pages provide a breadcrumb path back",
                Severity.MEDIUM,
                "Product page lacks 'Category > Brand > Product'",
            ),
        ),
    ),
    _category(
        "form",
        "Forms & input",
        "Usability of forms and input controls",
        0.20,
        (
            (
                "placeholderClarity",
                "Clear placeholders",
                "Placeholders are specific enough to explain the input",
                Severity.LOW,
                "'Enter text' instead of 'Enter your phone number'",
            ),
            (
                "requiredFieldIndicator",
                "Required field indicator",
                "Required fields are visibly marked (* or a hint)",
                Severity.HIGH,
                "Users learn the phone number is required only on submit",
            ),
            (
                "errorFeedback",
                "Timely error feedback",
                "Form errors are reported inline, not only after submit",
                Severity.HIGH,
                "An invalid email is reported only after submission",
            ),
            (
                "inputRestrictions",
                "Input restrictions",
                "Controls match the expected input (number field, date picker)",
                Severity.MEDIUM,
                "Birthday must be typed by hand and is often mistyped",
            ),
        ),
    ),
    _category(
        "content_readability",
        "Content & readability",
        "Presentation and readability of content",
        0.15,
        (
            (
                "fontReadability",
                "Readable font size",
                "Body text is at least 14px",
                Severity.MEDIUM,
                "12px body text on mobile is hard to read",
            ),
            (
                "textContrast",
                "Text contrast",
                "Text to background contrast is at least 4.5:1",
                Severity.HIGH,
                "Grey text on a grey background is hard to read",
            ),
            (
                "lineHeight",
                "Comfortable line height",
                "Line height is 1.4-1.6 times the font size",
                Severity.LOW,
                "Tight line spacing makes paragraphs feel crowded",
            ),
        ),
    ),
    _category(
        "interaction_feedback",
        "Interaction & feedback",
        "User interaction and system feedback",
        0.15,
        (
            (
                "actionFeedback",
                "Action feedback",
                "Clicking a control produces visible feedback",
                Severity.HIGH,
                "A button shows no change on click and seems broken",
            ),
            (
                "loadingFeedback",
                "Loading feedback",
                "Loads longer than 2 seconds show a progress indicator",
                Severity.CRITICAL,
                "A blank screen for 5 seconds looks like a crash",
            ),
            (
                "reversibleActions",
                "Reversible actions",
                "Destructive actions can be confirmed or undone",
                Severity.HIGH,
                "Records are deleted without confirmation or recovery",
            ),
        ),
    ),
    _category(
        "performance_mobile",
        "Performance & mobile",
        "Performance and mobile adaptation",
        0.15,
        (
            (
                "firstScreenLoad",
                "First screen load time",
                "The home page loads within 3 seconds",
                Severity.CRITICAL,
                "The home page takes 6 seconds to open",
            ),
            (
                "imageOptimization",
                "Image optimization",
                "Images are appropriately sized and lazy-loaded",
                Severity.MEDIUM,
                "A 300KB icon slows down the page",
            ),
            (
                "responsiveLayout",
                "Responsive layout",
                "Pages render correctly at common screen widths",
                Severity.HIGH,
                "A horizontal scrollbar appears on phones",
            ),
        ),
    ),
    _category(
        "accessibility",
        "Accessibility",
        "Support for assistive technologies",
        0.10,
        (
            (
                "altText",
                "Alternative text",
                "Images carry a meaningful alt description",
                Severity.MEDIUM,
                "Product photo with alt=\"image\"",
            ),
            (
                "keyboardUsability",
                "Keyboard usability",
                "Core functions are operable with the keyboard",
                Severity.HIGH,
                "The login button cannot be focused with Tab",
            ),
            (
                "formLabels",
                "Form labels",
                "Form controls are associated with a label",
                Severity.HIGH,
                "An unlabeled input is announced as 'edit text'",
            ),
        ),
    ),
    _category(
        "trust_security",
        "Trust & security",
        "Security and trust signals",
        0.10,
        (
            (
                "https",
                "HTTPS",
                "The whole site is served over HTTPS",
                Severity.CRITICAL,
                "The login page is served over plain http",
            ),
            (
                "permissionPrompt",
                "Permission prompts",
                "Users are asked before private data is accessed",
                Severity.HIGH,
                "The app opens the camera without asking",
            ),
            (
                "contactInfo",
                "Contact information",
                "Clear contact channels (email, support) are provided",
                Severity.MEDIUM,
                "No contact channel can be found",
            ),
        ),
    ),
)


# ---------------------------------------------------------------------------
# Engine rules (FROZEN DATA)
# ---------------------------------------------------------------------------

CONTRAST_RULE_ID = "contrast-001"
FONT_SIZE_RULE_ID = "font-size-001"
CLICKABLE_SIZE_RULE_ID = "clickable-size-001"
FORM_LABEL_RULE_ID = "form-label-001"
REQUIRED_FIELD_RULE_ID = "required-field-001"
ARIA_LABEL_RULE_ID = "aria-label-001"
ALT_TEXT_RULE_ID = "alt-text-001"

ENGINE_RULES: Mapping[str, EngineRule] = MappingProxyType(
    {
        rule.rule_id: rule
        for rule in (
            EngineRule(
                rule_id=CONTRAST_RULE_ID,
                name="Text contrast",
                severity=Severity.MEDIUM,
                default_confidence=0.9,
                check_id="textContrast",
                suggestion=(
                    "Adjust the text or background color so the contrast "
                    "ratio reaches at least 4.5:1 (WCAG AA), and verify the "
                    "result with a contrast checker."
                ),
            ),
            EngineRule(
                rule_id=FONT_SIZE_RULE_ID,
                name="Readable font size",
                severity=Severity.MEDIUM,
                default_confidence=0.8,
                check_id="fontReadability",
                suggestion=(
                    "Raise body text to at least 14px and keep headings "
                    "larger to preserve a clear visual hierarchy."
                ),
            ),
            EngineRule(
                rule_id=CLICKABLE_SIZE_RULE_ID,
                name="Touch target size",
                severity=Severity.MEDIUM,
                default_confidence=0.85,
                check_id=None,
                suggestion=(
                    "Enlarge the clickable element to at least 44x44px, or "
                    "add padding to extend its hit area."
                ),
            ),
            EngineRule(
                rule_id=FORM_LABEL_RULE_ID,
                name="Form label",
                severity=Severity.HIGH,
                default_confidence=0.9,
                check_id="formLabels",
                suggestion=(
                    "Associate the control with a <label> element or give "
                    "it an aria-label that states its purpose."
                ),
            ),
            EngineRule(
                rule_id=REQUIRED_FIELD_RULE_ID,
                name="Required field indicator",
                severity=Severity.HIGH,
                default_confidence=0.95,
                check_id="requiredFieldIndicator",
                suggestion=(
                    "Mark required fields with an asterisk (*) or a visible "
                    "'required' hint, and explain the marker in the form."
                ),
            ),
            EngineRule(
                rule_id=ARIA_LABEL_RULE_ID,
                name="Accessible name",
                severity=Severity.MEDIUM,
                default_confidence=0.8,
                check_id=None,
                suggestion=(
                    "Give the interactive element an aria-label or visible "
                    "text so screen reader users understand its purpose."
                ),
            ),
            EngineRule(
                rule_id=ALT_TEXT_RULE_ID,
                name="Image alternative text",
                severity=Severity.MEDIUM,
                default_confidence=0.85,
                check_id="altText",
                suggestion=(
                    "Add a descriptive alt attribute that conveys the image "
                    "content or function; use alt=\"\" for decoration."
                ),
            ),
        )
    }
)

DEFAULT_SUGGESTION = (
    "Address the problem described above in the context of the element, "
    "following the relevant web standards and platform guidelines."
)


# ---------------------------------------------------------------------------
# Lookups (read-only views)
# ---------------------------------------------------------------------------


def get_category(category_id: str) -> Optional[RuleCategory]:
    for category in RULE_CATEGORIES:
        if category.id == category_id:
            return category
    return None


def category_weight(category_id: str) -> float:
    category = get_category(category_id)
    return category.weight if category is not None else 0.0


def categories_by_weight() -> Tuple[RuleCategory, ...]:
    return tuple(
        sorted(RULE_CATEGORIES, key=lambda c: c.weight, reverse=True)
    )


def all_checks() -> Tuple[RuleCheck, ...]:
    return tuple(
        check for category in RULE_CATEGORIES for check in category.checks
    )


def get_check(check_id: str) -> Optional[RuleCheck]:
    for check in all_checks():
        if check.id == check_id:
            return check
    return None


def checks_by_severity() -> Tuple[RuleCheck, ...]:
    """All checks, most severe first; catalog order within a severity."""
    return tuple(
        sorted(all_checks(), key=lambda c: c.severity.rank, reverse=True)
    )


def checks_with_severity(severity: Severity) -> Tuple[RuleCheck, ...]:
    return tuple(c for c in all_checks() if c.severity == severity)


def get_engine_rule(rule_id: str) -> Optional[EngineRule]:
    return ENGINE_RULES.get(rule_id)
