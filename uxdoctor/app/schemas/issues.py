"""
Standardized issue schema.

Defines the canonical structure used to report usability problems found by
the deterministic rule engine and by the advisory LLM augmentation step.

This schema is:
- immutable once constructed
- severity-graded (critical > high > medium > low)
- confidence-scored
- provenance-tagged (rule_engine vs llm)

Rule-engine issues always carry evidence. LLM issues are candidates until
the sanity checker has reconciled them against measured facts.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# ---------------------------------------------------------------------------
# Enumerations (FROZEN CONTRACTS)
# ---------------------------------------------------------------------------


class Severity(str, Enum):
    """
    Severity level of an issue.

    Ordering is intentional and MUST remain stable:
    critical > high > medium > low.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class IssueStatus(str, Enum):
    """
    Review status of an issue.

    Absent (None) for ordinary issues. PENDING_REVIEW marks a claim that
    contradicts the measured facts and needs a human decision.
    """

    PENDING_REVIEW = "pending_review"


class IssueSource(str, Enum):
    """
    Originating subsystem of an issue.

    This is a trust boundary and MUST remain explicit.
    """

    RULE_ENGINE = "rule_engine"
    LLM = "llm"


# ---------------------------------------------------------------------------
# Canonical Issue (PUBLIC, FROZEN)
# ---------------------------------------------------------------------------


class Issue(BaseModel):
    """
    Canonical usability issue.

    Accepts both snake_case and camelCase keys so that LLM output can be
    validated directly. Unknown keys are ignored.
    """

    element_id: str = Field(
        ...,
        validation_alias=AliasChoices("element_id", "elementId"),
        description="Id of the UIElement the issue refers to",
    )

    rule_id: str = Field(
        ...,
        validation_alias=AliasChoices("rule_id", "ruleId"),
        description="Rule identifier (e.g. 'contrast-001')",
    )

    severity: Severity = Field(
        ...,
        description="Severity level",
    )

    confidence: float = Field(
        0.5,
        ge=0.0,
        le=1.0,
        description="Confidence that the issue exists as described",
    )

    explanation: str = Field(
        "",
        description="What the problem is and whom it affects",
    )

    suggestion: str = Field(
        "",
        description="Advisory remediation",
    )

    evidence: str = Field(
        "",
        description="Quantitative fact or rule id that triggered the issue",
    )

    status: Optional[IssueStatus] = Field(
        None,
        description="Set to pending_review when a claim contradicts facts",
    )

    category: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("category", "type"),
        description="Optional dimension hint (e.g. 'accessibility')",
    )

    source: IssueSource = Field(
        IssueSource.RULE_ENGINE,
        description="Originating subsystem",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @property
    def key(self) -> tuple[str, str]:
        """(element_id, rule_id) identity used when merging issue lists."""
        return (self.element_id, self.rule_id)

    @property
    def is_pending_review(self) -> bool:
        return self.status == IssueStatus.PENDING_REVIEW
