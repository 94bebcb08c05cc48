"""
AnalysisReport schema.

Defines the report-ready structure produced by the analysis coordinator.

The report captures:
- the (bounded) Unified UI Schema the analysis ran on,
- the raw deterministic issues and the final prioritized issue list,
- dimension and overall scores,
- advisory LLM augmentation diagnostics,
- and an executive summary.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from uxdoctor.app.context.business_context import BusinessContext
from uxdoctor.app.schemas.issues import Issue
from uxdoctor.app.schemas.ui_schema import UnifiedSchema


# ---------------------------------------------------------------------------
# Enumerations (FROZEN CONTRACTS)
# ---------------------------------------------------------------------------


class ReportStatus(str, Enum):
    """
    Outcome of an analysis run.

    NO_DATA means the upstream snapshot was absent. It is not an error.
    """

    COMPLETED = "completed"
    NO_DATA = "no_data"


# ---------------------------------------------------------------------------
# Intermediate Results (INTERNAL CONTRACTS)
# ---------------------------------------------------------------------------


class ScoreCard(BaseModel):
    """Per-dimension scores (0-100) and the overall score."""

    dimension_scores: Dict[str, int] = Field(
        ...,
        description="Score per dimension, floored at 0",
    )

    overall_score: int = Field(
        ...,
        ge=0,
        le=100,
        description="Mean of the dimension scores, rounded half-up",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @model_validator(mode="after")
    def scores_are_bounded(self) -> "ScoreCard":
        for dimension, value in self.dimension_scores.items():
            if not 0 <= value <= 100:
                raise ValueError(
                    f"Score for '{dimension}' out of range: {value}"
                )
        return self


AugmentationFailureType = Literal[
    "insufficient_balance",
    "unavailable",
    "parse_failure",
    "unexpected_error",
]


class AugmentationResult(BaseModel):
    """
    Result of the advisory LLM augmentation step.

    This object is NON-AUTHORITATIVE and diagnostic-only.
    A failed augmentation never invalidates the deterministic issues.
    """

    executed: bool = Field(
        ...,
        description="Whether an LLM call was attempted",
    )

    issues: Tuple[Issue, ...] = Field(
        default_factory=tuple,
        description="Candidate issues parsed from the LLM response",
    )

    failure_type: Optional[AugmentationFailureType] = None

    raw_error: Optional[str] = None

    model: Optional[str] = Field(
        None,
        description="Provider/model that produced the response",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def succeeded(self) -> bool:
        return self.executed and self.failure_type is None


class ExecutiveSummary(BaseModel):
    total_issues: int = Field(..., ge=0)
    severity_counts: Dict[str, int]
    pending_review_count: int = Field(0, ge=0)
    overall_score: Optional[int] = None
    scenario: str = "general"
    headline: str = ""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


# ---------------------------------------------------------------------------
# Master Report (PUBLIC CONTRACT)
# ---------------------------------------------------------------------------


class AnalysisReport(BaseModel):
    """
    Master analysis report.

    `issues` is the final, prioritized list. `raw_issues` keeps the
    rule-engine output untouched for traceability.
    """

    audit_id: str

    status: ReportStatus

    page_url: str = ""

    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    ui_schema: Optional[UnifiedSchema] = Field(
        None,
        description="Size-bounded schema; None when no snapshot was given",
    )

    raw_issues: Tuple[Issue, ...] = Field(default_factory=tuple)

    issues: Tuple[Issue, ...] = Field(default_factory=tuple)

    score_card: Optional[ScoreCard] = None

    business_context: BusinessContext

    augmentation: AugmentationResult

    summary: ExecutiveSummary

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def pending_review_count(self) -> int:
        return sum(1 for issue in self.issues if issue.is_pending_review)

    @model_validator(mode="after")
    def no_data_has_no_issues(self) -> "AnalysisReport":
        if self.status == ReportStatus.NO_DATA and self.issues:
            raise ValueError("A no_data report cannot carry issues")
        return self
