from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# ----------------------------------------------------------------------
# Event Types (Finite)
# ----------------------------------------------------------------------
class AnalysisEventType(str, Enum):
    """
    Progression events emitted during an analysis run.

    NOTE:
    New entries must preserve observational semantics.
    """

    # ------------------------------------------------------------------
    # Global lifecycle
    # ------------------------------------------------------------------
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_COMPLETED = "analysis_completed"
    ANALYSIS_FAILED = "analysis_failed"
    CACHE_HIT = "cache_hit"

    # ------------------------------------------------------------------
    # Deterministic core
    # ------------------------------------------------------------------
    NORMALIZATION_COMPLETED = "normalization_completed"
    RULES_EVALUATED = "rules_evaluated"

    # ------------------------------------------------------------------
    # LLM augmentation (observational, non-authoritative)
    # ------------------------------------------------------------------
    AUGMENTATION_STARTED = "augmentation_started"
    AUGMENTATION_COMPLETED = "augmentation_completed"
    RECONCILIATION_COMPLETED = "reconciliation_completed"

    # ------------------------------------------------------------------
    # Scoring / report
    # ------------------------------------------------------------------
    SCORING_COMPLETED = "scoring_completed"


# ----------------------------------------------------------------------
# Event Model
# ----------------------------------------------------------------------
class AnalysisEvent(BaseModel):
    """
    An immutable observation of a phase transition within an analysis.

    Events are strictly observational and never influence control flow.
    """

    event_id: UUID = Field(default_factory=uuid4)
    audit_id: str = Field(..., description="The analysis identifier")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    event_type: AnalysisEventType

    # Optional contextual metadata (counts, failure types, the report)
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    def to_sse_payload(self) -> str:
        """Render the event as one Server-Sent Events message."""
        data = json.dumps(self.model_dump(mode="json"), ensure_ascii=False)
        return f"event: {self.event_type.value}\ndata: {data}\n\n"
