"""
Analysis coordinator.

IMPORTANT:
The coordinator is a DUMB AUTHORITY.

It MUST NOT:
- inspect element facts
- decide whether an issue exists
- alter issue severity

Its sole responsibilities are:
- enforcing execution order
- combining deterministic and advisory issues
- aggregating scores and the summary
- constructing the final AnalysisReport
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from uxdoctor.app.augmentation.augmenter import SemanticAugmenter
from uxdoctor.app.augmentation.llm_client import LLMClient
from uxdoctor.app.config import UXDoctorConfig
from uxdoctor.app.context.business_context import (
    BusinessContext,
    parse_business_context,
)
from uxdoctor.app.coordinator.cache import ReportCache, request_cache_key
from uxdoctor.app.normalizer.converter import normalize
from uxdoctor.app.reporting.composer import (
    executive_summary,
    fill_actionable_suggestions,
)
from uxdoctor.app.rules.engine import RuleEngine
from uxdoctor.app.rules.sanity import reconcile
from uxdoctor.app.schemas.issues import Issue
from uxdoctor.app.schemas.report import (
    AnalysisReport,
    AugmentationResult,
    ReportStatus,
    ScoreCard,
)
from uxdoctor.app.schemas.ui_schema import UnifiedSchema
from uxdoctor.app.scoring.prioritizer import prioritize
from uxdoctor.app.scoring.scorer import score

# Events (observational only)
from uxdoctor.app.events import (
    AnalysisEvent,
    AnalysisEventEmitter,
    AnalysisEventType,
    NullEventEmitter,
)

logger = logging.getLogger(__name__)


class AnalysisCoordinator:
    """
    Central analysis coordinator.

    Execution order:
        1. Business context parsing
        2. Normalization (full element set)
        3. Rule engine (deterministic, mandatory)
        4. LLM augmentation + reconciliation (advisory, optional)
        5. Combination, suggestions, scoring, prioritization, summary
    """

    def __init__(
        self,
        config: Optional[UXDoctorConfig] = None,
        *,
        augmenter: Optional[SemanticAugmenter] = None,
        rule_engine: Optional[RuleEngine] = None,
        cache: Optional[ReportCache] = None,
    ) -> None:
        """
        Direct constructor.

        Intended for tests and explicit wiring. No LLM client is
        constructed implicitly.
        """
        self._config = config or UXDoctorConfig()

        self._rule_engine = rule_engine or RuleEngine(
            required_field_detection=self._config.REQUIRED_FIELD_DETECTION
        )
        self._augmenter = augmenter
        self._cache = (
            cache
            if cache is not None
            else ReportCache(self._config.CACHE_TTL_SECONDS)
        )

    # ------------------------------------------------------------------
    # Integration constructor (composition root)
    # ------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: UXDoctorConfig,
        *,
        llm_client: Optional[LLMClient] = None,
    ) -> "AnalysisCoordinator":
        """
        Construct a fully wired coordinator.

        NOTE:
        The LLM client is built by the integration layer and injected here.
        Augmentation runs only when it is enabled AND a client is given.
        """
        augmenter = None
        if config.ENABLE_LLM_AUGMENTATION and llm_client is not None:
            augmenter = SemanticAugmenter(
                llm_client,
                max_elements=config.MAX_SCHEMA_ELEMENTS,
                max_issues=config.MAX_PROMPT_ISSUES,
            )

        return cls(config=config, augmenter=augmenter)

    @property
    def cache(self) -> ReportCache:
        return self._cache

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run_analysis(
        self,
        *,
        raw_snapshot: Any,
        page_url: str,
        business_context: Union[str, BusinessContext, None],
        audit_id: str,
        emitter: Optional[AnalysisEventEmitter] = None,
    ) -> AnalysisReport:
        """
        Execute the full analysis pipeline for one page snapshot.

        The emitter is strictly observational:
        - failures must not affect execution
        - events must not influence control flow
        """
        emitter = emitter or NullEventEmitter()

        await emitter.emit(
            AnalysisEvent(
                audit_id=audit_id,
                event_type=AnalysisEventType.ANALYSIS_STARTED,
                details={"page_url": page_url},
            )
        )

        try:
            context = (
                business_context
                if isinstance(business_context, BusinessContext)
                else parse_business_context(business_context)
            )

            cache_key = None
            if self._cache.enabled:
                cache_key = request_cache_key(
                    raw_snapshot=raw_snapshot,
                    page_url=page_url,
                    business_context=context.raw_text
                    or context.model_dump(mode="json"),
                )
                cached = self._cache.get(cache_key)
                if cached is not None:
                    logger.info("Cache hit for %s", page_url)
                    await emitter.emit(
                        AnalysisEvent(
                            audit_id=audit_id,
                            event_type=AnalysisEventType.CACHE_HIT,
                            details={"cached_audit_id": cached.audit_id},
                        )
                    )
                    await self._emit_completed(emitter, audit_id, cached)
                    return cached

            # ----------------------------------------------------------
            # 1. Normalization (full element set)
            # ----------------------------------------------------------
            schema = normalize(
                raw_snapshot,
                page_url,
                max_elements=None,
                key_action=context.key_action if context.has_key_action else None,
                text_limit=self._config.MAX_TEXT_LENGTH,
            )

            await emitter.emit(
                AnalysisEvent(
                    audit_id=audit_id,
                    event_type=AnalysisEventType.NORMALIZATION_COMPLETED,
                    details={
                        "no_data": schema is None,
                        "element_count": (
                            schema.total_element_count if schema else 0
                        ),
                    },
                )
            )

            if schema is None:
                report = self._no_data_report(
                    audit_id=audit_id,
                    page_url=page_url,
                    context=context,
                )
                await self._emit_completed(emitter, audit_id, report)
                return report

            # ----------------------------------------------------------
            # 2. Rule engine (DETERMINISTIC)
            # ----------------------------------------------------------
            raw_issues = self._rule_engine.evaluate(schema)

            await emitter.emit(
                AnalysisEvent(
                    audit_id=audit_id,
                    event_type=AnalysisEventType.RULES_EVALUATED,
                    details={"issue_count": len(raw_issues)},
                )
            )

            # ----------------------------------------------------------
            # 3. Augmentation + reconciliation (ADVISORY)
            # ----------------------------------------------------------
            if self._augmenter is None:
                augmentation = self._augmentation_not_executed()
                combined = list(raw_issues)
            else:
                augmentation = await self._augmenter.run(
                    schema=schema,
                    raw_issues=raw_issues,
                    business_context=context,
                    audit_id=audit_id,
                    emitter=emitter,
                )
                reconciled = reconcile(list(augmentation.issues), schema)
                combined = self._combine(reconciled, raw_issues)

                await emitter.emit(
                    AnalysisEvent(
                        audit_id=audit_id,
                        event_type=AnalysisEventType.RECONCILIATION_COMPLETED,
                        details={
                            "candidate_count": len(reconciled),
                            "pending_review_count": sum(
                                1 for i in reconciled if i.is_pending_review
                            ),
                            "combined_count": len(combined),
                        },
                    )
                )

            # ----------------------------------------------------------
            # 4. Suggestions, scoring, prioritization (MECHANICAL)
            # ----------------------------------------------------------
            filled = fill_actionable_suggestions(combined)
            score_card = score(filled, schema)
            prioritized = prioritize(filled, context, schema)

            await emitter.emit(
                AnalysisEvent(
                    audit_id=audit_id,
                    event_type=AnalysisEventType.SCORING_COMPLETED,
                    details={
                        "overall_score": score_card.overall_score,
                        "dimension_scores": score_card.dimension_scores,
                    },
                )
            )

            report = self._finalize_report(
                audit_id=audit_id,
                page_url=page_url,
                schema=schema,
                raw_issues=raw_issues,
                issues=prioritized,
                score_card=score_card,
                context=context,
                augmentation=augmentation,
            )

            if cache_key is not None and augmentation.failure_type is None:
                self._cache.set(cache_key, report)

            await self._emit_completed(emitter, audit_id, report)
            return report

        except Exception as exc:
            await emitter.emit(
                AnalysisEvent(
                    audit_id=audit_id,
                    event_type=AnalysisEventType.ANALYSIS_FAILED,
                    details={
                        "error": str(exc),
                        "exception_type": type(exc).__name__,
                    },
                )
            )
            raise

    # ------------------------------------------------------------------
    # Structural helpers (NO ELEMENT FACT LOGIC)
    # ------------------------------------------------------------------

    @staticmethod
    def _combine(
        reconciled: List[Issue],
        raw_issues: List[Issue],
    ) -> List[Issue]:
        """
        Reconciled LLM issues, plus every rule-engine issue whose
        (element_id, rule_id) the LLM did not return.
        """
        returned = {issue.key for issue in reconciled}
        return list(reconciled) + [
            issue for issue in raw_issues if issue.key not in returned
        ]

    @staticmethod
    def _augmentation_not_executed() -> AugmentationResult:
        return AugmentationResult(executed=False)

    @staticmethod
    async def _emit_completed(
        emitter: AnalysisEventEmitter,
        audit_id: str,
        report: AnalysisReport,
    ) -> None:
        await emitter.emit(
            AnalysisEvent(
                audit_id=audit_id,
                event_type=AnalysisEventType.ANALYSIS_COMPLETED,
                details={
                    "status": report.status.value,
                    "issue_count": len(report.issues),
                    "report": report.model_dump(mode="json"),
                },
            )
        )

    def _no_data_report(
        self,
        *,
        audit_id: str,
        page_url: str,
        context: BusinessContext,
    ) -> AnalysisReport:
        return AnalysisReport(
            audit_id=audit_id,
            status=ReportStatus.NO_DATA,
            page_url=page_url,
            ui_schema=None,
            business_context=context,
            augmentation=self._augmentation_not_executed(),
            summary=executive_summary([], context),
        )

    def _finalize_report(
        self,
        *,
        audit_id: str,
        page_url: str,
        schema: UnifiedSchema,
        raw_issues: List[Issue],
        issues: List[Issue],
        score_card: ScoreCard,
        context: BusinessContext,
        augmentation: AugmentationResult,
    ) -> AnalysisReport:
        """Construct the final immutable AnalysisReport."""
        return AnalysisReport(
            audit_id=audit_id,
            status=ReportStatus.COMPLETED,
            page_url=page_url,
            ui_schema=schema.bounded(self._config.MAX_SCHEMA_ELEMENTS),
            raw_issues=tuple(raw_issues),
            issues=tuple(issues),
            score_card=score_card,
            business_context=context,
            augmentation=augmentation,
            summary=executive_summary(issues, context, score_card),
        )
