"""
Semantic augmentation step.

Sends the bounded schema and the raw rule-engine issues to an LLM and
parses the candidate issues it returns.

IMPORTANT:
- This step is ADVISORY. Its output is never trusted as-is; candidates
  go through the sanity checker before they reach a report.
- run() MUST never raise. Every outcome is normalized into an
  AugmentationResult.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from uxdoctor.app.augmentation.json_extraction import (
    extract_json,
    parse_candidate_issues,
)
from uxdoctor.app.augmentation.llm_client import LLMClient
from uxdoctor.app.augmentation.prompt import build_prompt_payload, render_prompt
from uxdoctor.app.context.business_context import BusinessContext
from uxdoctor.app.errors import (
    InsufficientBalanceError,
    LLMUnavailableError,
    ResponseParseError,
)
from uxdoctor.app.events import (
    AnalysisEvent,
    AnalysisEventEmitter,
    AnalysisEventType,
    NullEventEmitter,
)
from uxdoctor.app.schemas.issues import Issue
from uxdoctor.app.schemas.report import (
    AugmentationFailureType,
    AugmentationResult,
)
from uxdoctor.app.schemas.ui_schema import UnifiedSchema

logger = logging.getLogger(__name__)


class SemanticAugmenter:
    def __init__(
        self,
        client: LLMClient,
        *,
        max_elements: int = 100,
        max_issues: int = 50,
    ) -> None:
        self._client = client
        self._max_elements = max_elements
        self._max_issues = max_issues

    async def run(
        self,
        *,
        schema: UnifiedSchema,
        raw_issues: Sequence[Issue],
        business_context: BusinessContext,
        audit_id: Optional[str] = None,
        emitter: Optional[AnalysisEventEmitter] = None,
    ) -> AugmentationResult:
        emitter = emitter or NullEventEmitter()

        if audit_id is not None:
            await emitter.emit(
                AnalysisEvent(
                    audit_id=audit_id,
                    event_type=AnalysisEventType.AUGMENTATION_STARTED,
                )
            )

        model: Optional[str] = None

        try:
            payload = build_prompt_payload(
                schema,
                raw_issues,
                business_context,
                max_elements=self._max_elements,
                max_issues=self._max_issues,
            )
            prompt = render_prompt(payload, business_context)

            completion = await self._client.complete(prompt)
            model = completion.model

            candidates = parse_candidate_issues(extract_json(completion.text))

            result = AugmentationResult(
                executed=True,
                issues=tuple(candidates),
                model=model,
            )

        except InsufficientBalanceError as exc:
            result = self._failed("insufficient_balance", exc, model)

        except LLMUnavailableError as exc:
            result = self._failed("unavailable", exc, model)

        except ResponseParseError as exc:
            result = self._failed("parse_failure", exc, model)

        except Exception as exc:
            logger.exception("Unexpected augmentation failure")
            result = self._failed("unexpected_error", exc, model)

        if audit_id is not None:
            await emitter.emit(
                AnalysisEvent(
                    audit_id=audit_id,
                    event_type=AnalysisEventType.AUGMENTATION_COMPLETED,
                    details={
                        "success": result.succeeded,
                        "failure_type": result.failure_type,
                        "candidate_count": len(result.issues),
                        "model": result.model,
                    },
                )
            )

        return result

    @staticmethod
    def _failed(
        failure_type: AugmentationFailureType,
        exc: BaseException,
        model: Optional[str],
    ) -> AugmentationResult:
        logger.warning("LLM augmentation failed (%s): %s", failure_type, exc)
        return AugmentationResult(
            executed=True,
            issues=(),
            failure_type=failure_type,
            raw_error=str(exc),
            model=model,
        )
