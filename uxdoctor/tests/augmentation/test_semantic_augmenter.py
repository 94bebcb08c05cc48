import json

import pytest

from uxdoctor.app.augmentation import SemanticAugmenter
from uxdoctor.app.augmentation.prompt import build_prompt_payload, render_prompt
from uxdoctor.app.context.business_context import parse_business_context
from uxdoctor.app.errors import InsufficientBalanceError, LLMUnavailableError
from uxdoctor.app.events import AnalysisEventType
from uxdoctor.app.normalizer import normalize
from uxdoctor.app.rules import evaluate
from uxdoctor.app.schemas.issues import IssueSource
from uxdoctor.app.utils.hashing import canonical_json
from uxdoctor.tests.augmentation.mock_llm_client import MockLLMClient
from uxdoctor.tests.fixtures.event_recorder import RecordingEmitter
from uxdoctor.tests.fixtures.snapshot_factory import (
    SIGNUP_CONTEXT,
    element,
    signup_page_snapshot,
    snapshot,
    wide_snapshot,
)

pytestmark = pytest.mark.anyio


LLM_ISSUES = {
    "issues": [
        {
            "element_id": "e8",
            "rule_id": "contrast-001",
            "severity": "high",
            "confidence": 0.95,
            "type": "accessibility",
            "explanation": "The sign-up button label is hard to read.",
            "suggestion": "Darken the button background to reach 4.5:1.",
            "evidence": "contrast_ratio=2.1",
        }
    ]
}


def _inputs():
    schema = normalize(signup_page_snapshot(), max_elements=None, key_action="sign up")
    return schema, evaluate(schema), parse_business_context(SIGNUP_CONTEXT)


# ---------------------------------------------------------------------------
# Prompt payload
# ---------------------------------------------------------------------------

def test_payload_has_the_three_sections():
    schema, raw_issues, context = _inputs()

    payload = build_prompt_payload(
        schema, raw_issues, context, max_elements=100, max_issues=50
    )

    assert set(payload) == {"unifiedSchema", "rawIssues", "businessContext"}
    assert len(payload["unifiedSchema"]["elements"]) == 10
    assert len(payload["rawIssues"]) == 6
    assert payload["businessContext"]["scenario"] == "registration"


def test_payload_is_bounded_and_consistent():
    raw = snapshot(
        *(element("div", attributes={"id": f"d{i}"}) for i in range(5)),
        element("img"),
    )
    schema = normalize(raw, max_elements=None)
    raw_issues = evaluate(schema)

    payload = build_prompt_payload(
        schema,
        raw_issues,
        parse_business_context(None),
        max_elements=3,
        max_issues=50,
    )

    assert payload["unifiedSchema"]["truncated"] is True
    assert payload["unifiedSchema"]["total_element_count"] == 6
    # The image issues refer to e6, which was cut
    assert raw_issues
    assert payload["rawIssues"] == []


def test_issue_bound_applies():
    schema, raw_issues, context = _inputs()

    payload = build_prompt_payload(
        schema, raw_issues, context, max_elements=100, max_issues=2
    )

    assert [i["element_id"] for i in payload["rawIssues"]] == ["e6", "e7"]


def test_prompt_embeds_canonical_payload_and_scenario_focus():
    schema, raw_issues, context = _inputs()
    payload = build_prompt_payload(
        schema, raw_issues, context, max_elements=100, max_issues=50
    )

    prompt = render_prompt(payload, context)

    assert canonical_json(payload) in prompt
    assert 'completing\n"sign up"' in prompt
    assert "- Industry: SaaS" in prompt
    assert "elements are included" not in prompt


def test_prompt_mentions_truncation():
    schema = normalize(wide_snapshot(120), max_elements=None)
    context = parse_business_context(None)
    payload = build_prompt_payload(
        schema, [], context, max_elements=100, max_issues=50
    )

    prompt = render_prompt(payload, context)

    assert "Only the first 100 of 120 elements are included." in prompt


def test_prompt_is_deterministic():
    schema, raw_issues, context = _inputs()
    payload = build_prompt_payload(
        schema, raw_issues, context, max_elements=100, max_issues=50
    )

    assert render_prompt(payload, context) == render_prompt(payload, context)


# ---------------------------------------------------------------------------
# Augmentation outcomes
# ---------------------------------------------------------------------------

async def test_successful_augmentation():
    schema, raw_issues, context = _inputs()
    client = MockLLMClient(LLM_ISSUES)

    result = await SemanticAugmenter(client).run(
        schema=schema,
        raw_issues=raw_issues,
        business_context=context,
    )

    assert result.executed is True
    assert result.succeeded is True
    assert result.model == "mock:mock-model"
    assert len(result.issues) == 1
    assert result.issues[0].source == IssueSource.LLM
    assert result.issues[0].category == "accessibility"
    assert len(client.prompts) == 1


async def test_fenced_response_is_extracted():
    schema, raw_issues, context = _inputs()
    client = MockLLMClient(
        "Here you go:\n```json\n" + json.dumps(LLM_ISSUES["issues"]) + "\n```"
    )

    result = await SemanticAugmenter(client).run(
        schema=schema, raw_issues=raw_issues, business_context=context
    )

    assert result.succeeded
    assert result.issues[0].element_id == "e8"


@pytest.mark.parametrize(
    "response, failure_type",
    [
        ("I could not find any problems.", "parse_failure"),
        ({"findings": []}, "parse_failure"),
        (InsufficientBalanceError("openai"), "insufficient_balance"),
        (LLMUnavailableError([("openai", RuntimeError("down"))]), "unavailable"),
        (RuntimeError("unexpected"), "unexpected_error"),
    ],
)
async def test_failures_are_normalized(response, failure_type):
    schema, raw_issues, context = _inputs()

    result = await SemanticAugmenter(MockLLMClient(response)).run(
        schema=schema, raw_issues=raw_issues, business_context=context
    )

    assert result.executed is True
    assert result.succeeded is False
    assert result.failure_type == failure_type
    assert result.issues == ()
    assert result.raw_error


async def test_augmentation_events():
    schema, raw_issues, context = _inputs()
    emitter = RecordingEmitter()

    await SemanticAugmenter(MockLLMClient("not json")).run(
        schema=schema,
        raw_issues=raw_issues,
        business_context=context,
        audit_id="audit-1",
        emitter=emitter,
    )

    assert emitter.types == [
        AnalysisEventType.AUGMENTATION_STARTED,
        AnalysisEventType.AUGMENTATION_COMPLETED,
    ]
    completed = emitter.first(AnalysisEventType.AUGMENTATION_COMPLETED)
    assert completed.details["success"] is False
    assert completed.details["failure_type"] == "parse_failure"
