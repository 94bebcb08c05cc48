"""
Augmentation prompt assembly.

The payload sent to the LLM is `{unifiedSchema, rawIssues,
businessContext}`, size-bounded and serialized as canonical JSON, so equal
inputs always render byte-identical prompts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from uxdoctor.app.context.business_context import BusinessContext
from uxdoctor.app.schemas.issues import Issue
from uxdoctor.app.schemas.ui_schema import UnifiedSchema
from uxdoctor.app.utils.hashing import canonical_json


TEMPLATE_ROOT = Path(__file__).parent / "templates"
PROMPT_TEMPLATE = "augmentation_prompt.j2"

_ENV = Environment(
    loader=FileSystemLoader(TEMPLATE_ROOT),
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def build_prompt_payload(
    schema: UnifiedSchema,
    raw_issues: Sequence[Issue],
    context: BusinessContext,
    *,
    max_elements: int,
    max_issues: int,
) -> Dict[str, Any]:
    """
    Bound the schema and the raw issues, then project them to JSON.

    Only raw issues whose element survived the bound are included.
    """
    bounded = schema.bounded(max_elements)
    kept_ids = {element.id for element in bounded.elements}
    issues = [i for i in raw_issues if i.element_id in kept_ids][:max_issues]

    return {
        "unifiedSchema": bounded.to_payload(),
        "rawIssues": [issue.model_dump(mode="json") for issue in issues],
        "businessContext": context.to_payload(),
    }


def render_prompt(payload: Dict[str, Any], context: BusinessContext) -> str:
    schema_payload = payload["unifiedSchema"]
    template = _ENV.get_template(PROMPT_TEMPLATE)
    return template.render(
        context=context,
        scenario=context.scenario.value,
        truncated=schema_payload["truncated"],
        element_count=len(schema_payload["elements"]),
        total_element_count=schema_payload["total_element_count"],
        payload_json=canonical_json(payload),
    )
