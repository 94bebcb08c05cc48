"""
JSON extraction from free-text LLM output.

Strategies, in order:
1. direct parse of the whole response
2. fenced code blocks (```json ... ``` or ``` ... ```)
3. the first balanced JSON object/array found by scanning for '{' or '['

Candidate issues parsed from the extracted value are validated one by one.
Invalid items are skipped with a warning; they never abort the batch.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Mapping

from pydantic import ValidationError

from uxdoctor.app.errors import ResponseParseError
from uxdoctor.app.schemas.issues import Issue, IssueSource

logger = logging.getLogger(__name__)


_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)\s*```")

# Keys an external source may not set on a candidate issue
_TRUSTED_KEYS = ("status", "source")


def _try_loads(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (TypeError, ValueError):
        return False, None


def _scan_balanced(text: str) -> tuple[bool, Any]:
    decoder = json.JSONDecoder()
    for index, char in enumerate(text):
        if char not in "{[":
            continue
        try:
            value, _ = decoder.raw_decode(text, index)
        except ValueError:
            continue
        return True, value
    return False, None


def extract_json(text: object) -> Any:
    """
    Extract the first JSON value from `text`.

    Raises ResponseParseError when no strategy succeeds.
    """
    if not isinstance(text, str) or not text.strip():
        raise ResponseParseError("LLM response is empty")

    stripped = text.strip()

    ok, value = _try_loads(stripped)
    if ok:
        return value

    for block in _FENCED_BLOCK.findall(stripped):
        ok, value = _try_loads(block)
        if ok:
            return value
        logger.debug("Fenced block is not valid JSON; trying next strategy")

    ok, value = _scan_balanced(stripped)
    if ok:
        return value

    raise ResponseParseError(
        "LLM response contains no parseable JSON "
        f"(length={len(stripped)})"
    )


def parse_candidate_issues(value: Any) -> List[Issue]:
    """
    Validate candidate issues from an extracted JSON value.

    Accepts a list of issue objects or an object with an `issues` list.
    Every accepted issue is tagged with source=llm.
    """
    if isinstance(value, Mapping):
        value = value.get("issues")

    if not isinstance(value, list):
        raise ResponseParseError(
            "LLM response JSON does not contain an issue list"
        )

    issues: List[Issue] = []
    for position, item in enumerate(value):
        if not isinstance(item, Mapping):
            logger.warning(
                "Skipping candidate issue #%s: not an object (%s)",
                position,
                type(item).__name__,
            )
            continue

        data = {k: v for k, v in item.items() if k not in _TRUSTED_KEYS}
        data["source"] = IssueSource.LLM

        try:
            issues.append(Issue.model_validate(data))
        except ValidationError as exc:
            logger.warning(
                "Skipping invalid candidate issue #%s: %s",
                position,
                exc.errors()[0]["msg"],
            )

    return issues
