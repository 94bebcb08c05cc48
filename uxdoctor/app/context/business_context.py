"""
Business context parsing.

Turns the free-text business context supplied with an analysis request
into a structured BusinessContext (industry, goal, key action, target
users, leftover information) and classifies the analysis scenario.

Parsing is purely lexical:
- labelled fields are matched in English and Chinese
- the first matching label per field wins
- whatever text no label claimed is kept as `other_info`
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Pattern, Tuple

from pydantic import BaseModel, ConfigDict, Field


UNSPECIFIED = "unspecified"

# Words naming a key user action. Shared by key-flow inference and
# prioritization.
KEY_ACTION_VOCABULARY: Tuple[str, ...] = (
    "购买",
    "注册",
    "登录",
    "提交",
    "确认",
    "下单",
    "支付",
    "buy",
    "register",
    "login",
    "submit",
    "confirm",
    "order",
    "pay",
)

CONVERSION_GOAL_KEYWORDS: Tuple[str, ...] = (
    "转化",
    "销售",
    "注册",
    "购买",
    "conversion",
    "convert",
    "sales",
    "sell",
    "signup",
    "sign up",
    "sign-up",
    "register",
    "registration",
    "purchase",
)


class Scenario(str, Enum):
    REGISTRATION = "registration"
    TRANSACTION = "transaction"
    CONTENT = "content"
    GENERAL = "general"


_SCENARIO_KEYWORDS: Tuple[Tuple[Scenario, Tuple[str, ...]], ...] = (
    (
        Scenario.REGISTRATION,
        (
            "注册",
            "获取用户",
            "获取线索",
            "用户增长",
            "lead",
            "signup",
            "sign up",
            "register",
            "onboarding",
        ),
    ),
    (
        Scenario.TRANSACTION,
        (
            "购买",
            "交易",
            "下单",
            "支付",
            "成交",
            "销售",
            "buy",
            "purchase",
            "order",
            "pay",
            "checkout",
            "sales",
        ),
    ),
    (
        Scenario.CONTENT,
        (
            "阅读",
            "浏览",
            "内容",
            "观看",
            "学习",
            "了解",
            "read",
            "view",
            "learn",
            "watch",
            "browse",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Label patterns
# ---------------------------------------------------------------------------

_VALUE = r"\s*([^，,。;；\n]+)"

# Generic short labels ("goal", "目标", "用户") require a colon, otherwise
# they would match inside unrelated phrases.
_FIELD_PATTERNS: Dict[str, Tuple[Pattern[str], ...]] = {
    "industry": (
        re.compile(r"行业[:：]?" + _VALUE),
        re.compile(r"领域[:：]?" + _VALUE),
        re.compile(r"\bindustry\s*[:：]" + _VALUE, re.IGNORECASE),
        re.compile(r"\bdomain\s*[:：]" + _VALUE, re.IGNORECASE),
    ),
    "business_goal": (
        re.compile(r"业务目标[:：]?" + _VALUE),
        re.compile(r"核心目标[:：]?" + _VALUE),
        re.compile(r"\bbusiness\s+goal\s*[:：]" + _VALUE, re.IGNORECASE),
        re.compile(r"(?<!用户)目标[:：]" + _VALUE),
        re.compile(r"\bgoal\s*[:：]" + _VALUE, re.IGNORECASE),
    ),
    "key_action": (
        re.compile(r"关键操作[:：]?" + _VALUE),
        re.compile(r"用户操作[:：]?" + _VALUE),
        re.compile(r"\bkey\s+action\s*[:：]" + _VALUE, re.IGNORECASE),
        re.compile(r"(?<!用户)(?<!关键)操作[:：]" + _VALUE),
        re.compile(r"\baction\s*[:：]" + _VALUE, re.IGNORECASE),
    ),
    "target_users": (
        re.compile(r"目标用户[:：]?" + _VALUE),
        re.compile(r"用户群体[:：]?" + _VALUE),
        re.compile(r"\btarget\s+users?\s*[:：]" + _VALUE, re.IGNORECASE),
        re.compile(r"(?<!目标)用户[:：]" + _VALUE),
        re.compile(r"\busers?\s*[:：]" + _VALUE, re.IGNORECASE),
    ),
}

_SEPARATOR_RUN = re.compile(r"(?:\s*[，,。;；]\s*)+")


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class BusinessContext(BaseModel):
    """Structured business context of an analysis request."""

    industry: str = Field(UNSPECIFIED, description="Business domain")
    business_goal: str = Field(UNSPECIFIED, description="Core business goal")
    key_action: str = Field(UNSPECIFIED, description="Key user action")
    target_users: str = Field(UNSPECIFIED, description="Target user group")
    other_info: str = Field("", description="Text no label claimed")
    raw_text: str = Field("", description="Original free text")

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def has_key_action(self) -> bool:
        return self.key_action != UNSPECIFIED

    @property
    def is_conversion_oriented(self) -> bool:
        goal = self.business_goal.lower()
        if self.business_goal == UNSPECIFIED:
            goal = self.raw_text.lower()
        return any(keyword in goal for keyword in CONVERSION_GOAL_KEYWORDS)

    @property
    def scenario(self) -> Scenario:
        haystack = " ".join(
            value.lower()
            for value in (self.business_goal, self.key_action)
            if value != UNSPECIFIED
        )
        for scenario, keywords in _SCENARIO_KEYWORDS:
            if any(keyword in haystack for keyword in keywords):
                return scenario
        return Scenario.GENERAL

    def to_payload(self) -> Dict[str, str]:
        return {
            "industry": self.industry,
            "business_goal": self.business_goal,
            "key_action": self.key_action,
            "target_users": self.target_users,
            "other_info": self.other_info,
            "scenario": self.scenario.value,
        }


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_business_context(text: object) -> BusinessContext:
    """
    Parse free-text business context.

    Non-string or blank input yields an all-unspecified context.
    """
    if not isinstance(text, str) or not text.strip():
        return BusinessContext()

    fields: Dict[str, str] = {}
    remaining = text

    for name, patterns in _FIELD_PATTERNS.items():
        for pattern in patterns:
            match = pattern.search(text)
            if match is None:
                continue
            value = match.group(1).strip()
            if not value:
                continue
            fields[name] = value
            remaining = remaining.replace(match.group(0), " ", 1)
            break

    other_info = _SEPARATOR_RUN.sub(", ", remaining).strip(" ,")

    return BusinessContext(
        **fields,
        other_info=other_info,
        raw_text=text,
    )
