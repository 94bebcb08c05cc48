import pytest

from uxdoctor.app.context.business_context import (
    UNSPECIFIED,
    BusinessContext,
    Scenario,
    parse_business_context,
)
from uxdoctor.tests.fixtures.snapshot_factory import SIGNUP_CONTEXT


def test_english_labelled_fields():
    context = parse_business_context(SIGNUP_CONTEXT)

    assert context.industry == "SaaS"
    assert context.business_goal == "increase signup conversion"
    assert context.key_action == "sign up"
    assert context.target_users == "small teams"
    assert context.other_info == ""
    assert context.raw_text == SIGNUP_CONTEXT
    assert context.scenario == Scenario.REGISTRATION
    assert context.is_conversion_oriented
    assert context.has_key_action


def test_chinese_labelled_fields():
    context = parse_business_context(
        "行业：电商，业务目标：提升购买转化，关键操作：立即购买，目标用户：年轻白领"
    )

    assert context.industry == "电商"
    assert context.business_goal == "提升购买转化"
    assert context.key_action == "立即购买"
    assert context.target_users == "年轻白领"
    assert context.scenario == Scenario.TRANSACTION
    assert context.is_conversion_oriented


@pytest.mark.parametrize("text", [None, "", "   ", 42])
def test_absent_context_is_unspecified(text):
    context = parse_business_context(text)

    assert context == BusinessContext()
    assert context.industry == UNSPECIFIED
    assert not context.has_key_action
    assert not context.is_conversion_oriented
    assert context.scenario == Scenario.GENERAL


def test_unlabelled_text_is_kept_as_other_info():
    context = parse_business_context("We sell shoes online")

    assert context.business_goal == UNSPECIFIED
    assert context.other_info == "We sell shoes online"
    # Goal unspecified: conversion intent is read from the raw text
    assert context.is_conversion_oriented
    assert context.scenario == Scenario.GENERAL


def test_generic_labels_need_a_colon():
    context = parse_business_context("Our goal is growth")

    assert context.business_goal == UNSPECIFIED
    assert context.other_info == "Our goal is growth"


def test_leftover_text_is_collected():
    context = parse_business_context(
        "Goal: help users learn cooking; launched in 2023"
    )

    assert context.business_goal == "help users learn cooking"
    assert context.other_info == "launched in 2023"
    assert context.scenario == Scenario.CONTENT
    assert not context.is_conversion_oriented


def test_payload_includes_scenario():
    payload = parse_business_context(SIGNUP_CONTEXT).to_payload()

    assert payload["scenario"] == "registration"
    assert payload["key_action"] == "sign up"
    assert "raw_text" not in payload
