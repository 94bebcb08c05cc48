from uxdoctor.app.context.business_context import parse_business_context
from uxdoctor.app.schemas.issues import Issue, Severity
from uxdoctor.app.schemas.ui_schema import ElementType, KeyUserFlow, UnifiedSchema
from uxdoctor.app.scoring import is_key_action_related, prioritize
from uxdoctor.tests.fixtures.snapshot_factory import schema_of, ui_element


SALES_CONTEXT = "Business goal: increase sales, Key action: buy"
BRAND_CONTEXT = "Business goal: brand awareness, Key action: read the story"


def _issue(element_id: str, severity: Severity = Severity.MEDIUM, confidence: float = 0.5) -> Issue:
    return Issue(
        element_id=element_id,
        rule_id="test-001",
        severity=severity,
        confidence=confidence,
    )


def _schema():
    return schema_of(
        ui_element("e1", tag="div", text="Learn more about us"),
        ui_element(
            "e2",
            element_type=ElementType.BUTTON,
            tag="button",
            text="Buy now",
            is_clickable=True,
        ),
        ui_element("e3", tag="p", text="Our story"),
    )


def test_severity_descends():
    issues = [
        _issue("e1", Severity.LOW),
        _issue("e1", Severity.CRITICAL),
        _issue("e1", Severity.MEDIUM),
        _issue("e1", Severity.HIGH),
    ]

    ordered = prioritize(issues)

    assert [i.severity for i in ordered] == [
        Severity.CRITICAL,
        Severity.HIGH,
        Severity.MEDIUM,
        Severity.LOW,
    ]


def test_equal_issues_keep_their_relative_order():
    first = _issue("e1")
    second = _issue("e3")

    assert prioritize([first, second], SALES_CONTEXT, _schema()) == [first, second]
    assert prioritize([second, first], SALES_CONTEXT, _schema()) == [second, first]


def test_key_action_issues_first_for_conversion_goals():
    unrelated = _issue("e1", confidence=0.9)
    related = _issue("e2", confidence=0.5)

    ordered = prioritize([unrelated, related], SALES_CONTEXT, _schema())

    assert ordered == [related, unrelated]


def test_no_key_action_boost_for_other_goals():
    unrelated = _issue("e1", confidence=0.9)
    related = _issue("e2", confidence=0.5)

    ordered = prioritize([related, unrelated], BRAND_CONTEXT, _schema())

    assert ordered == [unrelated, related]


def test_severity_outranks_key_action_relation():
    related_medium = _issue("e2", Severity.MEDIUM)
    unrelated_high = _issue("e1", Severity.HIGH)

    ordered = prioritize([related_medium, unrelated_high], SALES_CONTEXT, _schema())

    assert ordered == [unrelated_high, related_medium]


def test_confidence_breaks_remaining_ties():
    low = _issue("e1", confidence=0.3)
    high = _issue("e3", confidence=0.8)

    assert prioritize([low, high]) == [high, low]


def test_input_is_left_untouched():
    issues = [_issue("e1", Severity.LOW), _issue("e1", Severity.HIGH)]
    snapshot = list(issues)

    ordered = prioritize(issues, parse_business_context(SALES_CONTEXT))

    assert issues == snapshot
    assert ordered is not issues


# ---------------------------------------------------------------------------
# Key action relation
# ---------------------------------------------------------------------------

def test_clickable_or_action_tags_are_related():
    context = parse_business_context(BRAND_CONTEXT)

    assert is_key_action_related(ui_element("e1", is_clickable=True), context)
    assert is_key_action_related(ui_element("e1", tag="a"), context)
    assert is_key_action_related(ui_element("e1", tag="input"), context)
    assert not is_key_action_related(ui_element("e1", tag="div"), context)
    assert not is_key_action_related(None, context)


def test_vocabulary_and_key_action_text_are_related():
    context = parse_business_context("Key action: download the app")

    assert is_key_action_related(ui_element("e1", text="立即登录"), context)
    assert is_key_action_related(ui_element("e1", text="Submit form"), context)
    assert is_key_action_related(
        ui_element("e1", text="Download the app today"), context
    )
    assert not is_key_action_related(ui_element("e1", text="About us"), context)


def test_key_user_flow_element_is_related():
    target = ui_element("e1", tag="div", text="Start")
    schema = UnifiedSchema(
        elements=(target,),
        key_user_flow=KeyUserFlow(
            description="begin onboarding", action_element_id="e1"
        ),
        total_element_count=1,
    )
    context = parse_business_context("Key action: begin onboarding")

    assert is_key_action_related(target, context, schema)
    assert not is_key_action_related(target, context)
