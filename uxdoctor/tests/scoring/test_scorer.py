import pytest

from uxdoctor.app.rules import evaluate
from uxdoctor.app.schemas.issues import Issue, Severity
from uxdoctor.app.schemas.ui_schema import ElementType
from uxdoctor.app.scoring import DIMENSIONS, attribute_dimension, score
from uxdoctor.tests.fixtures.snapshot_factory import (
    schema_of,
    ui_element,
    unlabelled_low_contrast_button,
)


def _issue(element_id: str, severity: Severity, **overrides) -> Issue:
    return Issue(
        element_id=element_id,
        rule_id="test-001",
        severity=severity,
        **overrides,
    )


def test_no_issues_scores_full_marks():
    card = score([])

    assert card.dimension_scores == {d: 100 for d in DIMENSIONS}
    assert card.overall_score == 100


def test_reference_button_scores_eighty_in_one_dimension():
    schema = schema_of(unlabelled_low_contrast_button())

    card = score(evaluate(schema), schema)

    assert card.dimension_scores["visual"] == 80
    assert sorted(card.dimension_scores.values()) == [80, 100, 100, 100, 100]
    assert card.overall_score == 96


def test_dimension_score_is_floored_at_zero():
    schema = schema_of(ui_element("e1", element_type=ElementType.INPUT, tag="input"))
    issues = [_issue("e1", Severity.CRITICAL) for _ in range(11)]

    card = score(issues, schema)

    assert card.dimension_scores["form"] == 0
    assert card.overall_score == 80


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("h2", "visual"),
        ("p", "visual"),
        ("span", "visual"),
        ("select", "form"),
        ("textarea", "form"),
        ("form", "form"),
        ("a", "navigation"),
        ("nav", "navigation"),
        ("footer", "navigation"),
        ("button", "visual"),
        ("div", "visual"),
    ],
)
def test_tag_family_attribution(tag, expected):
    element = ui_element("e1", tag=tag)

    assert attribute_dimension(_issue("e1", Severity.LOW), element) == expected


def test_explicit_category_wins_over_tag():
    element = ui_element("e1", tag="input")

    assert (
        attribute_dimension(
            _issue("e1", Severity.LOW, category=" Accessibility "), element
        )
        == "accessibility"
    )
    assert (
        attribute_dimension(_issue("e1", Severity.LOW, category="performance"), element)
        == "performance"
    )
    assert (
        attribute_dimension(_issue("e1", Severity.LOW, category="nonsense"), element)
        == "form"
    )


def test_unresolvable_elements_fall_back_to_visual():
    issues = [_issue("missing", Severity.HIGH)]

    with_schema = score(issues, schema_of(ui_element("e1", tag="a")))
    without_schema = score(issues)

    assert with_schema.dimension_scores["visual"] == 90
    assert without_schema.dimension_scores["visual"] == 90


def test_overall_score_rounds_half_up():
    # 498 / 5 = 99.6
    assert score([_issue("x", Severity.LOW)]).overall_score == 100
    # 496 / 5 = 99.2
    assert (
        score([_issue("x", Severity.LOW), _issue("y", Severity.LOW)]).overall_score
        == 99
    )
