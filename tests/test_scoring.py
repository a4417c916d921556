import dataclasses

import pytest

from pulsecheck.scoring.schema import (
    EntityType,
    NumericResponseItem,
    RiskLabel,
    ScoringInput,
    TextResponseItem,
)
from pulsecheck.scoring.scoring import (
    calculate_churn_risk,
    risk_label_from_score,
    risk_score_from_goodness,
)
from conftest import FailingRater, FakeRater

RETENTION_Q = "Do you see yourself working here in a year?"
PLAIN_Q = "How satisfied are you with your workload?"


@pytest.mark.parametrize(
    "score, label",
    [
        (0, RiskLabel.HEALTHY),
        (20, RiskLabel.HEALTHY),
        (21, RiskLabel.LOW),
        (40, RiskLabel.LOW),
        (41, RiskLabel.MEDIUM),
        (60, RiskLabel.MEDIUM),
        (61, RiskLabel.HIGH),
        (80, RiskLabel.HIGH),
        (81, RiskLabel.CRITICAL),
        (100, RiskLabel.CRITICAL),
    ],
)
def test_label_boundaries(score, label):
    assert risk_label_from_score(score) == label


def test_every_score_gets_exactly_one_label():
    labels = [risk_label_from_score(s) for s in range(101)]
    assert set(labels) == set(RiskLabel)


def test_risk_score_rounds_half_up_and_clamps():
    assert risk_score_from_goodness(0.875) == 13  # 12.5
    assert risk_score_from_goodness(1.2) == 0
    assert risk_score_from_goodness(-0.5) == 100


def test_empty_input_defaults_to_forty_low():
    risk = calculate_churn_risk(ScoringInput("Nobody"), EntityType.USER, FailingRater())
    assert risk.risk_score == 40
    assert risk.risk_label == RiskLabel.LOW
    assert risk.details == "Based on 0 factors."
    assert risk.components.goodness == pytest.approx(0.6)


def test_all_fives_without_text_is_healthy():
    item = ScoringInput(
        "Ann",
        numeric_responses=tuple(NumericResponseItem(PLAIN_Q, 5) for _ in range(3)),
    )
    risk = calculate_churn_risk(item, EntityType.USER, FailingRater())
    assert risk.components.numeric_goodness == pytest.approx(1.0)
    assert risk.components.text_goodness == pytest.approx(0.6)
    assert risk.risk_score == 20
    assert risk.risk_label == RiskLabel.HEALTHY


def test_retention_question_shifts_weight_to_numeric():
    rater = FakeRater({"I am thinking of leaving": 1})
    texts = (TextResponseItem("I am thinking of leaving"),)

    with_retention = ScoringInput("A", (NumericResponseItem(RETENTION_Q, 5),), texts)
    without = ScoringInput("B", (NumericResponseItem(PLAIN_Q, 5),), texts)

    r1 = calculate_churn_risk(with_retention, EntityType.USER, rater)
    r2 = calculate_churn_risk(without, EntityType.USER, rater)

    assert r1.components.numeric_weight == pytest.approx(0.7)
    assert r2.components.numeric_weight == pytest.approx(0.5)
    # numeric (1.0) beats text (0.2), so more numeric weight means less risk
    assert r1.risk_score == 24
    assert r2.risk_score == 40
    assert "retention" in r1.details
    assert "retention" not in r2.details


def test_retention_answer_counts_three_times():
    item = ScoringInput(
        "C",
        numeric_responses=(
            NumericResponseItem(RETENTION_Q, 1),
            NumericResponseItem(PLAIN_Q, 5),
        ),
    )
    risk = calculate_churn_risk(item, EntityType.USER, FailingRater())
    # (1*3 + 5*1) / (5*3 + 5*1) = 0.4
    assert risk.components.numeric_goodness == pytest.approx(0.4)
    # 0.4*0.7 + 0.6*0.3 = 0.46 -> 54
    assert risk.risk_score == 54
    assert risk.risk_label == RiskLabel.MEDIUM


def test_text_ratings_are_averaged():
    rater = FakeRater({"great": 5, "awful": 1, "meh": 3})
    item = ScoringInput(
        "D", text_responses=tuple(TextResponseItem(t) for t in ["great", "awful", "meh"])
    )
    risk = calculate_churn_risk(item, EntityType.USER, rater)
    assert risk.components.text_goodness == pytest.approx(0.6)
    assert sorted(rater.calls) == ["awful", "great", "meh"]
    assert risk.details == "Based on 3 factors."


def test_worst_answers_land_on_high_critical_boundary():
    rater = FakeRater(default=1)
    item = ScoringInput(
        "E",
        numeric_responses=(NumericResponseItem(RETENTION_Q, 1),),
        text_responses=(TextResponseItem("no"),),
    )
    risk = calculate_churn_risk(item, EntityType.USER, rater)
    assert risk.risk_score == 80
    assert risk.risk_label == RiskLabel.HIGH


@pytest.mark.parametrize("score", [1, 2, 3, 4, 5])
@pytest.mark.parametrize("stars", [1, 3, 5])
def test_score_is_int_in_range(score, stars):
    item = ScoringInput(
        "F",
        numeric_responses=(NumericResponseItem(RETENTION_Q, score), NumericResponseItem(PLAIN_Q, score)),
        text_responses=(TextResponseItem("x"),),
    )
    risk = calculate_churn_risk(item, EntityType.USER, FakeRater(default=stars))
    assert isinstance(risk.risk_score, int)
    assert 0 <= risk.risk_score <= 100


def test_department_equals_concatenated_input():
    rater = FakeRater({"fine": 4, "tired": 2})
    alice = ScoringInput("alice", (NumericResponseItem(RETENTION_Q, 2),), (TextResponseItem("tired"),))
    bob = ScoringInput("bob", (NumericResponseItem(PLAIN_Q, 4),), (TextResponseItem("fine"),))

    dept = ScoringInput.concat("Sales", [alice, bob])
    manual = ScoringInput(
        "Sales",
        alice.numeric_responses + bob.numeric_responses,
        alice.text_responses + bob.text_responses,
    )

    r_dept = calculate_churn_risk(dept, EntityType.DEPARTMENT, rater)
    r_manual = calculate_churn_risk(manual, EntityType.DEPARTMENT, rater)

    assert r_dept == r_manual
    assert r_dept.entity_type == EntityType.DEPARTMENT
    assert r_dept.entity == "Sales"


def test_to_dict_uses_plain_values():
    risk = calculate_churn_risk(ScoringInput("G"), EntityType.USER, FailingRater())
    assert risk.to_dict() == {
        "entity": "G",
        "entity_type": "USER",
        "risk_score": 40,
        "risk_label": "Low",
        "details": "Based on 0 factors.",
    }


def test_churn_risk_is_hashable_and_frozen():
    risk = calculate_churn_risk(ScoringInput("G"), EntityType.USER, FailingRater())
    same = calculate_churn_risk(ScoringInput("G"), EntityType.USER, FailingRater())

    assert hash(risk) == hash(same)
    assert {risk: "cached"}[same] == "cached"
    assert risk.components.retention_signal is False
    assert risk.components.keywords_version == 1

    with pytest.raises(dataclasses.FrozenInstanceError):
        risk.components.goodness = 0.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        risk.risk_score = 0
