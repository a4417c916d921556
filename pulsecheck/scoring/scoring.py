# pulsecheck/scoring/scoring.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Protocol, Sequence, Tuple

import pandas as pd

from .constants import (
    DEFAULT_DEPARTMENT,
    HEALTHY_LABEL,
    OPEN_QUESTION,
    REQUIRED_FIELDS,
    RISK_TABLE_COLUMNS,
    RISK_THRESHOLDS,
    SCALE_QUESTION,
)
from .schema import (
    ChurnRisk,
    EntityType,
    NumericResponseItem,
    RiskLabel,
    ScoreComponents,
    ScoringInput,
    TextResponseItem,
    validate_and_coerce,
)
from .signals import (
    blend_goodness,
    has_retention_signal,
    numeric_goodness,
    numeric_weight,
    text_goodness,
)

logger = logging.getLogger(__name__)


class StarRater(Protocol):
    def rate(self, text: str) -> int: ...


def risk_label_from_score(risk_score: int) -> RiskLabel:
    # Exclusive lower bounds: 40 is "Low", 41 is "Medium".
    for lower, label in RISK_THRESHOLDS:
        if risk_score > lower:
            return RiskLabel(label)
    return RiskLabel(HEALTHY_LABEL)


def risk_score_from_goodness(goodness: float) -> int:
    raw = max(0.0, min(100.0, (1 - goodness) * 100))
    # Half-up rounding; round() would send 12.5 to 12.
    return int(math.floor(raw + 0.5))


def _rate_texts(classifier: StarRater, texts: Sequence[str], max_workers: int) -> List[int]:
    rate_many = getattr(classifier, "rate_many", None)
    if rate_many is not None:
        return list(rate_many(texts, max_workers=max_workers))
    return [classifier.rate(t) for t in texts]


def calculate_churn_risk(
    scoring_input: ScoringInput,
    entity_type: EntityType,
    classifier: StarRater,
    max_workers: int = 1,
) -> ChurnRisk:
    """
    Core reusable scoring function, identical for employees and departments.

    goodness = numeric * w + text * (1 - w), w = 0.7 when a retention
    question was answered, else 0.5. risk = (1 - goodness) * 100.
    """
    entity_type = EntityType(entity_type)
    numeric_items = scoring_input.numeric_responses
    texts = [t.text for t in scoring_input.text_responses]

    retention = has_retention_signal(numeric_items)
    num_good = numeric_goodness(numeric_items)
    txt_good = text_goodness(_rate_texts(classifier, texts, max_workers))
    goodness = blend_goodness(num_good, txt_good, retention)

    risk_score = risk_score_from_goodness(goodness)
    label = risk_label_from_score(risk_score)

    details = f"Based on {scoring_input.factor_count} factors."
    if retention:
        details += " Includes weighted retention indicators."

    logger.debug(
        "Scored %s %s: numeric=%.3f text=%.3f risk=%d",
        entity_type.value, scoring_input.entity_name, num_good, txt_good, risk_score,
    )

    return ChurnRisk(
        entity=scoring_input.entity_name,
        entity_type=entity_type,
        risk_score=risk_score,
        risk_label=label,
        details=details,
        components=ScoreComponents(
            numeric_goodness=num_good,
            text_goodness=txt_good,
            goodness=goodness,
            numeric_weight=numeric_weight(retention),
            retention_signal=retention,
        ),
    )


@dataclass(frozen=True)
class RiskTables:
    users: pd.DataFrame
    departments: pd.DataFrame


def _input_from_rows(name: str, rows: pd.DataFrame) -> ScoringInput:
    scale = rows[rows["question_type"] == SCALE_QUESTION]
    open_ = rows[rows["question_type"] == OPEN_QUESTION]
    numeric = tuple(
        NumericResponseItem(question_text=q, score=float(s))
        for q, s in zip(scale["question_text"], scale["value_numeric"])
    )
    text = tuple(TextResponseItem(text=t) for t in open_["value_text"])
    return ScoringInput(entity_name=name, numeric_responses=numeric, text_responses=text)


def build_scoring_inputs(df: pd.DataFrame) -> Tuple[List[ScoringInput], List[ScoringInput]]:
    """
    Fan a cleaned response table out into per-employee and per-department inputs.
    A department input is the concatenation of its employees' inputs.
    """
    user_inputs: List[ScoringInput] = []
    by_department: Dict[str, List[ScoringInput]] = {}

    for (_, user_name), rows in df.groupby(["user_id", "user_name"], sort=False):
        item = _input_from_rows(user_name, rows)
        if item.factor_count == 0:
            continue
        user_inputs.append(item)

        dept = rows["department"].iloc[0] if "department" in rows.columns else DEFAULT_DEPARTMENT
        by_department.setdefault(dept, []).append(item)

    department_inputs = [
        ScoringInput.concat(dept, items) for dept, items in by_department.items()
    ]
    return user_inputs, department_inputs


def risk_table(risks: Sequence[ChurnRisk]) -> pd.DataFrame:
    out = pd.DataFrame([r.to_dict() for r in risks], columns=RISK_TABLE_COLUMNS)
    out["risk_score"] = out["risk_score"].astype(int)
    return out.sort_values("risk_score", ascending=False, kind="stable").reset_index(drop=True)


def score_responses(
    df_input: pd.DataFrame,
    classifier: StarRater,
    max_workers: int = 1,
) -> RiskTables:
    """
    df_input: flat response table (one row per answer)
    return: employee and department risk tables, riskiest first
    """
    schema_res = validate_and_coerce(df_input, required_fields=REQUIRED_FIELDS)
    if schema_res.missing_required:
        raise ValueError(f"Missing required fields: {schema_res.missing_required}")
    for w in schema_res.warnings:
        logger.warning(w)

    user_inputs, department_inputs = build_scoring_inputs(schema_res.df)

    user_risks = [
        calculate_churn_risk(i, EntityType.USER, classifier, max_workers=max_workers)
        for i in user_inputs
    ]
    department_risks = [
        calculate_churn_risk(i, EntityType.DEPARTMENT, classifier, max_workers=max_workers)
        for i in department_inputs
    ]
    logger.info(
        "Scored %d employees and %d departments", len(user_risks), len(department_risks)
    )

    return RiskTables(users=risk_table(user_risks), departments=risk_table(department_risks))
