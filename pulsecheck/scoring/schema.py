# pulsecheck/scoring/schema.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd

from .constants import (
    DEFAULT_DEPARTMENT,
    DEFAULT_GOODNESS,
    MAX_SCORE,
    MIN_SCORE,
    NUMERIC_WEIGHT_DEFAULT,
    OPEN_QUESTION,
    RETENTION_KEYWORDS_VERSION,
    SCALE_QUESTION,
)


class EntityType(str, Enum):
    USER = "USER"
    DEPARTMENT = "DEPARTMENT"


class RiskLabel(str, Enum):
    HEALTHY = "Healthy"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


@dataclass(frozen=True)
class NumericResponseItem:
    question_text: str
    score: float  # 1..5


@dataclass(frozen=True)
class TextResponseItem:
    text: str


@dataclass(frozen=True)
class ScoringInput:
    """Everything the scorer needs for one employee or one department."""
    entity_name: str
    numeric_responses: Tuple[NumericResponseItem, ...] = ()
    text_responses: Tuple[TextResponseItem, ...] = ()

    @property
    def factor_count(self) -> int:
        return len(self.numeric_responses) + len(self.text_responses)

    @classmethod
    def concat(cls, entity_name: str, inputs: Iterable["ScoringInput"]) -> "ScoringInput":
        # Department input = flat concatenation of its employees' answers.
        numeric: List[NumericResponseItem] = []
        text: List[TextResponseItem] = []
        for item in inputs:
            numeric.extend(item.numeric_responses)
            text.extend(item.text_responses)
        return cls(entity_name=entity_name, numeric_responses=tuple(numeric), text_responses=tuple(text))


@dataclass(frozen=True)
class ScoreComponents:
    """Intermediate values behind a risk score, kept for explanations."""
    numeric_goodness: float = DEFAULT_GOODNESS
    text_goodness: float = DEFAULT_GOODNESS
    goodness: float = DEFAULT_GOODNESS
    numeric_weight: float = NUMERIC_WEIGHT_DEFAULT
    retention_signal: bool = False
    keywords_version: int = RETENTION_KEYWORDS_VERSION


@dataclass(frozen=True)
class ChurnRisk:
    entity: str
    entity_type: EntityType
    risk_score: int       # 0 .. 100, high is bad
    risk_label: RiskLabel
    details: str
    components: ScoreComponents = field(default_factory=ScoreComponents)

    def to_dict(self) -> Dict[str, object]:
        return {
            "entity": self.entity,
            "entity_type": self.entity_type.value,
            "risk_score": self.risk_score,
            "risk_label": self.risk_label.value,
            "details": self.details,
        }


@dataclass(frozen=True)
class SchemaResult:
    df: pd.DataFrame
    missing_required: List[str]
    warnings: List[str]


def coerce_numeric(series: pd.Series) -> pd.Series:
    # Robust numeric conversion. Non-numeric -> NaN (dropped later).
    return pd.to_numeric(series, errors="coerce")


def validate_and_coerce(
    df_input: pd.DataFrame,
    required_fields: List[str],
) -> SchemaResult:
    """
    Clean a flat response table (one row per answer).

    - scale answers must be numeric and within 1..5, others are dropped
    - open answers must carry text, empty ones are dropped
    - missing departments fall back to "General"
    """
    warnings: List[str] = []
    missing = [c for c in required_fields if c not in df_input.columns]
    if missing:
        return SchemaResult(df=df_input.copy(), missing_required=missing, warnings=warnings)

    df = df_input.copy()

    df["user_id"] = df["user_id"].astype(str)
    df["question_text"] = df["question_text"].fillna("").astype(str)
    df["question_type"] = df["question_type"].astype(str).str.strip().str.upper()

    if "user_name" not in df.columns:
        df["user_name"] = df["user_id"]
    df["user_name"] = df["user_name"].fillna(df["user_id"]).astype(str)

    if "department" not in df.columns:
        df["department"] = DEFAULT_DEPARTMENT
    dept = df["department"].astype("object").where(df["department"].notna(), "")
    dept = dept.astype(str).str.strip()
    df["department"] = dept.mask(dept == "", DEFAULT_DEPARTMENT)

    if "value_numeric" not in df.columns:
        df["value_numeric"] = np.nan
    df["value_numeric"] = coerce_numeric(df["value_numeric"])

    if "value_text" not in df.columns:
        df["value_text"] = ""
    df["value_text"] = df["value_text"].fillna("").astype(str)

    is_scale = df["question_type"] == SCALE_QUESTION
    is_open = df["question_type"] == OPEN_QUESTION

    scores = df["value_numeric"]
    in_range = scores.between(MIN_SCORE, MAX_SCORE) & np.isfinite(scores)
    bad_scale = is_scale & scores.notna() & ~in_range
    if bad_scale.any():
        warnings.append(
            f"{int(bad_scale.sum())} scale answers outside {MIN_SCORE}..{MAX_SCORE} were dropped."
        )

    keep_scale = is_scale & in_range
    keep_open = is_open & (df["value_text"] != "")

    other = ~(is_scale | is_open)
    if other.any():
        kinds = sorted(df.loc[other, "question_type"].unique().tolist())
        warnings.append(f"Ignoring answers to unsupported question types: {kinds}")

    out = df[keep_scale | keep_open].reset_index(drop=True)
    return SchemaResult(df=out, missing_required=[], warnings=warnings)
