# pulsecheck/scoring/signals.py
from __future__ import annotations

from typing import Iterable, Sequence

from .constants import (
    DEFAULT_GOODNESS,
    MAX_SCORE,
    NUMERIC_WEIGHT_DEFAULT,
    NUMERIC_WEIGHT_WITH_RETENTION,
    RETENTION_KEYWORDS,
    RETENTION_QUESTION_WEIGHT,
    STANDARD_QUESTION_WEIGHT,
)
from .schema import NumericResponseItem


def is_retention_question(question_text: str, keywords=RETENTION_KEYWORDS) -> bool:
    """True when the question asks whether the respondent plans to stay."""
    text = (question_text or "").lower()
    return any(phrase.lower() in text for _, phrase in keywords)


def has_retention_signal(items: Iterable[NumericResponseItem]) -> bool:
    return any(is_retention_question(i.question_text) for i in items)


def question_weight(question_text: str) -> float:
    if is_retention_question(question_text):
        return RETENTION_QUESTION_WEIGHT
    return STANDARD_QUESTION_WEIGHT


def numeric_goodness(items: Sequence[NumericResponseItem]) -> float:
    """
    Weighted share of the best possible score, 0..1.
    Retention questions count three times.
    """
    total = 0.0
    total_max = 0.0
    for item in items:
        w = question_weight(item.question_text)
        total += item.score * w
        total_max += MAX_SCORE * w

    if total_max <= 0:
        return DEFAULT_GOODNESS
    return total / total_max


def text_goodness(star_ratings: Sequence[int]) -> float:
    if not star_ratings:
        return DEFAULT_GOODNESS
    return sum(star_ratings) / (len(star_ratings) * MAX_SCORE)


def numeric_weight(retention: bool) -> float:
    # An explicit stay/leave answer beats noisy comment sentiment.
    return NUMERIC_WEIGHT_WITH_RETENTION if retention else NUMERIC_WEIGHT_DEFAULT


def blend_goodness(numeric: float, text: float, retention: bool) -> float:
    w = numeric_weight(retention)
    return numeric * w + text * (1 - w)
