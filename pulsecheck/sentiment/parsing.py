# pulsecheck/sentiment/parsing.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Tuple, Union

_LEADING_INT = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True)
class StarLabel:
    label: str   # e.g. "4 stars"
    score: float


@dataclass(frozen=True)
class ParseFailure:
    reason: str


def _as_star_label(item: Any) -> Union[StarLabel, None]:
    if not isinstance(item, dict):
        return None
    label = item.get("label")
    score = item.get("score")
    if not isinstance(label, str):
        return None
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    return StarLabel(label=label, score=float(score))


def parse_star_labels(payload: Any) -> Union[Tuple[StarLabel, ...], ParseFailure]:
    """
    Validate the classifier response.

    The inference API answers a single input with either a flat list of
    {label, score} objects or the same list wrapped in one more list.
    """
    if not isinstance(payload, list) or not payload:
        return ParseFailure(f"expected a non-empty list, got {type(payload).__name__}")

    items = payload
    if isinstance(payload[0], list):
        items = payload[0]
        if not items:
            return ParseFailure("nested label list is empty")

    labels = []
    for item in items:
        parsed = _as_star_label(item)
        if parsed is None:
            return ParseFailure(f"unexpected label entry: {item!r}")
        labels.append(parsed)
    return tuple(labels)


def top_star_rating(labels: Tuple[StarLabel, ...]) -> Union[int, ParseFailure]:
    if not labels:
        return ParseFailure("no labels")

    best = max(labels, key=lambda lab: lab.score)
    m = _LEADING_INT.match(best.label)
    if m is None:
        return ParseFailure(f"label has no star count: {best.label!r}")

    stars = int(m.group(1))
    if not 1 <= stars <= 5:
        return ParseFailure(f"star count out of range: {stars}")
    return stars
