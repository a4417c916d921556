# pulsecheck/scoring/responses.py
from __future__ import annotations

from pathlib import Path

import pandas as pd

from pulsecheck.config import RAW_DIR, RESPONSE_WINDOW_DAYS

RAW_FILES = {
    "users": "users.csv",
    "questions": "questions.csv",
    "responses": "responses.csv",
}

EMPLOYEE_ROLE = "EMPLOYEE"
RESPONSE_KEYS = ["user_id", "question_id", "submitted_at"]


def _read(raw_dir: Path, name: str) -> pd.DataFrame:
    path = Path(raw_dir) / RAW_FILES[name]
    if not path.exists():
        raise FileNotFoundError(f"Raw export not found at {path}")
    return pd.read_csv(path)


def _to_utc(ts) -> pd.Timestamp:
    ts = pd.Timestamp(ts)
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")


def build_response_table(
    raw_dir: Path = RAW_DIR,
    as_of: str | None = None,
    window_days: int = RESPONSE_WINDOW_DAYS,
) -> pd.DataFrame:
    """
    Join the survey app's raw exports into one row per answer.

    Keeps employees only and answers submitted in the `window_days`
    before `as_of` (default: now).
    """
    users = _read(raw_dir, "users")
    questions = _read(raw_dir, "questions")
    responses = _read(raw_dir, "responses")

    as_of_ts = _to_utc(as_of) if as_of is not None else pd.Timestamp.now(tz="UTC")
    window_start = as_of_ts - pd.Timedelta(days=window_days)

    missing = [c for c in RESPONSE_KEYS if c not in responses.columns]
    if missing:
        raise ValueError(f"Missing required fields in {RAW_FILES['responses']}: {missing}")

    responses["submitted_at"] = pd.to_datetime(responses["submitted_at"], errors="coerce", utc=True)
    responses = responses.dropna(subset=RESPONSE_KEYS).copy()
    recent = responses[
        (responses["submitted_at"] >= window_start) & (responses["submitted_at"] <= as_of_ts)
    ]

    users = users.rename(columns={"id": "user_id", "name": "user_name"})
    if "role" in users.columns:
        users = users[users["role"].astype(str).str.upper() == EMPLOYEE_ROLE].copy()
    if "department" not in users.columns:
        users["department"] = None
    user_cols = ["user_id", "user_name", "department"]

    questions = questions.rename(
        columns={"id": "question_id", "text": "question_text", "type": "question_type"}
    )
    question_cols = ["question_id", "question_text", "question_type"]

    out = (
        recent
        .merge(users[user_cols], on="user_id", how="inner")
        .merge(questions[question_cols], on="question_id", how="inner")
    )

    for c in ["value_numeric", "value_text"]:
        if c not in out.columns:
            out[c] = None

    return out[
        user_cols + question_cols + ["value_numeric", "value_text", "submitted_at"]
    ].reset_index(drop=True)
