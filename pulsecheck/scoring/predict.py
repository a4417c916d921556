# pulsecheck/scoring/predict.py
from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from pulsecheck.config import (
    DERIVED_DIR,
    RAW_DIR,
    RESPONSE_WINDOW_DAYS,
    SENTIMENT_MAX_WORKERS,
    configure_logging,
)
from pulsecheck.sentiment.classifier import SentimentClassifier, SentimentConfig
from .responses import build_response_table
from .results_io import save_risk_tables
from .scoring import RiskTables, score_responses


def predict(
    responses_csv: Path | None = None,
    raw_dir: Path = RAW_DIR,
    as_of: str | None = None,
    window_days: int = RESPONSE_WINDOW_DAYS,
    max_workers: int = SENTIMENT_MAX_WORKERS,
    classifier=None,
) -> RiskTables:
    """
    Input: a flat response table CSV, or the raw survey exports
    Output: employee and department risk tables
    """
    if responses_csv is not None:
        df = pd.read_csv(responses_csv)
    else:
        df = build_response_table(raw_dir=raw_dir, as_of=as_of, window_days=window_days)

    if classifier is None:
        classifier = SentimentClassifier(SentimentConfig.from_env())
    return score_responses(df, classifier, max_workers=max_workers)


def main() -> None:
    parser = argparse.ArgumentParser(description="Score employee and department churn risk")
    parser.add_argument("--responses", type=Path, default=None, help="flat response table CSV")
    parser.add_argument("--raw-dir", type=Path, default=RAW_DIR)
    parser.add_argument("--out-dir", type=Path, default=DERIVED_DIR)
    parser.add_argument("--as-of", default=None, help="end of the response window (default: now)")
    parser.add_argument("--window-days", type=int, default=RESPONSE_WINDOW_DAYS)
    parser.add_argument("--workers", type=int, default=SENTIMENT_MAX_WORKERS)
    args = parser.parse_args()

    configure_logging()

    tables = predict(
        responses_csv=args.responses,
        raw_dir=args.raw_dir,
        as_of=args.as_of,
        window_days=args.window_days,
        max_workers=args.workers,
    )
    users_path, depts_path = save_risk_tables(tables, args.out_dir)

    print(f"✅ Saved {len(tables.users):,} employee risks to {users_path}")
    print(f"✅ Saved {len(tables.departments):,} department risks to {depts_path}")
    if not tables.users.empty:
        print("\nRisk levels (employees):")
        print(tables.users["risk_label"].value_counts().to_string())


if __name__ == "__main__":
    main()
