# pulsecheck/scoring/results_io.py
from __future__ import annotations

from pathlib import Path

import pandas as pd

from pulsecheck.config import DERIVED_DIR
from .constants import RISK_TABLE_COLUMNS
from .scoring import RiskTables

USER_RISKS_FILE = "churn_risk_users.csv"
DEPARTMENT_RISKS_FILE = "churn_risk_departments.csv"


def save_risk_tables(tables: RiskTables, out_dir: Path = DERIVED_DIR) -> tuple[Path, Path]:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    users_path = out_dir / USER_RISKS_FILE
    depts_path = out_dir / DEPARTMENT_RISKS_FILE
    tables.users.to_csv(users_path, index=False)
    tables.departments.to_csv(depts_path, index=False)
    return users_path, depts_path


def load_risk_tables(out_dir: Path = DERIVED_DIR) -> RiskTables:
    out_dir = Path(out_dir)
    frames = []
    for name in (USER_RISKS_FILE, DEPARTMENT_RISKS_FILE):
        path = out_dir / name
        if not path.exists():
            raise FileNotFoundError(
                f"Risk table not found at {path}. Score first: python -m pulsecheck.scoring.predict"
            )
        df = pd.read_csv(path, dtype={"entity": str})
        df["details"] = df["details"].fillna("")
        frames.append(df[RISK_TABLE_COLUMNS])
    return RiskTables(users=frames[0], departments=frames[1])
