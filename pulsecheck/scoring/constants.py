# pulsecheck/scoring/constants.py
from __future__ import annotations

# Columns the batch scorer expects in a flat response table.
REQUIRED_FIELDS = [
    "user_id",
    "question_text",
    "question_type",
]

# Question types as exported by the survey app.
SCALE_QUESTION = "SCALE_1_5"
OPEN_QUESTION = "OPEN"

DEFAULT_DEPARTMENT = "General"

MIN_SCORE = 1
MAX_SCORE = 5

# Retention phrases, matched as case-insensitive substrings of the question.
# Bump the version whenever the list changes so stored scores stay comparable.
RETENTION_KEYWORDS_VERSION = 1
RETENTION_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("en", "working here in a year"),
    ("nl", "jaar nog werken"),
    ("en", "looking for new job"),
    ("nl", "ander werk zoeken"),
)

RETENTION_QUESTION_WEIGHT = 3.0
STANDARD_QUESTION_WEIGHT = 1.0

# Slightly above neutral so entities with no data in one channel
# are not flagged purely for missing data.
DEFAULT_GOODNESS = 0.6

NUMERIC_WEIGHT_WITH_RETENTION = 0.7
NUMERIC_WEIGHT_DEFAULT = 0.5

# (exclusive lower bound, label), checked from highest risk down.
RISK_THRESHOLDS = [
    (80, "Critical"),
    (60, "High"),
    (40, "Medium"),
    (20, "Low"),
]
HEALTHY_LABEL = "Healthy"

RISK_TABLE_COLUMNS = [
    "entity",
    "entity_type",
    "risk_score",
    "risk_label",
    "details",
]
