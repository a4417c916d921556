import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

RAW_DIR = BASE_DIR / "data" / "raw"
DERIVED_DIR = BASE_DIR / "data" / "derived"

# Sentiment classifier (Hugging Face inference API)
SENTIMENT_API_URL = os.getenv(
    "SENTIMENT_API_URL",
    "https://router.huggingface.co/hf-inference/models/nlptown/bert-base-multilingual-uncased-sentiment",
)
HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY", "")
SENTIMENT_TIMEOUT = float(os.getenv("SENTIMENT_TIMEOUT", "5"))
SENTIMENT_MAX_WORKERS = int(os.getenv("SENTIMENT_MAX_WORKERS", "4"))

# Only recent answers count towards churn risk
RESPONSE_WINDOW_DAYS = int(os.getenv("RESPONSE_WINDOW_DAYS", "28"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
