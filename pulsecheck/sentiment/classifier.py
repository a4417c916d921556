# pulsecheck/sentiment/classifier.py
from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

import requests

from pulsecheck import config
from .parsing import ParseFailure, parse_star_labels, top_star_rating

logger = logging.getLogger(__name__)

NEUTRAL_RATING = 3


@dataclass(frozen=True)
class SentimentConfig:
    api_url: str = config.SENTIMENT_API_URL
    api_key: str = ""
    timeout: float = config.SENTIMENT_TIMEOUT

    @classmethod
    def from_env(cls) -> "SentimentConfig":
        return cls(
            api_url=os.getenv("SENTIMENT_API_URL", config.SENTIMENT_API_URL),
            api_key=os.getenv("HUGGINGFACE_API_KEY", "").strip(),
            timeout=float(os.getenv("SENTIMENT_TIMEOUT", str(config.SENTIMENT_TIMEOUT))),
        )

    def headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


class SentimentClassifier:
    """
    Rates free text on the 1..5 star scale of a hosted classification model.

    Never raises: empty text, transport errors, error statuses (including
    rate limiting) and unexpected payloads all come back as a neutral 3.
    There is no retry.
    """

    def __init__(self, settings: Optional[SentimentConfig] = None, session: Optional[requests.Session] = None):
        # An injected session is shared by every worker thread in rate_many,
        # so it must be safe to share. Without one, each thread gets its own.
        self.settings = settings or SentimentConfig.from_env()
        self._shared_session = session
        self._local = threading.local()

    def _session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def rate(self, text: str) -> int:
        if not text or not text.strip():
            return NEUTRAL_RATING

        try:
            resp = self._session().post(
                self.settings.api_url,
                json={"inputs": text},
                headers=self.settings.headers(),
                timeout=self.settings.timeout,
            )
        except Exception as e:
            logger.warning("Sentiment request failed: %s: %s", type(e).__name__, e, exc_info=True)
            return NEUTRAL_RATING

        if not resp.ok:
            logger.warning("Sentiment API error %s: %s", resp.status_code, resp.text[:200])
            return NEUTRAL_RATING

        try:
            payload = resp.json()
        except ValueError:
            logger.warning("Sentiment API returned non-JSON body")
            return NEUTRAL_RATING

        labels = parse_star_labels(payload)
        if isinstance(labels, ParseFailure):
            logger.warning("Unexpected sentiment payload: %s", labels.reason)
            return NEUTRAL_RATING

        stars = top_star_rating(labels)
        if isinstance(stars, ParseFailure):
            logger.warning("Unexpected sentiment label: %s", stars.reason)
            return NEUTRAL_RATING

        return stars

    def rate_many(self, texts: Sequence[str], max_workers: int = 1) -> List[int]:
        # Ratings come back in input order; completion order does not matter.
        if max_workers <= 1 or len(texts) <= 1:
            return [self.rate(t) for t in texts]

        with ThreadPoolExecutor(max_workers=min(max_workers, len(texts))) as pool:
            return list(pool.map(self.rate, texts))
