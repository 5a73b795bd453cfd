from __future__ import annotations

import json
import logging
import platform
import socket
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Mapping, Optional

import requests

from review_sentiment.errors import LoggingError
from review_sentiment.http_client import HttpClient
from review_sentiment.sentiment_types import ClassificationResult

logger = logging.getLogger(__name__)

MAX_REVIEW_CHARS = 500


def build_log_fields(
        review: str,
        result: ClassificationResult,
        now: Optional[datetime] = None,
) -> dict[str, str]:
    """
    Form fields for the logging endpoint.

    - ts: epoch milliseconds
    - review: first 500 characters
    - meta: JSON string with client timestamp + environment descriptors
    """
    now = now or datetime.now(timezone.utc)
    meta = {
        "timestamp": now.isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "host": socket.gethostname(),
    }
    return {
        "ts": str(int(now.timestamp() * 1000)),
        "review": review[:MAX_REVIEW_CHARS],
        "sentiment": result.label,
        "confidence": str(result.score),
        "meta": json.dumps(meta, ensure_ascii=False),
    }


class SheetLogger:
    """
    Fire-and-forget logging of analysis results to a spreadsheet web app.

    - Disabled (no-op) when endpoint is empty
    - One POST per result on a single background worker
    - Failures are logged locally and dropped; the response is never inspected
    """

    def __init__(self, http: HttpClient, endpoint: str, executor: Optional[Executor] = None):
        self.http = http
        self.endpoint = endpoint.strip()
        self._executor = executor

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint)

    def log_analysis(self, review: str, result: ClassificationResult) -> Optional[Future]:
        """Returns the pending delivery, or None when logging is disabled."""
        if not self.enabled:
            return None
        fields = build_log_fields(review, result)
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sheet-logger")
        return self._executor.submit(self._deliver, fields)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _deliver(self, fields: Mapping[str, str]) -> bool:
        try:
            self._send(fields)
        except Exception as e:
            logger.warning("Failed to log analysis: endpoint=%s err=%s", self.endpoint, e)
            return False
        return True

    def _send(self, fields: Mapping[str, str]) -> None:
        try:
            resp = self.http.post_form(self.endpoint, fields)
        except requests.RequestException as e:
            raise LoggingError(str(e)) from e
        logger.debug("Analysis logged: endpoint=%s status=%s", self.endpoint, resp.status_code)
