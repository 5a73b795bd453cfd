from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpConfig:
    timeout_sec: Optional[float]
    user_agent: str


class HttpClient:
    """
    Thin HTTP client wrapper:
    - Optional timeout (None waits until the server answers)
    - One attempt per call, no retry
    - Logs meaningful failures

    Status handling is left to callers, which map codes to their own errors.
    """

    def __init__(self, config: HttpConfig, session: Optional[requests.Session] = None):
        self._cfg = config
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._cfg.user_agent})

    def get_text(self, url: str) -> str:
        """
        GET an URL and return response body as text.

        Raises:
            requests.HTTPError: non-2xx responses
            requests.RequestException: network errors
        """
        try:
            resp = self._session.get(url, timeout=self._cfg.timeout_sec)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("HTTP GET failed: url=%s err=%s", url, e)
            raise
        resp.encoding = "utf-8"
        return resp.text

    def post_json(
            self,
            url: str,
            payload: Any,
            headers: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        """
        POST a JSON body and return the raw response (any status).

        Raises:
            requests.RequestException: network errors
        """
        try:
            return self._session.post(
                url,
                json=payload,
                headers=dict(headers or {}),
                timeout=self._cfg.timeout_sec,
            )
        except requests.RequestException as e:
            logger.error("HTTP POST failed: url=%s err=%s", url, e)
            raise

    def post_form(self, url: str, fields: Mapping[str, str]) -> requests.Response:
        """POST an application/x-www-form-urlencoded body."""
        return self._session.post(url, data=dict(fields), timeout=self._cfg.timeout_sec)
