from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Protocol

import requests
import torch
from transformers import pipeline

from review_sentiment.errors import (
    ClassificationError,
    InvalidTokenError,
    ModelInitError,
    ModelLoadingError,
    RateLimitedError,
    UnexpectedResponseError,
)
from review_sentiment.http_client import HttpClient
from review_sentiment.sentiment_types import ClassificationResult

logger = logging.getLogger(__name__)


class SentimentBackend(Protocol):
    """Anything that turns one review text into a ClassificationResult."""

    def initialize(self) -> None:
        ...

    def classify(self, text: str, api_token: Optional[str] = None) -> ClassificationResult:
        ...


# -------------------------
# Local transformers pipeline
# -------------------------


@dataclass(frozen=True)
class LocalPipelineConfig:
    model_name: str
    device: str  # "auto" | "cpu" | "cuda"


def _select_device(device: str) -> torch.device:
    if device == "cpu":
        return torch.device("cpu")
    if device == "cuda":
        return torch.device("cuda")
    # auto
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")


@lru_cache(maxsize=1)
def _load_pipeline(model_name: str, device: str):
    """
    Load once per process. Cached by (model_name, device).

    Raises:
        OSError: if the model cannot be downloaded or found locally.
    """
    logger.info("Loading sentiment pipeline: model=%s device=%s", model_name, device)
    return pipeline("text-classification", model=model_name, device=_select_device(device))


def adapt_pipeline_output(output: Any) -> ClassificationResult:
    """
    Pipeline returns [{"label": ..., "score": ...}, ...]; take the first entry.

    A missing label reads as NEUTRAL and a missing score as 0.5, so the
    result lands in the neutral bucket instead of failing.
    """
    if not isinstance(output, list) or not output:
        raise UnexpectedResponseError("Invalid sentiment output")

    first = output[0] if isinstance(output[0], dict) else {}
    label = first.get("label")
    score = first.get("score")
    return ClassificationResult(
        label=label if isinstance(label, str) else "NEUTRAL",
        score=float(score) if _is_number(score) else 0.5,
    )


class LocalPipelineBackend:
    """
    In-process transformers text-classification pipeline.

    initialize() must succeed before classify(); a failure there is terminal
    for the owning session.
    """

    def __init__(self, cfg: LocalPipelineConfig):
        self._cfg = cfg
        self._pipe = None

    @property
    def ready(self) -> bool:
        return self._pipe is not None

    def initialize(self) -> None:
        """
        Raises:
            ModelInitError: model could not be loaded
        """
        try:
            self._pipe = _load_pipeline(self._cfg.model_name, self._cfg.device)
        except Exception as e:
            logger.error("Failed to load sentiment model: model=%s err=%s", self._cfg.model_name, e)
            raise ModelInitError("Failed to load sentiment model. Please restart the session.") from e
        logger.info("Sentiment model ready: model=%s", self._cfg.model_name)

    def classify(self, text: str, api_token: Optional[str] = None) -> ClassificationResult:
        if self._pipe is None:
            raise ClassificationError("Sentiment model is not ready yet.")
        try:
            output = self._pipe(text, truncation=True)
        except Exception as e:
            logger.error("Pipeline inference failed: err=%s", e)
            raise ClassificationError("Failed to analyze sentiment. Please try again.") from e
        return adapt_pipeline_output(output)


# -------------------------
# Remote inference API
# -------------------------


def adapt_api_output(data: Any) -> ClassificationResult:
    """
    Inference API returns [[{"label": ..., "score": ...}, ...]]; take data[0][0].

    Raises:
        UnexpectedResponseError: any other shape
    """
    if not isinstance(data, list) or not data or not isinstance(data[0], list) or not data[0]:
        raise UnexpectedResponseError("Unexpected API response format.")

    item = data[0][0]
    if not isinstance(item, dict):
        raise UnexpectedResponseError("Invalid sentiment data in API response.")
    label = item.get("label")
    score = item.get("score")
    if not isinstance(label, str) or not label or not _is_number(score):
        raise UnexpectedResponseError("Invalid sentiment data in API response.")
    return ClassificationResult(label=label, score=float(score))


class RemoteApiBackend:
    """
    Hugging Face style inference endpoint.

    - POST {"inputs": text}, optional bearer token
    - every call goes out fresh (no cache, no retry)
    """

    def __init__(self, http: HttpClient, api_url: str, api_token: str = ""):
        self.http = http
        self.api_url = api_url
        self.api_token = api_token

    def initialize(self) -> None:
        logger.info("Using remote sentiment API: url=%s", self.api_url)

    def classify(self, text: str, api_token: Optional[str] = None) -> ClassificationResult:
        """
        Raises:
            InvalidTokenError: 401
            RateLimitedError: 429
            ModelLoadingError: 503
            ClassificationError: other non-2xx or network failure
            UnexpectedResponseError: body is not the expected JSON shape
        """
        token = (api_token if api_token is not None else self.api_token).strip()
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = self.http.post_json(self.api_url, {"inputs": text}, headers=headers)
        except requests.RequestException as e:
            raise ClassificationError(f"Network error: {e}") from e

        if not 200 <= resp.status_code < 300:
            logger.warning("Sentiment API error: status=%s url=%s", resp.status_code, self.api_url)
            if resp.status_code == 401:
                raise InvalidTokenError(
                    "Invalid API token. Please check your token or leave it empty for anonymous access."
                )
            if resp.status_code == 429:
                raise RateLimitedError(
                    "Rate limit exceeded. Please wait or add your API token for higher limits."
                )
            if resp.status_code == 503:
                raise ModelLoadingError("Model is loading. Please try again in a few seconds.")
            raise ClassificationError(f"API error: {resp.status_code} - {_error_detail(resp)}")

        try:
            data = resp.json()
        except ValueError as e:
            raise UnexpectedResponseError("Unexpected API response format.") from e
        return adapt_api_output(data)


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.reason or "Unknown error"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
