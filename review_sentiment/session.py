from __future__ import annotations

import logging
from typing import Optional

from review_sentiment.errors import ModelInitError, ReviewAppError
from review_sentiment.http_client import HttpClient, HttpConfig
from review_sentiment.models import AnalysisOutcome, LoadOutcome
from review_sentiment.presenter import present
from review_sentiment.result_logger import SheetLogger
from review_sentiment.review_loader import ReviewLoader
from review_sentiment.sampler import ReviewSampler
from review_sentiment.sentiment_model import (
    LocalPipelineBackend,
    LocalPipelineConfig,
    RemoteApiBackend,
    SentimentBackend,
)
from review_sentiment.sentiment_types import RunningStats
from review_sentiment.settings import AppSettings

logger = logging.getLogger(__name__)

MODEL_NOT_READY = "Sentiment model is not ready yet."
ANALYSIS_IN_PROGRESS = "An analysis is already in progress. Please wait."


def build_backend(s: AppSettings, http: HttpClient) -> SentimentBackend:
    """
    Raises:
        ValueError: unknown SENTIMENT_BACKEND
    """
    if s.sentiment_backend == "local":
        return LocalPipelineBackend(
            LocalPipelineConfig(model_name=s.sentiment_local_model, device=s.sentiment_device)
        )
    if s.sentiment_backend == "remote":
        return RemoteApiBackend(http, api_url=s.sentiment_api_url, api_token=s.hf_api_token)
    raise ValueError(f"Unknown sentiment backend: {s.sentiment_backend}")


class ReviewSession:
    """
    Owns everything one user session needs: corpus, counters, backend.

    Actions (load_reviews / analyze_random_review) never raise for expected
    failures; they return an outcome carrying the message to show.
    A backend that fails to initialize makes the session unusable for analysis.
    """

    def __init__(
            self,
            loader: ReviewLoader,
            backend: SentimentBackend,
            reviews_url: str,
            sampler: Optional[ReviewSampler] = None,
            result_logger: Optional[SheetLogger] = None,
            case_insensitive_labels: bool = False,
    ):
        self.loader = loader
        self.backend = backend
        self.reviews_url = reviews_url
        self.sampler = sampler or ReviewSampler()
        self.result_logger = result_logger
        self.case_insensitive_labels = case_insensitive_labels

        self.corpus: tuple[str, ...] = ()
        self.stats = RunningStats()
        self.status = "Loading sentiment model..."

        self._ready = False
        self._model_error: Optional[str] = None
        self._analyzing = False

    @classmethod
    def from_settings(cls, s: AppSettings) -> "ReviewSession":
        http_cfg = HttpConfig(timeout_sec=s.request_timeout_sec, user_agent=s.user_agent)
        http = HttpClient(http_cfg)
        return cls(
            loader=ReviewLoader(http, text_columns=s.text_columns, fallback_policy=s.reviews_fallback_policy),  # type: ignore[arg-type]
            backend=build_backend(s, http),
            reviews_url=s.reviews_url,
            # logger posts from its own worker thread, keep its session separate
            result_logger=SheetLogger(HttpClient(http_cfg), s.log_endpoint),
            case_insensitive_labels=s.sentiment_case_insensitive_labels,
        )

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def model_failed(self) -> bool:
        return self._model_error is not None

    def start(self) -> bool:
        """Initialize the backend once. False means the session must be restarted."""
        if self._ready:
            return True
        try:
            self.backend.initialize()
        except ModelInitError as e:
            self._model_error = str(e)
            self.status = "Failed to load model"
            logger.error("Backend initialization failed: err=%s", e)
            return False
        self._ready = True
        self.status = "Sentiment model ready!"
        return True

    def load_reviews(self, locator: Optional[str] = None) -> LoadOutcome:
        """
        (Re)load the corpus. Counters are reset on every call, success or not.
        """
        locator = locator or self.reviews_url
        self.corpus = ()
        self.stats.reset()
        self.sampler.last_index = None

        try:
            loaded = self.loader.load(locator)
        except ReviewAppError as e:
            return LoadOutcome(
                level="error",
                message=(
                    f"Failed to load {locator}. Please ensure the file exists in the correct location. "
                    f"Error: {e}"
                ),
                reviews_loaded=0,
            )

        self.corpus = loaded.reviews
        if loaded.used_fallback:
            return LoadOutcome(
                level="warning",
                message=loaded.warning or "Using sample review data.",
                reviews_loaded=len(self.corpus),
                used_fallback=True,
            )
        return LoadOutcome(
            level="info",
            message=f"Successfully loaded {len(self.corpus)} reviews",
            reviews_loaded=len(self.corpus),
        )

    def analyze_random_review(self, api_token: Optional[str] = None) -> AnalysisOutcome:
        """
        Sample one review, classify it, update counters, hand it to the result logger.

        Counters only move on success.
        """
        if self._model_error is not None:
            return self._error(self._model_error, fatal=True)
        if not self._ready:
            return self._error(MODEL_NOT_READY)
        if self._analyzing:
            return self._error(ANALYSIS_IN_PROGRESS)

        try:
            sampled = self.sampler.sample(self.corpus)
        except ReviewAppError as e:
            return self._error(str(e))

        self._analyzing = True
        try:
            result = self.backend.classify(sampled.text, api_token=api_token)
        except ReviewAppError as e:
            logger.warning("Analysis failed: index=%s err=%s", sampled.index, e)
            return AnalysisOutcome(
                level="error",
                message=f"Analysis failed: {e}",
                review=sampled,
                analyzed=self.stats.analyzed,
                positive=self.stats.positive,
            )
        finally:
            self._analyzing = False

        presented = present(result, case_insensitive=self.case_insensitive_labels)
        self.stats.record(presented.bucket)

        if self.result_logger is not None:
            self.result_logger.log_analysis(sampled.text, result)

        return AnalysisOutcome(
            level="info",
            message=f"{presented.display_label} (Confidence: {presented.confidence})",
            review=sampled,
            sentiment=presented,
            raw_label=result.label,
            raw_score=result.score,
            analyzed=self.stats.analyzed,
            positive=self.stats.positive,
        )

    def close(self) -> None:
        if self.result_logger is not None:
            self.result_logger.close()

    def _error(self, message: str, fatal: bool = False) -> AnalysisOutcome:
        return AnalysisOutcome(
            level="error",
            message=message,
            analyzed=self.stats.analyzed,
            positive=self.stats.positive,
            fatal=fatal,
        )
