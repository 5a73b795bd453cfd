from __future__ import annotations

import random
from typing import Optional

from review_sentiment.errors import ModelInitError, RateLimitedError
from review_sentiment.review_loader import FALLBACK_REVIEWS, ReviewLoader
from review_sentiment.sampler import ReviewSampler
from review_sentiment.sentiment_model import RemoteApiBackend
from review_sentiment.sentiment_types import ClassificationResult
from review_sentiment.session import ANALYSIS_IN_PROGRESS, MODEL_NOT_READY, ReviewSession

from _fakes import FakeResponse, make_http

TSV = "text\nGreat product\n\nBad product\n"


class _StubBackend:
    def __init__(self, *results, fail_init: bool = False):
        self._results = list(results)
        self._fail_init = fail_init
        self.texts: list[str] = []
        self.on_classify = None

    def initialize(self) -> None:
        if self._fail_init:
            raise ModelInitError("Failed to load sentiment model. Please restart the session.")

    def classify(self, text: str, api_token: Optional[str] = None) -> ClassificationResult:
        self.texts.append(text)
        if self.on_classify is not None:
            self.on_classify()
        item = self._results.pop(0) if len(self._results) > 1 else self._results[0]
        if isinstance(item, Exception):
            raise item
        return item


class _RecordingLogger:
    def __init__(self):
        self.logged: list[tuple[str, ClassificationResult]] = []

    def log_analysis(self, review, result):
        self.logged.append((review, result))

    def close(self):
        pass


def _session(backend, policy="lenient", tsv=TSV, result_logger=None) -> ReviewSession:
    http, _ = make_http(FakeResponse(200, text=tsv))
    return ReviewSession(
        loader=ReviewLoader(http, fallback_policy=policy),
        backend=backend,
        reviews_url="https://example.com/reviews.tsv",
        sampler=ReviewSampler(random.Random(3)),
        result_logger=result_logger,
    )


def test_load_success():
    s = _session(_StubBackend(ClassificationResult("POSITIVE", 0.9)))
    outcome = s.load_reviews()

    assert outcome.level == "info"
    assert outcome.reviews_loaded == 2
    assert outcome.message == "Successfully loaded 2 reviews"
    assert s.corpus == ("Great product", "Bad product")


def test_analyze_updates_stats_and_logs():
    result_logger = _RecordingLogger()
    s = _session(_StubBackend(ClassificationResult("POSITIVE", 0.87)), result_logger=result_logger)
    assert s.start()
    s.load_reviews()

    outcome = s.analyze_random_review()

    assert outcome.level == "info"
    assert outcome.review.text in s.corpus
    assert outcome.sentiment.bucket == "positive"
    assert outcome.sentiment.confidence == "87.0%"
    assert (outcome.analyzed, outcome.positive) == (1, 1)
    assert result_logger.logged == [(outcome.review.text, ClassificationResult("POSITIVE", 0.87))]


def test_negative_does_not_bump_positive():
    s = _session(_StubBackend(ClassificationResult("NEGATIVE", 0.95)))
    s.start()
    s.load_reviews()
    outcome = s.analyze_random_review()
    assert outcome.sentiment.bucket == "negative"
    assert (s.stats.analyzed, s.stats.positive) == (1, 0)


def test_reload_resets_stats():
    s = _session(_StubBackend(ClassificationResult("POSITIVE", 0.9)))
    s.start()
    s.load_reviews()
    s.analyze_random_review()
    s.analyze_random_review()
    assert s.stats.analyzed == 2

    s.load_reviews()
    assert (s.stats.analyzed, s.stats.positive) == (0, 0)


def test_rate_limit_leaves_stats_unchanged():
    http, _ = make_http(FakeResponse(429))
    s = _session(RemoteApiBackend(http, api_url="https://api.example.com/m"))
    s.start()
    s.load_reviews()

    outcome = s.analyze_random_review()

    assert outcome.level == "error"
    assert "Rate limit exceeded" in outcome.message
    assert outcome.fatal is False
    assert (s.stats.analyzed, s.stats.positive) == (0, 0)


def test_classification_error_is_recoverable():
    backend = _StubBackend(RateLimitedError("Rate limit exceeded."), ClassificationResult("POSITIVE", 0.8))
    s = _session(backend)
    s.start()
    s.load_reviews()

    assert s.analyze_random_review().level == "error"
    assert s.analyze_random_review().level == "info"
    assert s.stats.analyzed == 1


def test_analyze_without_reviews():
    s = _session(_StubBackend(ClassificationResult("POSITIVE", 0.9)))
    s.start()
    outcome = s.analyze_random_review()
    assert outcome.level == "error"
    assert "No reviews loaded" in outcome.message


def test_analyze_before_start():
    s = _session(_StubBackend(ClassificationResult("POSITIVE", 0.9)))
    s.load_reviews()
    assert s.analyze_random_review().message == MODEL_NOT_READY


def test_model_init_failure_is_fatal():
    backend = _StubBackend(ClassificationResult("POSITIVE", 0.9), fail_init=True)
    s = _session(backend)

    assert s.start() is False
    assert s.model_failed
    s.load_reviews()
    outcome = s.analyze_random_review()

    assert outcome.fatal is True
    assert "restart" in outcome.message
    assert backend.texts == []


def test_second_analyze_while_in_flight_is_rejected():
    backend = _StubBackend(ClassificationResult("POSITIVE", 0.9))
    s = _session(backend)
    s.start()
    s.load_reviews()

    nested = []
    backend.on_classify = lambda: nested.append(s.analyze_random_review())
    outcome = s.analyze_random_review()

    assert outcome.level == "info"
    assert nested[0].message == ANALYSIS_IN_PROGRESS
    assert s.stats.analyzed == 1
    assert len(backend.texts) == 1


def test_strict_load_failure_surfaces_error_and_empty_corpus():
    s = _session(_StubBackend(ClassificationResult("POSITIVE", 0.9)), policy="strict", tsv="id\tbody\n1\tx\n")
    s.start()
    outcome = s.load_reviews()

    assert outcome.level == "error"
    assert outcome.reviews_loaded == 0
    assert "Failed to load https://example.com/reviews.tsv" in outcome.message
    assert s.corpus == ()
    assert "No reviews loaded" in s.analyze_random_review().message


def test_lenient_load_failure_uses_samples():
    s = _session(_StubBackend(ClassificationResult("POSITIVE", 0.9)), policy="lenient", tsv="id\tbody\n1\tx\n")
    outcome = s.load_reviews()

    assert outcome.level == "warning"
    assert outcome.used_fallback is True
    assert outcome.reviews_loaded == 10
    assert s.corpus == FALLBACK_REVIEWS


def test_case_insensitive_labels():
    s = _session(_StubBackend(ClassificationResult("positive", 0.9)))
    s.case_insensitive_labels = True
    s.start()
    s.load_reviews()
    assert s.analyze_random_review().sentiment.bucket == "positive"
