from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from review_sentiment.sentiment_types import PresentedSentiment

OutcomeLevel = Literal["info", "warning", "error"]


@dataclass(frozen=True)
class LoadedReviews:
    """Review corpus produced by one load, plus where it came from."""

    reviews: tuple[str, ...]
    source: str
    used_fallback: bool = False
    warning: Optional[str] = None


@dataclass(frozen=True)
class SampledReview:
    index: int
    text: str


@dataclass(frozen=True)
class LoadOutcome:
    """Result of the load-reviews action, ready for display."""

    level: OutcomeLevel
    message: str
    reviews_loaded: int
    used_fallback: bool = False


@dataclass(frozen=True)
class AnalysisOutcome:
    """Result of the analyze-random-review action, ready for display."""

    level: OutcomeLevel
    message: str
    review: Optional[SampledReview] = None
    sentiment: Optional[PresentedSentiment] = None
    raw_label: Optional[str] = None
    raw_score: Optional[float] = None
    analyzed: int = 0
    positive: int = 0
    fatal: bool = False
