from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


SentimentBucket = Literal["positive", "negative", "neutral"]

POSITIVE_LABEL = "POSITIVE"
NEGATIVE_LABEL = "NEGATIVE"
CONFIDENCE_THRESHOLD = 0.5


@dataclass(frozen=True)
class ClassificationResult:
    """
    Standardized backend output.

    - label: raw model label (POSITIVE / NEGATIVE / anything else)
    - score: model confidence for that label, in [0, 1]
    """

    label: str
    score: float


@dataclass(frozen=True)
class PresentedSentiment:
    """Display-ready view of a ClassificationResult."""

    bucket: SentimentBucket
    icon: str
    display_label: str
    confidence: str  # e.g. "87.0%"


@dataclass
class RunningStats:
    """
    Counters for one load session.

    Invariant: 0 <= positive <= analyzed. Both only grow until reset().
    """

    analyzed: int = 0
    positive: int = 0

    def record(self, bucket: SentimentBucket) -> None:
        self.analyzed += 1
        if bucket == "positive":
            self.positive += 1

    def reset(self) -> None:
        self.analyzed = 0
        self.positive = 0
