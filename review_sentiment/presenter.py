from __future__ import annotations

from review_sentiment.sentiment_types import (
    CONFIDENCE_THRESHOLD,
    NEGATIVE_LABEL,
    POSITIVE_LABEL,
    ClassificationResult,
    PresentedSentiment,
    SentimentBucket,
)

_ICONS: dict[SentimentBucket, str] = {
    "positive": "fa-thumbs-up",
    "negative": "fa-thumbs-down",
    "neutral": "fa-question-circle",
}

_DISPLAY_LABELS: dict[SentimentBucket, str] = {
    "positive": "Positive",
    "negative": "Negative",
    "neutral": "Neutral",
}


def bucket_for(result: ClassificationResult, case_insensitive: bool = False) -> SentimentBucket:
    """
    Rules:
    - POSITIVE with score > 0.5 -> positive
    - NEGATIVE with score > 0.5 -> negative
    - anything else (low score, other labels) -> neutral
    """
    label = result.label.upper() if case_insensitive else result.label
    if result.score > CONFIDENCE_THRESHOLD:
        if label == POSITIVE_LABEL:
            return "positive"
        if label == NEGATIVE_LABEL:
            return "negative"
    return "neutral"


def format_confidence(score: float) -> str:
    return f"{score * 100:.1f}%"


def present(result: ClassificationResult, case_insensitive: bool = False) -> PresentedSentiment:
    bucket = bucket_for(result, case_insensitive=case_insensitive)
    return PresentedSentiment(
        bucket=bucket,
        icon=_ICONS[bucket],
        display_label=_DISPLAY_LABELS[bucket],
        confidence=format_confidence(result.score),
    )
