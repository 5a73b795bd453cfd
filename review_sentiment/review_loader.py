from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Literal, Sequence
from urllib.parse import urlparse

import pandas as pd
import requests

from review_sentiment.errors import EmptyCorpusError, ParseError, ResourceLoadError
from review_sentiment.http_client import HttpClient
from review_sentiment.models import LoadedReviews

logger = logging.getLogger(__name__)

FallbackPolicy = Literal["strict", "lenient"]

DEFAULT_TEXT_COLUMNS = ("text", "Text", "Review", "review")

FALLBACK_REVIEWS: tuple[str, ...] = (
    "This product is absolutely amazing! It exceeded all my expectations and works perfectly.",
    "Very disappointed with the quality. The item broke after just two days of use.",
    "It's okay for the price. Nothing special but gets the job done.",
    "The best purchase I've made this year! Highly recommended to everyone.",
    "Terrible customer service and the product doesn't match the description at all.",
    "Works as advertised. Good value for money, would buy again.",
    "I was expecting more based on the reviews. The performance is average at best.",
    "Excellent quality and fast delivery. Very satisfied with my purchase!",
    "Not worth the money. There are much better options available.",
    "Perfect for my needs. Easy to use and very reliable.",
)

EMPTY_FALLBACK_WARNING = "No valid reviews found in TSV file. Using sample data instead."


def parse_reviews(
        tsv_text: str,
        text_columns: Sequence[str] = DEFAULT_TEXT_COLUMNS,
        skip_bad_lines: bool = False,
) -> tuple[str, ...]:
    """
    Parse TSV content (header row required) into review texts.

    Rules:
    - the first column of `text_columns` present in the header is used; when
      several are present, each row takes its first non-empty value
    - values are stripped, empty ones dropped, file order kept
    - with skip_bad_lines, rows with more fields than the header are dropped
      instead of failing the whole file

    Raises:
        ParseError: malformed TSV or no review text column
    """
    try:
        df = pd.read_csv(
            io.StringIO(tsv_text),
            sep="\t",
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="skip" if skip_bad_lines else "error",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ParseError(f"Error parsing TSV file: {e}") from e

    present = [c for c in text_columns if c in df.columns]
    if not present:
        raise ParseError(f'TSV file must contain a "{text_columns[0]}" column')

    reviews: list[str] = []
    for row in df[present].itertuples(index=False, name=None):
        text = next((v.strip() for v in row if isinstance(v, str) and v.strip()), "")
        if text:
            reviews.append(text)
    return tuple(reviews)


class ReviewLoader:
    """
    Fetch + parse a review TSV from an http(s) URL or a local path.

    Fallback policy applies to every failure branch (fetch, parse, empty):
    - strict: re-raise, the caller shows the error and keeps no corpus
    - lenient: return FALLBACK_REVIEWS with a warning
    """

    def __init__(
            self,
            http: HttpClient,
            text_columns: Sequence[str] = DEFAULT_TEXT_COLUMNS,
            fallback_policy: FallbackPolicy = "lenient",
    ):
        if fallback_policy not in ("strict", "lenient"):
            raise ValueError(f"Unknown fallback policy: {fallback_policy}")
        if not text_columns:
            raise ValueError("text_columns must not be empty")
        self.http = http
        self.text_columns = tuple(text_columns)
        self.fallback_policy = fallback_policy

    def load(self, locator: str) -> LoadedReviews:
        """
        Raises (strict policy only):
            ResourceLoadError / ParseError / EmptyCorpusError
        """
        try:
            raw = self._fetch(locator)
            reviews = parse_reviews(
                raw,
                self.text_columns,
                skip_bad_lines=self.fallback_policy == "lenient",
            )
            if not reviews:
                raise EmptyCorpusError("No valid review texts found in TSV file")
        except (ResourceLoadError, ParseError, EmptyCorpusError) as e:
            if self.fallback_policy == "strict":
                logger.error("Review load failed: source=%s err=%s", locator, e)
                raise
            logger.warning("Review load failed, using sample data: source=%s err=%s", locator, e)
            if isinstance(e, EmptyCorpusError):
                warning = EMPTY_FALLBACK_WARNING
            else:
                warning = f"Failed to load TSV file: {e}. Using sample review data instead."
            return LoadedReviews(
                reviews=FALLBACK_REVIEWS,
                source="fallback",
                used_fallback=True,
                warning=warning,
            )

        logger.info("Loaded reviews: source=%s count=%s", locator, len(reviews))
        return LoadedReviews(reviews=reviews, source=locator)

    def _fetch(self, locator: str) -> str:
        if urlparse(locator).scheme in ("http", "https"):
            try:
                return self.http.get_text(locator)
            except requests.HTTPError as e:
                status = e.response.status_code if e.response is not None else "?"
                raise ResourceLoadError(f"Failed to load file (Status: {status})") from e
            except requests.RequestException as e:
                raise ResourceLoadError(f"Failed to load file: {e}") from e

        try:
            return Path(locator).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"File is not valid UTF-8 text: {locator}") from e
        except OSError as e:
            raise ResourceLoadError(f"Failed to load file: {e}") from e
