from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class AppSettings(BaseSettings):
    """
    Environment-driven settings for review loading + sentiment inference.
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ---- Reviews ----
    reviews_url: str = Field(default="reviews_test.tsv", alias="REVIEWS_URL")

    # "strict": surface the error, keep the corpus empty
    # "lenient": substitute the built-in sample reviews and warn
    reviews_fallback_policy: str = Field(default="lenient", alias="REVIEWS_FALLBACK_POLICY")

    # Comma separated, first non-empty column per row wins
    reviews_text_columns: str = Field(default="text,Text,Review,review", alias="REVIEWS_TEXT_COLUMNS")

    # ---- Sentiment inference ----
    # Backend: "local" (transformers pipeline) | "remote" (HF inference API)
    sentiment_backend: str = Field(default="remote", alias="SENTIMENT_BACKEND")

    sentiment_local_model: str = Field(
        default="distilbert/distilbert-base-uncased-finetuned-sst-2-english",
        alias="SENTIMENT_LOCAL_MODEL",
    )

    # Device: "auto" | "cpu" | "cuda"
    sentiment_device: str = Field(default="auto", alias="SENTIMENT_DEVICE")

    sentiment_api_url: str = Field(
        default="https://api-inference.huggingface.co/models/siebert/sentiment-roberta-large-english",
        alias="SENTIMENT_API_URL",
    )
    hf_api_token: str = Field(default="", alias="HF_API_TOKEN")

    # Upper-case model labels before comparing with POSITIVE/NEGATIVE
    sentiment_case_insensitive_labels: bool = Field(default=False, alias="SENTIMENT_CASE_INSENSITIVE_LABELS")

    # ---- HTTP ----
    # Unset means requests waits indefinitely
    request_timeout_sec: Optional[float] = Field(default=None, alias="REQUEST_TIMEOUT_SEC")
    user_agent: str = Field(default="review-sentiment/0.1", alias="HTTP_USER_AGENT")

    # ---- Result logging ----
    # Spreadsheet web app URL; empty disables logging
    log_endpoint: str = Field(default="", alias="LOG_ENDPOINT")

    # ---- Runner ----
    run_analyze_count: int = Field(default=3, alias="RUN_ANALYZE_COUNT")

    @property
    def text_columns(self) -> tuple[str, ...]:
        return tuple(c.strip() for c in self.reviews_text_columns.split(",") if c.strip())


def load_settings() -> AppSettings:
    return AppSettings()
