from __future__ import annotations


class ReviewAppError(Exception):
    """Base class for errors surfaced to the user as a message."""


class ResourceLoadError(ReviewAppError):
    """Review file could not be fetched (network, HTTP status, missing file)."""


class ParseError(ReviewAppError):
    """Delimited content is malformed or lacks the review text column."""


class EmptyCorpusError(ReviewAppError):
    """No usable review text is available."""


class ModelInitError(ReviewAppError):
    """Backend failed to become ready. Terminal for the session."""


class ClassificationError(ReviewAppError):
    """A single classify call failed. The user may try again."""


class InvalidTokenError(ClassificationError):
    pass


class RateLimitedError(ClassificationError):
    pass


class ModelLoadingError(ClassificationError):
    pass


class UnexpectedResponseError(ClassificationError):
    pass


class LoggingError(ReviewAppError):
    """Result logging failed. Never shown to the user."""
