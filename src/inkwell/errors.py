"""Typed errors raised by the content pipeline.

Every error carries an ``ErrorCode`` and a ``recoverable`` flag so that the
request layer can decide how to answer without inspecting messages.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"
    PAGE_FETCH_FAILED = "PAGE_FETCH_FAILED"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    LOCAL_READ_FAILED = "LOCAL_READ_FAILED"
    FRONT_MATTER_INVALID = "FRONT_MATTER_INVALID"
    PRELOAD_FAILED = "PRELOAD_FAILED"
    ARTICLE_NOT_FOUND = "ARTICLE_NOT_FOUND"
    REPO_NOT_FOUND = "REPO_NOT_FOUND"


class InkwellError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, code: ErrorCode, message: str, *, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, object]:
        return {
            "error": {
                "code": str(self.code),
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }


class FetchError(InkwellError):
    """Upstream content could not be retrieved (network, status, or local file)."""


class FrontMatterError(InkwellError):
    """A blog source is missing a required front-matter field or has a bad value."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(ErrorCode.FRONT_MATTER_INVALID, message)
        self.key = key


class PreloadError(InkwellError):
    """The article index could not be built at startup."""

    def __init__(self, slug: str, message: str) -> None:
        super().__init__(ErrorCode.PRELOAD_FAILED, message)
        self.slug = slug


class NotFoundError(InkwellError):
    """The requested page, article, or document does not exist or could not be fetched."""
