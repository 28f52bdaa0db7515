"""Custom exception hierarchy for picset."""

from __future__ import annotations

from typing import Any


class PicsetError(Exception):
    """Base exception for all picset errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(PicsetError):
    """Bad request; fail fast.

    Examples: missing input image, missing fallback breakpoint, threshold out
    of range, consolidated size lookup miss.
    """

    def __init__(self, message: str = "", field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class CodecError(PicsetError):
    """The image codec could not decode the input or describe its output."""

    def __init__(self, message: str = "", original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


class StorageError(PicsetError):
    """Blob storage read or write failed."""

    def __init__(
        self,
        message: str = "",
        path: str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original


class CacheError(PicsetError):
    """Persisted cache could not be loaded or saved.

    Never raised to request callers; reported through the store's hooks.
    """

    def __init__(
        self,
        message: str = "",
        blob: str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.blob = blob
        self.original = original


class CacheLoadError(CacheError):
    """Persisted cache unreadable or malformed; the store starts empty."""


class CacheSaveError(CacheError):
    """Persisted cache save failed; the in-memory copy stays authoritative."""
