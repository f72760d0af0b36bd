"""Custom exception hierarchy for imgdelivery."""

from __future__ import annotations

from pathlib import Path


class ImageDeliveryError(Exception):
    """Base exception for all imgdelivery errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(ImageDeliveryError):
    """The source cannot be reduced to a transform description or digest.

    Examples: unsupported source type, malformed provider, bad digest length,
    a cache root that is not a writable directory.
    """

    def __init__(self, message: str = "", source: object | None = None) -> None:
        super().__init__(message)
        self.source = source


class ProviderError(ImageDeliveryError):
    """The provider failed to produce image bytes or a format during ``set``."""

    def __init__(
        self,
        message: str = "",
        error_type: str = "production_failed",
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.original = original


class CacheIOError(ImageDeliveryError, OSError):
    """Filesystem failure while reading, writing or deleting a cache entry."""

    def __init__(
        self,
        message: str = "",
        path: Path | None = None,
        original: OSError | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original
