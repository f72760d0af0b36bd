"""Provider contract — the producer side of the image cache."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from imgdelivery.errors.exceptions import ProviderError
from imgdelivery.types import DEFAULT_FILETYPES, TransformDescription

logger = logging.getLogger(__name__)


class Provider(ABC):
    """Wraps an image origin and produces the derived image on demand.

    Subclasses describe the image they would produce and the formats it may
    come out as. ``produce`` is only called by the cache on a true miss, so it
    is the place to do expensive work.
    """

    formats: tuple[str, ...] = DEFAULT_FILETYPES

    @abstractmethod
    def description(self) -> TransformDescription:
        """Return the transform description of the image this provider makes."""

    def candidate_formats(self) -> list[str]:
        """Possible output extensions, most likely first."""
        return list(self.formats)

    @abstractmethod
    def produce(self) -> tuple[bytes, str]:
        """Generate the image. Returns ``(data, extension)``."""

    def checked_produce(self) -> tuple[bytes, str]:
        """Run ``produce`` and validate its result.

        Any failure, including an exception raised by ``produce`` itself, is
        reported as a ProviderError.
        """
        try:
            data, extension = self.produce()
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(
                f"{type(self).__name__} failed to produce image: {exc}",
                original=exc,
            ) from exc

        if not data:
            raise ProviderError(f"{type(self).__name__} produced no image data", error_type="no_data")
        if not extension:
            raise ProviderError(f"{type(self).__name__} reported no format", error_type="no_format")
        candidates = self.candidate_formats()
        if extension not in candidates:
            raise ProviderError(
                f"Format '{extension}' is not one of the declared formats: {', '.join(candidates)}",
                error_type="undeclared_format",
            )
        logger.debug("%s produced %d bytes as %s", type(self).__name__, len(data), extension)
        return bytes(data), extension
