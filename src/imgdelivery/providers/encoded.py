"""Provider for images that already exist as encoded bytes."""

from __future__ import annotations

import io
from collections.abc import Callable

from PIL import Image, UnidentifiedImageError

from imgdelivery.errors.exceptions import ProviderError
from imgdelivery.providers.base import Provider
from imgdelivery.types import TransformDescription

# Pillow format name -> cache extension
_FORMAT_EXTENSIONS = {
    "GIF": "gif",
    "JPEG": "jpg",
    "PNG": "png",
    "WEBP": "webp",
    "BMP": "bmp",
    "TIFF": "tif",
}


def detect_format(data: bytes) -> str:
    """Identify the extension of encoded image bytes by sniffing them with Pillow."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            pil_format = img.format
    except (UnidentifiedImageError, OSError) as exc:
        raise ProviderError(f"Unrecognised image data: {exc}", error_type="unknown_format") from exc

    extension = _FORMAT_EXTENSIONS.get(pil_format or "")
    if extension is None:
        raise ProviderError(f"Unsupported image format: {pil_format}", error_type="unknown_format")
    return extension


class EncodedProvider(Provider):
    """Serves bytes that are already encoded, e.g. an upload or a file on disk.

    ``data`` may be the bytes themselves or a zero-argument callable returning
    them, so reading the origin can be deferred until the cache misses.
    """

    def __init__(
        self,
        description: TransformDescription,
        data: bytes | Callable[[], bytes],
        extension: str | None = None,
        formats: list[str] | tuple[str, ...] | None = None,
    ) -> None:
        self._description = description
        self._data = data
        self._extension = extension
        if formats is not None:
            self.formats = tuple(formats)
        elif extension is not None and extension not in self.formats:
            self.formats = (extension, *self.formats)

    def description(self) -> TransformDescription:
        return self._description

    def produce(self) -> tuple[bytes, str]:
        data = self._data() if callable(self._data) else self._data
        extension = self._extension or detect_format(data)
        return data, extension
