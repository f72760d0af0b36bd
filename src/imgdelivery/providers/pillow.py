"""Provider that derives images with Pillow by replaying transformation steps."""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from pathlib import Path

from PIL import Image

from imgdelivery.providers.base import Provider
from imgdelivery.providers.steps import apply_steps
from imgdelivery.types import TransformDescription

logger = logging.getLogger(__name__)

# Cache extension -> Pillow save format
_SAVE_FORMATS = {
    "gif": "GIF",
    "jpg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
}


class PillowProvider(Provider):
    """Loads an origin image and applies the description's steps on demand.

    The loader is only called from ``produce``, so a cache hit never opens the
    origin image. The first candidate format that Pillow can write is used.
    """

    def __init__(
        self,
        description: TransformDescription,
        loader: Callable[[], Image.Image],
        formats: list[str] | tuple[str, ...] = ("png", "jpg", "gif"),
        save_options: dict[str, dict[str, object]] | None = None,
    ) -> None:
        self._description = description
        self._loader = loader
        self.formats = tuple(formats)
        self._save_options = save_options or {}

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        steps: tuple[str, ...] | list[str] = (),
        **kwargs: object,
    ) -> PillowProvider:
        """Build a provider whose source identity is the file's resolved path."""
        path = Path(path)
        description = TransformDescription(source=f"file:{path.resolve()}", steps=tuple(steps))

        def _load() -> Image.Image:
            with Image.open(path) as img:
                img.load()
                return img

        return cls(description, _load, **kwargs)  # type: ignore[arg-type]

    def description(self) -> TransformDescription:
        return self._description

    def produce(self) -> tuple[bytes, str]:
        extension = next((f for f in self.formats if f in _SAVE_FORMATS), None)
        if extension is None:
            raise ValueError(f"No writable format among: {', '.join(self.formats)}")

        img = apply_steps(self._loader(), self._description.steps)
        pil_format = _SAVE_FORMATS[extension]
        if pil_format == "JPEG" and img.mode not in ("RGB", "L"):
            img = img.convert("RGB")

        buf = io.BytesIO()
        img.save(buf, format=pil_format, **self._save_options.get(extension, {}))
        logger.debug("Encoded %s as %s (%dx%d)", self._description.source, extension, *img.size)
        return buf.getvalue(), extension
