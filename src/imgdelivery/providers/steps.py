"""Named transformation steps — applied in order by PillowProvider.

A step is written ``name`` or ``name:argument`` (e.g. ``resize:100x100``,
``rotate:90``), which is also the form recorded in a TransformDescription.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np
from PIL import Image, ImageEnhance, ImageFilter, ImageOps

from imgdelivery.errors.exceptions import ProviderError

logger = logging.getLogger(__name__)

StepFunction = Callable[[Image.Image, str], Image.Image]

# Registry of transformation steps
_STEP_REGISTRY: dict[str, StepFunction] = {}


def _register(name: str) -> Callable[[StepFunction], StepFunction]:
    """Decorator to register a transformation step."""
    def decorator(fn: StepFunction) -> StepFunction:
        _STEP_REGISTRY[name] = fn
        return fn
    return decorator


def _parse_size(arg: str) -> tuple[int, int]:
    width, sep, height = arg.lower().partition("x")
    if not sep:
        raise ValueError(f"expected WIDTHxHEIGHT, got {arg!r}")
    size = (int(width), int(height))
    if min(size) <= 0:
        raise ValueError(f"dimensions must be positive, got {arg!r}")
    return size


# ── Individual steps ──


@_register("resize")
def resize(img: Image.Image, arg: str) -> Image.Image:
    """Resize to exactly WIDTHxHEIGHT."""
    return img.resize(_parse_size(arg), Image.LANCZOS)


@_register("thumbnail")
def thumbnail(img: Image.Image, arg: str) -> Image.Image:
    """Shrink to fit within WIDTHxHEIGHT, keeping the aspect ratio."""
    copy = img.copy()
    copy.thumbnail(_parse_size(arg), Image.LANCZOS)
    return copy


@_register("rotate")
def rotate(img: Image.Image, arg: str) -> Image.Image:
    """Rotate counter-clockwise by the given number of degrees."""
    return img.rotate(float(arg or 0), expand=True)


@_register("grayscale")
def grayscale(img: Image.Image, arg: str) -> Image.Image:
    return ImageOps.grayscale(img)


@_register("flip")
def flip(img: Image.Image, arg: str) -> Image.Image:
    return ImageOps.flip(img)


@_register("mirror")
def mirror(img: Image.Image, arg: str) -> Image.Image:
    return ImageOps.mirror(img)


@_register("sharpen")
def sharpen(img: Image.Image, arg: str) -> Image.Image:
    return img.filter(ImageFilter.SHARPEN)


@_register("contrast")
def contrast(img: Image.Image, arg: str) -> Image.Image:
    """Enhance contrast by a factor (default 1.5)."""
    return ImageEnhance.Contrast(img).enhance(float(arg or 1.5))


@_register("crop_margins")
def crop_margins(img: Image.Image, arg: str) -> Image.Image:
    """Crop near-white margins, leaving ``arg`` pixels of padding (default 10)."""
    padding = int(arg or 10)
    arr = np.array(img.convert("L"))

    mask = arr < 250
    if not mask.any():
        return img  # All white, nothing to crop

    rows = np.any(mask, axis=1)
    cols = np.any(mask, axis=0)
    rmin, rmax = np.where(rows)[0][[0, -1]]
    cmin, cmax = np.where(cols)[0][[0, -1]]

    h, w = arr.shape
    rmin = max(0, rmin - padding)
    rmax = min(h - 1, rmax + padding)
    cmin = max(0, cmin - padding)
    cmax = min(w - 1, cmax + padding)

    return img.crop((int(cmin), int(rmin), int(cmax) + 1, int(rmax) + 1))


# ── Orchestrator ──


def available_steps() -> list[str]:
    return sorted(_STEP_REGISTRY)


def apply_steps(img: Image.Image, steps: tuple[str, ...] | list[str]) -> Image.Image:
    """Apply each step in order. Unknown or malformed steps raise ProviderError."""
    for step in steps:
        name, _, arg = step.partition(":")
        fn = _STEP_REGISTRY.get(name)
        if fn is None:
            raise ProviderError(f"Unknown transformation step: {name!r}", error_type="unknown_step")
        try:
            img = fn(img, arg)
        except ValueError as exc:
            raise ProviderError(
                f"Invalid argument for step {step!r}: {exc}",
                error_type="bad_step",
                original=exc,
            ) from exc
        logger.debug("Applied step %s -> %dx%d", step, *img.size)
    return img
