"""Image providers — supply transform descriptions and produce images on a miss."""

from imgdelivery.providers.base import Provider
from imgdelivery.providers.encoded import EncodedProvider, detect_format
from imgdelivery.providers.pillow import PillowProvider

__all__ = [
    "Provider",
    "EncodedProvider",
    "PillowProvider",
    "detect_format",
]
