"""Error handling — the imgdelivery exception hierarchy."""

from imgdelivery.errors.exceptions import (
    CacheIOError,
    ImageDeliveryError,
    InvalidInputError,
    ProviderError,
)

__all__ = [
    "ImageDeliveryError",
    "InvalidInputError",
    "ProviderError",
    "CacheIOError",
]
