"""imgdelivery — content-addressed disk cache for derived web images."""

from imgdelivery.cache import CacheStore, PathResolver, as_description, transform_digest
from imgdelivery.errors import CacheIOError, ImageDeliveryError, InvalidInputError, ProviderError
from imgdelivery.providers import EncodedProvider, PillowProvider, Provider
from imgdelivery.types import DEFAULT_FILETYPES, Location, TransformDescription

__version__ = "0.14.0"

__all__ = [
    "CacheStore",
    "PathResolver",
    "Location",
    "TransformDescription",
    "Provider",
    "EncodedProvider",
    "PillowProvider",
    "ImageDeliveryError",
    "InvalidInputError",
    "ProviderError",
    "CacheIOError",
    "DEFAULT_FILETYPES",
    "as_description",
    "transform_digest",
]
