"""Cache subsystem — content-addressed image files under a public web root."""

from imgdelivery.cache.keys import PathResolver, as_description, transform_digest
from imgdelivery.cache.stats import CacheStats, CacheUsage, scan_usage
from imgdelivery.cache.store import CacheStore

__all__ = [
    "CacheStore",
    "CacheStats",
    "CacheUsage",
    "PathResolver",
    "as_description",
    "scan_usage",
    "transform_digest",
]
