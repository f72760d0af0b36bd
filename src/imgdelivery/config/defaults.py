"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

from imgdelivery.cache.keys import DEFAULT_DIGEST_LENGTH
from imgdelivery.types import DEFAULT_FILETYPES

# Default cache location
DEFAULT_CACHE_ROOT = "cache"
DEFAULT_BASE_URL = "/cache"

# Default naming
DEFAULT_FILETYPE_LIST = list(DEFAULT_FILETYPES)

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_root": DEFAULT_CACHE_ROOT,
        "base_url": DEFAULT_BASE_URL,
        "filetypes": list(DEFAULT_FILETYPE_LIST),
        "digest_length": DEFAULT_DIGEST_LENGTH,
        "log_level": DEFAULT_LOG_LEVEL,
    }
