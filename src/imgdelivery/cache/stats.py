"""Cache statistics models."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field


class CacheStats(BaseModel):
    """Operation counters for a single CacheStore instance."""

    hits: int = 0
    misses: int = 0
    stored: int = 0
    cleared: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class CacheUsage(BaseModel):
    """Snapshot of what is on disk under a cache root."""

    entries: int = 0
    size_bytes: int = 0
    formats: dict[str, int] = Field(default_factory=dict)

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)


def scan_usage(root: Path) -> CacheUsage:
    """Walk the fan-out directories under ``root`` and tally cache entries.

    Cost is proportional to the cache size; the cache operations never call it.
    Temporary files left by interrupted writes are not counted.
    """
    usage = CacheUsage()
    for bucket in sorted(root.iterdir()):
        if not bucket.is_dir():
            continue
        with os.scandir(bucket) as it:
            for entry in it:
                if not entry.is_file() or entry.name.startswith("."):
                    continue
                _, _, extension = entry.name.rpartition(".")
                usage.entries += 1
                usage.size_bytes += entry.stat().st_size
                usage.formats[extension] = usage.formats.get(extension, 0) + 1
    return usage
