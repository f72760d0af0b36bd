"""Disk image cache — content-addressed entries served straight from a web root.

Entries live at ``<root>/<first digest char>/<digest>.<extension>``. The
extension is not recorded anywhere else, so lookups probe each candidate
extension with a single stat until one matches.

There is no locking. Two processes missing on the same digest will both
produce the image and both write it; each write lands atomically via rename,
so the surviving file is always a complete copy of one of them.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from imgdelivery.cache.keys import DescriptionSource, PathResolver
from imgdelivery.cache.stats import CacheStats
from imgdelivery.errors.exceptions import CacheIOError, InvalidInputError
from imgdelivery.providers.base import Provider
from imgdelivery.types import DEFAULT_FILETYPES, Location

logger = logging.getLogger(__name__)

# mkstemp creates 0600 files; entries must be readable by the web server
_ENTRY_MODE = 0o644


class CacheStore:
    """Probe, fill, read and invalidate image cache entries under a Location."""

    def __init__(
        self,
        location: Location,
        filetypes: Sequence[str] = DEFAULT_FILETYPES,
        resolver: PathResolver | None = None,
    ) -> None:
        root = location.path
        if not root.is_dir():
            raise InvalidInputError(f"Cache root is not a directory: {root}", source=location)
        if not os.access(root, os.W_OK):
            raise InvalidInputError(f"Cache root is not writable: {root}", source=location)
        if not filetypes:
            raise InvalidInputError("At least one default filetype is required")

        self._location = location
        self._filetypes = tuple(_checked_extensions(filetypes))
        self._resolver = resolver or PathResolver()
        self._stats = CacheStats()

    @property
    def location(self) -> Location:
        return self._location

    @property
    def filetypes(self) -> tuple[str, ...]:
        return self._filetypes

    def stats(self) -> CacheStats:
        return self._stats.model_copy()

    def filename(self, source: DescriptionSource) -> str:
        """Return the cache-relative path for ``source``, without an extension.

        Override this to change the naming scheme.
        """
        return self._resolver.resolve(source)

    def exists(self, source: DescriptionSource) -> Location | None:
        """Return the Location of the cached image, or None if it is not cached.

        Candidates come from the provider when one is given, otherwise from the
        store's default filetypes. Probing stops at the first match.
        """
        stem = self.filename(source)
        for extension in self._candidates(source):
            relative = f"{stem}.{extension}"
            if self._exists(relative):
                self._stats.hits += 1
                logger.debug("Cache hit: %s", relative)
                return self._location.join(relative)

        self._stats.misses += 1
        logger.debug("Cache miss: %s", stem)
        return None

    def get(self, source: DescriptionSource) -> bytes | None:
        """Return the cached image data, or None if it is not cached."""
        location = self.exists(source)
        if location is None:
            return None
        try:
            return location.path.read_bytes()
        except OSError as exc:
            raise CacheIOError(
                f"Failed to read cache entry {location.path}: {exc}",
                path=location.path,
                original=exc,
            ) from exc

    def set(self, provider: Provider) -> Location:
        """Store the provider's image unless it is already cached.

        The provider's ``produce`` step only runs on a miss.
        """
        if not isinstance(provider, Provider):
            raise InvalidInputError(
                f"set() needs a Provider, got {type(provider).__name__}", source=provider
            )

        stem = self.filename(provider)
        existing = self.exists(provider)
        if existing is not None:
            return existing

        data, extension = provider.checked_produce()
        location = self._location.join(f"{stem}.{extension}")
        self._write(location.path, data)
        self._stats.stored += 1
        logger.info("Cached %s (%d bytes)", location.url, len(data))
        return location

    def clear(self, source: DescriptionSource) -> bool:
        """Delete the cached image. Returns True if it was removed or was never there."""
        location = self.exists(source)
        if location is None:
            return True

        try:
            location.path.unlink()
        except FileNotFoundError:
            logger.debug("Cache entry vanished before delete: %s", location.path)
            return True
        except OSError as exc:
            raise CacheIOError(
                f"Failed to delete cache entry {location.path}: {exc}",
                path=location.path,
                original=exc,
            ) from exc

        self._stats.cleared += 1
        logger.info("Cleared %s", location.url)
        return True

    def _candidates(self, source: DescriptionSource) -> list[str]:
        if isinstance(source, Provider):
            return _checked_extensions(source.candidate_formats())
        return list(self._filetypes)

    def _exists(self, relative: str) -> bool:
        return self._location.join(relative).path.is_file()

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        directory = path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheIOError(
                f"Failed to create cache directory {directory}: {exc}",
                path=directory,
                original=exc,
            ) from exc

        tmp_path: str | None = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_path, _ENTRY_MODE)
            os.replace(tmp_path, path)
        except OSError as exc:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
            raise CacheIOError(
                f"Failed to write cache entry {path}: {exc}",
                path=path,
                original=exc,
            ) from exc


def _checked_extensions(extensions: Sequence[str]) -> list[str]:
    """Reject extensions that would put an entry outside its fan-out directory."""
    for extension in extensions:
        if not extension or "/" in extension or "\\" in extension or extension.startswith("."):
            raise InvalidInputError(f"Invalid file extension: {extension!r}", source=extension)
    return list(extensions)
