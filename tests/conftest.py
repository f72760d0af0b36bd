import pytest

from imgdelivery.cache.keys import PathResolver
from imgdelivery.cache.store import CacheStore
from imgdelivery.providers.base import Provider
from imgdelivery.types import Location, TransformDescription


class CountingProvider(Provider):
    """Provider returning fixed bytes and counting how often it is asked to produce."""

    def __init__(
        self,
        description: TransformDescription,
        data: bytes = b"image-bytes",
        extension: str = "png",
        formats: tuple[str, ...] = ("gif", "jpg", "png"),
    ) -> None:
        self._description = description
        self._data = data
        self._extension = extension
        self.formats = formats
        self.produce_calls = 0

    def description(self) -> TransformDescription:
        return self._description

    def produce(self) -> tuple[bytes, str]:
        self.produce_calls += 1
        return self._data, self._extension


@pytest.fixture
def sample_image_bytes():
    """Minimal valid PNG for testing (1x1 white pixel)."""
    import base64
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR4"
        "nGP4z8BQDwAEgAF/pooBPQAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def description():
    return TransformDescription(source="user:42", steps=("resize:100x100",))


@pytest.fixture
def location(tmp_path):
    root = tmp_path / "cache"
    root.mkdir()
    return Location(path=root, url="http://example.com/cache")


@pytest.fixture
def store(location):
    return CacheStore(location)


@pytest.fixture
def fixed_digest_store(location):
    """Store whose digest function always answers cd3732afc4."""
    return CacheStore(location, resolver=PathResolver(digest=lambda d: "cd3732afc4"))


@pytest.fixture
def make_provider():
    """Factory for CountingProvider instances."""
    return CountingProvider
