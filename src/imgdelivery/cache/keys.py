"""Cache key generation — transform-path digests and on-disk path stems."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from imgdelivery.errors.exceptions import InvalidInputError
from imgdelivery.providers.base import Provider
from imgdelivery.types import TransformDescription

DEFAULT_DIGEST_LENGTH = 10
_MAX_DIGEST_LENGTH = 64  # SHA256 hex digest

DescriptionSource = TransformDescription | Provider | Mapping[str, Any]
DigestFunction = Callable[[TransformDescription], str]


def transform_digest(
    description: TransformDescription,
    length: int = DEFAULT_DIGEST_LENGTH,
) -> str:
    """Digest a transform description into a fixed-length hex string.

    Only the source identity and the ordered steps are hashed, never the image
    data, so the digest can be computed without touching the source.
    """
    if not 1 <= length <= _MAX_DIGEST_LENGTH:
        raise InvalidInputError(
            f"Digest length must be between 1 and {_MAX_DIGEST_LENGTH}, got {length}"
        )
    serialized = json.dumps([description.source, list(description.steps)], separators=(",", ":"))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:length]


def as_description(source: object) -> TransformDescription:
    """Coerce a description, provider, or mapping into a TransformDescription."""
    if isinstance(source, TransformDescription):
        return source

    if isinstance(source, Provider):
        try:
            description = source.description()
        except Exception as exc:
            raise InvalidInputError(
                f"Provider cannot describe its image: {exc}", source=source
            ) from exc
        if not isinstance(description, TransformDescription):
            raise InvalidInputError(
                f"Provider returned {type(description).__name__}, expected TransformDescription",
                source=source,
            )
        return description

    if isinstance(source, Mapping):
        try:
            return TransformDescription.model_validate(dict(source))
        except ValidationError as exc:
            raise InvalidInputError(f"Malformed transform description: {exc}", source=source) from exc

    raise InvalidInputError(
        f"Cannot derive a transform description from {type(source).__name__}", source=source
    )


class PathResolver:
    """Maps transform descriptions to cache-relative path stems.

    The stem is the first digest character as a fan-out directory followed by
    the full digest, e.g. ``c/cd3732afc4``. It carries no file extension.
    """

    def __init__(
        self,
        digest: DigestFunction | None = None,
        digest_length: int = DEFAULT_DIGEST_LENGTH,
    ) -> None:
        if digest is None:
            if not 1 <= digest_length <= _MAX_DIGEST_LENGTH:
                raise InvalidInputError(
                    f"Digest length must be between 1 and {_MAX_DIGEST_LENGTH}, "
                    f"got {digest_length}"
                )
            digest = _truncated_sha256(digest_length)
        self._digest = digest

    def digest(self, source: DescriptionSource) -> str:
        value = self._digest(as_description(source))
        if not value or "/" in value or value.startswith("."):
            raise InvalidInputError(f"Digest function returned unusable value {value!r}")
        return value

    def resolve(self, source: DescriptionSource) -> str:
        """Return the extension-less stem for ``source``."""
        value = self.digest(source)
        return f"{value[0]}/{value}"


def _truncated_sha256(length: int) -> DigestFunction:
    def _digest(description: TransformDescription) -> str:
        return transform_digest(description, length)

    return _digest
