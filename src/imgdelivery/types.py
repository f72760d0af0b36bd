"""Shared Pydantic models for imgdelivery."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, field_validator

from imgdelivery.errors.exceptions import InvalidInputError

# ── Defaults ──

DEFAULT_FILETYPES: tuple[str, ...] = ("gif", "jpg", "png")


# ── Transform description ──


class TransformDescription(BaseModel):
    """A source identity plus the ordered transformations applied to it.

    Two descriptions that would produce byte-identical output are treated as
    the same cache slot, approximated by equality of their digests.
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(min_length=1)
    steps: tuple[str, ...] = ()

    @field_validator("steps")
    @classmethod
    def no_empty_steps(cls, steps: tuple[str, ...]) -> tuple[str, ...]:
        if any(not step for step in steps):
            raise ValueError("transformation steps must be non-empty strings")
        return steps

    def then(self, step: str) -> TransformDescription:
        """Return a new description with ``step`` appended."""
        return TransformDescription(source=self.source, steps=(*self.steps, step))


# ── Location ──


class Location(BaseModel):
    """Pairs a filesystem path with the public URL it is served from."""

    model_config = ConfigDict(frozen=True)

    path: Path
    url: str

    def join(self, relative: str) -> Location:
        """Resolve a forward-slash relative path against this location."""
        rel = PurePosixPath(relative)
        if rel.is_absolute() or ".." in rel.parts or not rel.parts:
            raise InvalidInputError(f"Relative path escapes location: {relative!r}", source=relative)
        return Location(
            path=self.path.joinpath(*rel.parts),
            url=f"{self.url.rstrip('/')}/{rel.as_posix()}",
        )
