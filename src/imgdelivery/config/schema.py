"""Pydantic model for the merged delivery configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from imgdelivery.cache.keys import PathResolver
from imgdelivery.cache.store import CacheStore
from imgdelivery.errors.exceptions import InvalidInputError
from imgdelivery.types import Location


class DeliveryConfig(BaseModel):
    cache_root: Path
    base_url: str
    filetypes: list[str] = Field(min_length=1)
    digest_length: int = Field(ge=1, le=64)
    log_level: str = "WARNING"

    @field_validator("filetypes", mode="before")
    @classmethod
    def split_filetypes(cls, value: Any) -> Any:
        # Environment variables arrive as "gif,jpg,png"
        if isinstance(value, str):
            return [part.strip().lstrip(".").lower() for part in value.split(",") if part.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    def location(self) -> Location:
        return Location(path=self.cache_root.expanduser(), url=self.base_url)


def build_store(config: dict[str, Any] | DeliveryConfig) -> CacheStore:
    """Validate a merged config mapping and construct a CacheStore from it."""
    if not isinstance(config, DeliveryConfig):
        known = {k: v for k, v in config.items() if k in DeliveryConfig.model_fields}
        try:
            config = DeliveryConfig(**known)
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid configuration: {exc}") from exc

    return CacheStore(
        config.location(),
        filetypes=config.filetypes,
        resolver=PathResolver(digest_length=config.digest_length),
    )
