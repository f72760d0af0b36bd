"""Layered configuration for the cache store.

Sources, lowest priority first: package defaults, the user file
``~/.imgdelivery/config.yaml``, the nearest ``imgdelivery.yaml`` at or above
the working directory, ``IMGDELIVERY_*`` environment variables, then keyword
arguments passed by the caller.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from imgdelivery.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".imgdelivery" / "config.yaml"
_PROJECT_CONFIG_NAME = "imgdelivery.yaml"

_ENV_PREFIX = "IMGDELIVERY_"
_ENV_MAP: dict[str, str] = {
    f"{_ENV_PREFIX}{key.upper()}": key
    for key in ("cache_root", "base_url", "filetypes", "digest_length", "log_level")
}
_INT_KEYS = frozenset({"digest_length"})


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Return the merged settings; ``None`` overrides leave lower layers alone."""
    config = get_defaults()
    for path in _config_files():
        config.update(_load_yaml_config(path) or {})
    config.update(_load_env_vars())
    config.update({k: v for k, v in runtime_overrides.items() if v is not None})
    return config


def _config_files() -> Iterator[Path]:
    yield _GLOBAL_CONFIG_PATH
    project = _find_project_config()
    if project is not None:
        yield project


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Skipping unreadable config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Skipping config %s: top level is not a mapping", path)
        return None
    return data


def _find_project_config() -> Path | None:
    cwd = Path.cwd()
    return next(
        (d / _PROJECT_CONFIG_NAME for d in (cwd, *cwd.parents) if (d / _PROJECT_CONFIG_NAME).is_file()),
        None,
    )


def _load_env_vars() -> dict[str, Any]:
    return {
        key: _coerce_env_value(key, os.environ[env_key])
        for env_key, key in _ENV_MAP.items()
        if env_key in os.environ
    }


def _coerce_env_value(key: str, value: str) -> Any:
    """Convert numeric settings; anything unparseable is left for validation to reject."""
    if key not in _INT_KEYS:
        return value
    try:
        return int(value)
    except ValueError:
        logger.warning("%s%s is not an integer: %r", _ENV_PREFIX, key.upper(), value)
        return value
