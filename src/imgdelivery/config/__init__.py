"""Configuration — defaults, YAML files and environment, merged in priority order."""

from imgdelivery.config.hierarchy import load_config_hierarchy
from imgdelivery.config.schema import DeliveryConfig, build_store

__all__ = [
    "DeliveryConfig",
    "build_store",
    "load_config_hierarchy",
]
