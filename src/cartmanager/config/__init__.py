"""Configuration tree, merging and file loading for cart-manager."""
from __future__ import annotations

from cartmanager.config.loader import load_config, parse_config
from cartmanager.config.schema import (
    DEFAULT_STORAGE_CONFIG,
    ManagerConfig,
    default_cart_config,
    merge_config,
    storage_section,
    validate_cart_config,
    validate_config,
)

__all__ = [
    "DEFAULT_STORAGE_CONFIG",
    "ManagerConfig",
    "default_cart_config",
    "load_config",
    "merge_config",
    "parse_config",
    "storage_section",
    "validate_cart_config",
    "validate_config",
]
