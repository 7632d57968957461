"""Configuration tree for the cart manager.

The configuration is a plain mapping with two sections::

    {
        "defaults": {
            "storage": {"driver": "memory", "autosave": False},
        },
        "carts": {
            "main": {},
            "wishlist": {"storage": {"storage_key_prefix": "wl_"}},
        },
    }

``defaults`` is the base configuration applied to every cart; each entry
under ``carts`` declares a cart ID and a partial override that is merged
recursively over ``defaults``. Keys other than ``storage`` are carried
through untouched so that cart implementations can read their own
settings from the resolved configuration.
"""
from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cartmanager.errors import ConfigurationError

#: Storage sub-config used when a configuration tree declares no defaults.
DEFAULT_STORAGE_CONFIG: dict[str, Any] = {"driver": None, "autosave": False}

_STRING_STORAGE_KEYS = ("storage_key_prefix", "storage_key_suffix")


def default_cart_config() -> dict[str, Any]:
    """Return a fresh copy of the built-in cart configuration."""
    return {"storage": dict(DEFAULT_STORAGE_CONFIG)}


def merge_config(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` over ``base`` and return a new dict.

    Nested mappings are merged key by key, so an override that only sets
    ``storage.driver`` keeps every other ``storage`` key of ``base``. Any
    other value in ``override`` replaces the value in ``base``. Neither
    argument is modified.

    Parameters
    ----------
    base:
        The lower-priority configuration, usually ``defaults``.
    override:
        The higher-priority, possibly partial, configuration.

    Returns
    -------
    dict[str, Any]
        The merged configuration.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def storage_section(config: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the ``storage`` sub-config of a cart config, or an empty mapping."""
    storage = config.get("storage")
    if storage is None:
        return {}
    return storage


def _validate_storage(storage: Any, where: str) -> None:
    if not isinstance(storage, Mapping):
        raise ConfigurationError(f"{where}.storage must be a mapping, got {type(storage).__name__}")

    driver = storage.get("driver")
    if driver is not None and not isinstance(driver, str):
        raise ConfigurationError(f"{where}.storage.driver must be a string or null")

    autosave = storage.get("autosave", False)
    if not isinstance(autosave, bool):
        raise ConfigurationError(f"{where}.storage.autosave must be a boolean")

    for key in _STRING_STORAGE_KEYS:
        if key in storage and not isinstance(storage[key], str):
            raise ConfigurationError(f"{where}.storage.{key} must be a string")

    options = storage.get("options")
    if options is not None and not isinstance(options, Mapping):
        raise ConfigurationError(f"{where}.storage.options must be a mapping")


def _validate_cart_section(section: Any, where: str) -> None:
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"{where} must be a mapping, got {type(section).__name__}")
    if "storage" in section and section["storage"] is not None:
        _validate_storage(section["storage"], where)


def validate_cart_config(config: Any) -> None:
    """Check the shape of a single cart configuration.

    Raises
    ------
    ConfigurationError
        If ``config`` is not a mapping or its ``storage`` section is invalid.
    """
    _validate_cart_section(config, "cart")


def validate_config(config: Any) -> None:
    """Check the shape of a configuration tree.

    Parameters
    ----------
    config:
        The raw configuration, typically loaded from a file.

    Raises
    ------
    ConfigurationError
        If a section has the wrong type or a storage option has an
        invalid value.
    """
    if not isinstance(config, Mapping):
        raise ConfigurationError(
            f"configuration must be a mapping, got {type(config).__name__}"
        )

    defaults = config.get("defaults")
    if defaults is not None:
        _validate_cart_section(defaults, "defaults")

    carts = config.get("carts")
    if carts is None:
        return
    if not isinstance(carts, Mapping):
        raise ConfigurationError("carts must be a mapping of cart ID to overrides")
    for cart_id, override in carts.items():
        if not isinstance(cart_id, str) or not cart_id:
            raise ConfigurationError(f"cart IDs must be non-empty strings, got {cart_id!r}")
        if override is not None:
            _validate_cart_section(override, f"carts.{cart_id}")


@dataclass
class ManagerConfig:
    """Validated configuration held by a ``CartManager``.

    Parameters
    ----------
    defaults:
        Base cart configuration applied to every cart.
    carts:
        Declared cart IDs mapped to their configuration, in declaration
        order. After ``CartManager.initialize`` each value is the fully
        merged configuration of that cart.
    """

    defaults: dict[str, Any] = field(default_factory=default_cart_config)
    carts: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "ManagerConfig":
        """Validate ``config`` and build a ``ManagerConfig`` from a deep copy of it.

        A missing ``defaults`` section falls back to
        :func:`default_cart_config`; a cart declared with a null override
        (``main:`` in YAML) is treated as an empty override.
        """
        validate_config(config)
        defaults = config.get("defaults")
        carts = config.get("carts") or {}
        return cls(
            defaults=copy.deepcopy(dict(defaults)) if defaults is not None else default_cart_config(),
            carts={
                cart_id: copy.deepcopy(dict(override or {}))
                for cart_id, override in carts.items()
            },
        )

    def resolve(self, cart_id: str) -> dict[str, Any]:
        """Return the merged configuration of a declared cart."""
        return merge_config(self.defaults, self.carts[cart_id])

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration tree as plain nested dicts."""
        return {
            "defaults": copy.deepcopy(self.defaults),
            "carts": copy.deepcopy(self.carts),
        }
