"""Shared test fixtures for cart-manager.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

from typing import Any

import pytest

from cartmanager.manager import CartManager
from cartmanager.storage import StorageRegistry, builtin_registry


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "cartmanager"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def registry() -> StorageRegistry:
    """A registry with only the built-in drivers, isolated per test."""
    return builtin_registry()


@pytest.fixture()
def memory_config() -> dict[str, Any]:
    """Two declared carts persisted in memory, without autosave."""
    return {
        "defaults": {"storage": {"driver": "memory", "autosave": False}},
        "carts": {
            "main": {},
            "wishlist": {
                "storage": {"storage_key_prefix": "pre_", "storage_key_suffix": "_post"},
            },
        },
    }


@pytest.fixture()
def manager(memory_config: dict[str, Any], registry: StorageRegistry) -> CartManager:
    """A manager initialized with ``memory_config``."""
    return CartManager(memory_config, storage_registry=registry)
