"""cart-manager — lifecycle, context and persistence for named cart instances.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import cartmanager

    manager = cartmanager.CartManager({
        "defaults": {"storage": {"driver": "memory", "autosave": False}},
        "carts": {"main": {}, "saved_for_later": {}},
    })

    cart = manager.get_cart_instance()       # the "main" cart
    cart.items["sku-42"] = {"quantity": 1}
    manager.save_state("main")

    manager.context("saved_for_later")
    manager.get_cart_instance().cart_id      # "saved_for_later"

    cartmanager.__version__
    '0.1.0'
"""
from __future__ import annotations

from cartmanager.autosave import AutosaveScope
from cartmanager.cart import Cart, CartEntity
from cartmanager.config import ManagerConfig, load_config, merge_config
from cartmanager.errors import (
    CartManagerError,
    ConfigurationError,
    DuplicateCartInstanceError,
    InvalidCartInstanceError,
    InvalidStorageImplementationError,
    SnapshotError,
)
from cartmanager.manager import CartManager
from cartmanager.storage import StorageDriver, StorageRegistry, default_registry

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    "AutosaveScope",
    "Cart",
    "CartEntity",
    "CartManager",
    "CartManagerError",
    "ConfigurationError",
    "DuplicateCartInstanceError",
    "InvalidCartInstanceError",
    "InvalidStorageImplementationError",
    "ManagerConfig",
    "SnapshotError",
    "StorageDriver",
    "StorageRegistry",
    "default_registry",
    "load_config",
    "merge_config",
]
