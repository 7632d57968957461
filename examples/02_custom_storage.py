#!/usr/bin/env python3
"""Example: Custom storage driver and cart class — cart-manager

Registers a storage driver that keeps snapshots in a shared dict, plugs
in a cart subclass with a tiny bit of domain logic, and runs one
"request" inside an autosave scope.

Usage:
    python examples/02_custom_storage.py

Requirements:
    pip install cart-manager
"""
from __future__ import annotations

from typing import Any

from cartmanager import Cart, CartManager, StorageDriver, default_registry

SESSION: dict[str, str] = {}


@default_registry.register("session")
class SessionStorage(StorageDriver):
    """Stand-in for a per-user session store."""

    def save(self, key: str, data: str) -> None:
        SESSION[key] = data

    def restore(self, key: str) -> str | None:
        return SESSION.get(key)

    def clear(self, key: str) -> None:
        SESSION.pop(key, None)


class ShopCart(Cart):
    def add(self, sku: str, quantity: int = 1) -> None:
        line = self.items.setdefault(sku, {"quantity": 0})
        line["quantity"] += quantity

    def count(self) -> int:
        return sum(line["quantity"] for line in self.items.values())


CONFIG: dict[str, Any] = {
    "defaults": {
        "storage": {"driver": "Session", "autosave": True, "storage_key_prefix": "cart_"},
    },
    "carts": {"main": {}},
}


def handle_request(manager: CartManager, sku: str) -> None:
    with manager.autosave_scope():
        manager.initialize(CONFIG)
        cart = manager.get_cart_instance()
        cart.add(sku)
        print(f"  cart now holds {cart.count()} item(s)")


def main() -> None:
    manager = CartManager(cart_factory=ShopCart)
    for sku in ("sku-1", "sku-2", "sku-1"):
        print(f"Request adding {sku}:")
        handle_request(manager, sku)
    print(f"Session keys: {sorted(SESSION)}")


if __name__ == "__main__":
    main()
