#!/usr/bin/env python3
"""Example: Quickstart — cart-manager

Minimal working example: declare two carts, fill one, save it, switch
context, and restore the saved cart into a brand-new manager.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install cart-manager
"""
from __future__ import annotations

import cartmanager

CONFIG = {
    "defaults": {"storage": {"driver": "memory", "autosave": False}},
    "carts": {
        "main": {},
        "saved_for_later": {"storage": {"storage_key_prefix": "later_"}},
    },
}


def main() -> None:
    print(f"cart-manager version: {cartmanager.__version__}")

    # Step 1: Create the declared carts; context is the first one
    manager = cartmanager.CartManager(CONFIG)
    print(f"Carts: {manager.cart_ids()}, context={manager.context()!r}")

    # Step 2: Fill the current cart and persist it
    cart = manager.get_cart_instance()
    cart.items["sku-42"] = {"quantity": 2}
    manager.save_state()
    print(f"Saved {cart!r} under key {manager.get_storage_key('main')!r}")

    # Step 3: Switch context
    manager.context("saved_for_later")
    print(f"Context is now {manager.context()!r}, "
          f"key={manager.get_storage_key('saved_for_later')!r}")

    # Step 4: Destroy without clearing storage, then recreate
    manager.destroy_instance("main", clear_storage=False)
    restored = manager.new_cart_instance("main")
    print(f"Restored items: {restored.items}")


if __name__ == "__main__":
    main()
