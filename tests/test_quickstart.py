"""Test that the quickstart API works for cart-manager."""
from __future__ import annotations


def test_quickstart_imports() -> None:
    import cartmanager

    assert callable(cartmanager.CartManager)
    assert callable(cartmanager.load_config)


def test_quickstart_version(package_name: str, expected_version: str) -> None:
    import importlib

    module = importlib.import_module(package_name)
    assert module.__version__ == expected_version


def test_quickstart_empty_manager() -> None:
    from cartmanager import CartManager

    manager = CartManager()
    assert len(manager) == 0
    assert manager.context() == ""


def test_quickstart_save_and_switch() -> None:
    import cartmanager

    manager = cartmanager.CartManager(
        {
            "defaults": {"storage": {"driver": "memory", "autosave": False}},
            "carts": {"main": {}, "saved_for_later": {}},
        },
        storage_registry=cartmanager.storage.builtin_registry(),
    )
    cart = manager.get_cart_instance()
    cart.items["sku-42"] = {"quantity": 1}
    manager.save_state("main")

    assert manager.context("saved_for_later") == "saved_for_later"
    assert manager.get_cart_instance().cart_id == "saved_for_later"


def test_quickstart_repr() -> None:
    from cartmanager import CartManager

    assert "CartManager" in repr(CartManager())
