"""Integration tests: carts persisted with the file driver survive a new
manager, as they would across two requests or two processes.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from cartmanager import CartManager, load_config
from cartmanager.storage import builtin_registry


@pytest.fixture()
def config(tmp_path: Path) -> dict[str, Any]:
    path = tmp_path / "carts.yaml"
    path.write_text(
        "defaults:\n"
        "  storage:\n"
        "    driver: FILE\n"
        "    autosave: true\n"
        "    storage_key_suffix: .v1\n"
        "    options:\n"
        f"      directory: {tmp_path / 'store'}\n"
        "carts:\n"
        "  main:\n"
        "  wishlist:\n",
        encoding="utf-8",
    )
    return load_config(path)


def _new_manager(config: dict[str, Any]) -> CartManager:
    return CartManager(config, storage_registry=builtin_registry())


class TestFilePersistence:
    def test_autosaved_cart_restored_by_next_manager(self, config: dict[str, Any]) -> None:
        with _new_manager(config) as first:
            first.get_cart_instance("main").items["sku-1"] = {"quantity": 2}

        second = _new_manager(config)
        assert second.get_cart_instance("main").items == {"sku-1": {"quantity": 2}}
        assert second.get_cart_instance("wishlist").items == {}

    def test_files_use_storage_key(self, config: dict[str, Any], tmp_path: Path) -> None:
        with _new_manager(config):
            pass
        assert sorted(p.name for p in (tmp_path / "store").iterdir()) == ["main.v1.json", "wishlist.v1.json"]

    def test_destroy_all_clears_files(self, config: dict[str, Any], tmp_path: Path) -> None:
        with _new_manager(config):
            pass
        manager = _new_manager(config)
        manager.destroy_all_instances()
        manager.close()
        assert list((tmp_path / "store").iterdir()) == []

    def test_request_scopes(self, config: dict[str, Any]) -> None:
        manager = CartManager(storage_registry=builtin_registry())
        for quantity in (1, 2, 3):
            with manager.autosave_scope():
                manager.initialize(config)
                cart = manager.get_cart_instance()
                line = cart.items.setdefault("sku-1", {"quantity": 0})
                line["quantity"] += quantity

        fresh = _new_manager(config)
        assert fresh.get_cart_instance().items == {"sku-1": {"quantity": 6}}
