"""Unit tests for cartmanager.cli.main."""
from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from cartmanager.cli.main import cli
from cartmanager.snapshot import encode_snapshot
from cartmanager.storage import FileStorage


def _make_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "carts.yaml"
    path.write_text(
        "defaults:\n"
        "  storage:\n"
        "    driver: file\n"
        "    autosave: false\n"
        "    options:\n"
        f"      directory: {tmp_path / 'store'}\n"
        "carts:\n"
        "  main:\n"
        "  wishlist:\n"
        "    storage:\n"
        "      storage_key_prefix: pre_\n"
        "      storage_key_suffix: _post\n",
        encoding="utf-8",
    )
    return path


class TestVersionCommand:
    def test_shows_version(self) -> None:
        result = _make_runner().invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "cart-manager" in result.output
        assert "0.1.0" in result.output


class TestDriversCommand:
    def test_lists_builtin_drivers(self) -> None:
        result = _make_runner().invoke(cli, ["drivers"])
        assert result.exit_code == 0
        assert "memory" in result.output
        assert "file" in result.output


class TestConfigCommand:
    def test_whole_tree(self, config_file: Path) -> None:
        result = _make_runner().invoke(cli, ["config", str(config_file)])
        assert result.exit_code == 0
        assert "wishlist" in result.output
        assert "pre_" in result.output

    def test_single_cart_yaml(self, config_file: Path) -> None:
        result = _make_runner().invoke(cli, ["config", str(config_file), "wishlist", "--format", "yaml"])
        assert result.exit_code == 0
        assert "storage_key_suffix: _post" in result.output

    def test_unknown_cart_shows_defaults(self, config_file: Path) -> None:
        result = _make_runner().invoke(cli, ["config", str(config_file), "guest", "--format", "yaml"])
        assert result.exit_code == 0
        assert "storage_key_prefix" not in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        result = _make_runner().invoke(cli, ["config", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1


class TestKeyCommand:
    def test_prefix_and_suffix(self, config_file: Path) -> None:
        result = _make_runner().invoke(cli, ["key", str(config_file), "wishlist"])
        assert result.exit_code == 0
        assert result.output.strip() == "pre_wishlist_post"

    def test_plain_key(self, config_file: Path) -> None:
        result = _make_runner().invoke(cli, ["key", str(config_file), "main"])
        assert result.output.strip() == "main"


class TestShowCommand:
    def test_shows_restored_state(self, config_file: Path, tmp_path: Path) -> None:
        FileStorage(tmp_path / "store").save("main", encode_snapshot("main", {"items": {"sku-1": {"q": 2}}}))
        result = _make_runner().invoke(cli, ["show", str(config_file)])
        assert result.exit_code == 0
        assert "sku-1" in result.output

    def test_undeclared_cart_is_created(self, config_file: Path) -> None:
        result = _make_runner().invoke(cli, ["show", str(config_file), "guest"])
        assert result.exit_code == 0
        assert "guest" in result.output

    def test_corrupt_state_fails(self, config_file: Path, tmp_path: Path) -> None:
        FileStorage(tmp_path / "store").save("main", "garbage")
        result = _make_runner().invoke(cli, ["show", str(config_file)])
        assert result.exit_code == 1


class TestClearCommand:
    def test_clears_file(self, config_file: Path, tmp_path: Path) -> None:
        storage = FileStorage(tmp_path / "store")
        storage.save("pre_wishlist_post", encode_snapshot("wishlist", {"items": {}}))
        result = _make_runner().invoke(cli, ["clear", str(config_file), "wishlist"])
        assert result.exit_code == 0
        assert storage.restore("pre_wishlist_post") is None
