"""Unit tests for cartmanager.snapshot and cartmanager.cart."""
from __future__ import annotations

import json

import pytest

from cartmanager.cart import Cart, CartEntity
from cartmanager.errors import SnapshotError
from cartmanager.snapshot import (
    SNAPSHOT_FORMAT,
    SNAPSHOT_VERSION,
    decode_snapshot,
    encode_snapshot,
)


class TestEncodeSnapshot:
    def test_envelope_fields(self) -> None:
        envelope = json.loads(encode_snapshot("main", {"items": {}}))
        assert envelope == {
            "format": SNAPSHOT_FORMAT,
            "version": SNAPSHOT_VERSION,
            "cart_id": "main",
            "data": {"items": {}},
        }

    def test_output_is_deterministic(self) -> None:
        assert encode_snapshot("main", {"b": 1, "a": 2}) == encode_snapshot("main", {"a": 2, "b": 1})

    def test_unserializable_data_raises(self) -> None:
        with pytest.raises(SnapshotError, match="main"):
            encode_snapshot("main", {"when": object()})


class TestDecodeSnapshot:
    def test_returns_data(self) -> None:
        blob = encode_snapshot("main", {"items": {"sku-1": {"quantity": 1}}})
        assert decode_snapshot(blob) == {"items": {"sku-1": {"quantity": 1}}}

    def test_accepts_bytes(self) -> None:
        blob = encode_snapshot("main", {"items": {}}).encode("utf-8")
        assert decode_snapshot(blob) == {"items": {}}

    @pytest.mark.parametrize(
        "blob",
        [
            "not json",
            "[]",
            '{"version": 1, "data": {}}',
            '{"format": "something.else", "version": 1, "data": {}}',
        ],
    )
    def test_rejects_foreign_blobs(self, blob: str) -> None:
        with pytest.raises(SnapshotError):
            decode_snapshot(blob)

    def test_rejects_unknown_version(self) -> None:
        blob = json.dumps({"format": SNAPSHOT_FORMAT, "version": 99, "data": {}})
        with pytest.raises(SnapshotError, match="version 99"):
            decode_snapshot(blob)

    def test_rejects_non_object_data(self) -> None:
        blob = json.dumps({"format": SNAPSHOT_FORMAT, "version": 1, "data": [1, 2]})
        with pytest.raises(SnapshotError):
            decode_snapshot(blob)


class TestCart:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(Cart("main", {}), CartEntity)

    def test_fresh_state_is_empty(self) -> None:
        assert Cart("main", {}).export_state() == {"items": {}, "attributes": {}}

    def test_export_is_a_copy(self) -> None:
        cart = Cart("main", {})
        cart.items["sku-1"] = {"quantity": 1}
        exported = cart.export_state()
        exported["items"]["sku-1"]["quantity"] = 9
        assert cart.items["sku-1"]["quantity"] == 1

    def test_import_replaces_state(self) -> None:
        cart = Cart("main", {})
        cart.items["old"] = {"quantity": 1}
        cart.import_state({"items": {"new": {"quantity": 2}}, "attributes": {"note": "gift"}})
        assert cart.items == {"new": {"quantity": 2}}
        assert cart.attributes == {"note": "gift"}

    def test_import_tolerates_missing_sections(self) -> None:
        cart = Cart("main", {})
        cart.import_state({})
        assert cart.export_state() == {"items": {}, "attributes": {}}

    def test_export_import_through_snapshot(self) -> None:
        cart = Cart("main", {})
        cart.items["sku-1"] = {"quantity": 3}
        other = Cart("main", {})
        other.import_state(decode_snapshot(encode_snapshot("main", cart.export_state())))
        assert other.export_state() == cart.export_state()

    def test_repr(self) -> None:
        assert repr(Cart("main", {})) == "Cart(cart_id='main', items=0)"
