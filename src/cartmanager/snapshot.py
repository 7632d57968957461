"""Versioned envelope for persisted cart state.

Storage drivers only ever see an opaque string. That string is a JSON
document wrapping the exported cart state::

    {
      "format": "cartmanager.snapshot",
      "version": 1,
      "cart_id": "main",
      "data": {"items": {...}, "attributes": {...}}
    }

The ``format`` marker and ``version`` number let a newer release refuse
blobs it does not understand instead of importing garbage.
"""
from __future__ import annotations

import json
from typing import Any

from cartmanager.errors import SnapshotError

SNAPSHOT_FORMAT = "cartmanager.snapshot"
SNAPSHOT_VERSION = 1
SUPPORTED_VERSIONS = frozenset({1})


def encode_snapshot(cart_id: str, data: dict[str, Any]) -> str:
    """Wrap exported cart state in a snapshot envelope and serialize it.

    Raises
    ------
    SnapshotError
        If ``data`` cannot be serialized to JSON.
    """
    envelope = {
        "format": SNAPSHOT_FORMAT,
        "version": SNAPSHOT_VERSION,
        "cart_id": cart_id,
        "data": data,
    }
    try:
        return json.dumps(envelope, sort_keys=True)
    except (TypeError, ValueError) as exc:
        raise SnapshotError(f"state of cart {cart_id!r} is not JSON-serializable: {exc}") from exc


def decode_snapshot(blob: str | bytes) -> dict[str, Any]:
    """Parse a snapshot blob and return the wrapped cart state.

    Raises
    ------
    SnapshotError
        If the blob is not JSON, is not a snapshot envelope, or carries an
        unsupported version.
    """
    try:
        envelope = json.loads(blob)
    except (TypeError, ValueError) as exc:
        raise SnapshotError(f"snapshot is not valid JSON: {exc}") from exc

    if not isinstance(envelope, dict) or envelope.get("format") != SNAPSHOT_FORMAT:
        raise SnapshotError("blob is not a cart snapshot")

    version = envelope.get("version")
    if version not in SUPPORTED_VERSIONS:
        raise SnapshotError(
            f"unsupported snapshot version {version!r}; "
            f"supported: {sorted(SUPPORTED_VERSIONS)}"
        )

    data = envelope.get("data")
    if not isinstance(data, dict):
        raise SnapshotError("snapshot data must be an object")
    return data
