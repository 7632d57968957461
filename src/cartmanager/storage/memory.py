"""In-process storage driver.

Keeps snapshots in a dict owned by the driver instance. Useful for tests
and for applications that only need carts to survive a destroy/re-create
cycle within one process.
"""
from __future__ import annotations

from cartmanager.storage.base import StorageDriver


class MemoryStorage(StorageDriver):
    """Dict-backed storage driver."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def save(self, key: str, data: str) -> None:
        self._store[key] = data

    def restore(self, key: str) -> str | None:
        return self._store.get(key)

    def clear(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self) -> list[str]:
        """Return the stored keys in insertion order."""
        return list(self._store)

    def __len__(self) -> int:
        return len(self._store)
