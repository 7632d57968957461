"""Storage driver contract.

A storage driver persists an opaque string under a key. The manager
calls exactly three operations on it and a driver must provide all of
them; the abstract base enforces this when the driver class is
registered (see :mod:`cartmanager.storage.registry`), so a driver that
is missing one can never be selected at runtime.
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class StorageDriver(ABC):
    """Abstract base for cart storage backends.

    Drivers are constructed with the keyword arguments found under
    ``storage.options`` in the cart configuration. Timeouts, retries and
    any other transport policy are the driver's own concern.
    """

    @abstractmethod
    def save(self, key: str, data: str) -> None:
        """Persist ``data`` under ``key``, replacing any previous value."""

    @abstractmethod
    def restore(self, key: str) -> str | None:
        """Return the data stored under ``key``, or ``None`` if there is none."""

    @abstractmethod
    def clear(self, key: str) -> None:
        """Remove the data stored under ``key``. Missing keys are ignored."""
