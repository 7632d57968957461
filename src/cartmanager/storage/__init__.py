"""Storage drivers for cart-manager.

``default_registry`` is the registry a ``CartManager`` uses unless one is
injected; it comes with the built-in ``memory`` and ``file`` drivers.
Installed third-party drivers are added with
``default_registry.load_entrypoints()``.
"""
from __future__ import annotations

from cartmanager.storage.base import StorageDriver
from cartmanager.storage.file import FileStorage
from cartmanager.storage.memory import MemoryStorage
from cartmanager.storage.registry import (
    ENTRYPOINT_GROUP,
    DriverAlreadyRegisteredError,
    StorageRegistry,
    normalize_driver_name,
)


def builtin_registry() -> StorageRegistry:
    """Return a new registry holding only the built-in drivers."""
    registry = StorageRegistry()
    registry.register_class("memory", MemoryStorage)
    registry.register_class("file", FileStorage)
    return registry


default_registry = builtin_registry()

__all__ = [
    "ENTRYPOINT_GROUP",
    "DriverAlreadyRegisteredError",
    "FileStorage",
    "MemoryStorage",
    "StorageDriver",
    "StorageRegistry",
    "builtin_registry",
    "default_registry",
    "normalize_driver_name",
]
