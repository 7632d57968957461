"""Storage driver registry.

Maps driver names, as they appear under ``storage.driver`` in the cart
configuration, to :class:`~cartmanager.storage.base.StorageDriver`
subclasses. Names are case-insensitive. Each class is checked once, when
it is registered: it must subclass ``StorageDriver`` and implement every
abstract operation.

Third-party packages contribute drivers by declaring entry-points in
the ``cartmanager.storage`` group.

Example
-------
Register a driver with the decorator::

    from cartmanager.storage import StorageDriver, default_registry

    @default_registry.register("redis")
    class RedisStorage(StorageDriver):
        def save(self, key: str, data: str) -> None: ...
        def restore(self, key: str) -> str | None: ...
        def clear(self, key: str) -> None: ...

Load all installed drivers via entry-points::

    default_registry.load_entrypoints()

Retrieve a driver class by name::

    cls = default_registry.get("Redis")
"""
from __future__ import annotations

import importlib.metadata
import inspect
import logging
from collections.abc import Callable

from cartmanager.errors import CartManagerError, InvalidStorageImplementationError
from cartmanager.storage.base import StorageDriver

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "cartmanager.storage"


def normalize_driver_name(name: str) -> str:
    """Return the canonical registry key for a driver name."""
    return name.strip().lower()


class DriverAlreadyRegisteredError(CartManagerError, ValueError):
    """Raised when attempting to register a driver name that already exists."""

    def __init__(self, name: str) -> None:
        self.driver_name = name
        super().__init__(
            f"Storage driver {name!r} is already registered. "
            "Use a unique name or deregister the existing driver first."
        )


class StorageRegistry:
    """Registry of storage driver classes keyed by normalized name."""

    def __init__(self) -> None:
        self._drivers: dict[str, type[StorageDriver]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str) -> Callable[[type[StorageDriver]], type[StorageDriver]]:
        """Return a class decorator that registers the decorated driver.

        Raises
        ------
        DriverAlreadyRegisteredError
            If ``name`` is already in use.
        InvalidStorageImplementationError
            If the decorated class is not a concrete ``StorageDriver``.
        """

        def decorator(cls: type[StorageDriver]) -> type[StorageDriver]:
            self.register_class(name, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type[StorageDriver]) -> None:
        """Register a driver class directly.

        Parameters
        ----------
        name:
            The driver name; stored lower-cased.
        cls:
            A concrete ``StorageDriver`` subclass.

        Raises
        ------
        DriverAlreadyRegisteredError
            If ``name`` is already registered.
        InvalidStorageImplementationError
            If ``cls`` is not a ``StorageDriver`` subclass or leaves any of
            save/restore/clear unimplemented.
        """
        key = normalize_driver_name(name)
        if not key:
            raise InvalidStorageImplementationError(name, "driver name must not be empty")
        if key in self._drivers:
            raise DriverAlreadyRegisteredError(key)
        if not (isinstance(cls, type) and issubclass(cls, StorageDriver)):
            raise InvalidStorageImplementationError(
                key, f"{cls!r} does not subclass StorageDriver"
            )
        if inspect.isabstract(cls):
            missing = ", ".join(sorted(cls.__abstractmethods__))
            raise InvalidStorageImplementationError(
                key, f"{cls.__qualname__} does not implement: {missing}"
            )
        self._drivers[key] = cls
        logger.debug("Registered storage driver %r -> %s", key, cls.__qualname__)

    def deregister(self, name: str) -> None:
        """Remove a driver from the registry.

        Raises
        ------
        InvalidStorageImplementationError
            If ``name`` is not registered.
        """
        key = normalize_driver_name(name)
        if key not in self._drivers:
            raise InvalidStorageImplementationError(name, "driver is not registered")
        del self._drivers[key]
        logger.debug("Deregistered storage driver %r", key)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> type[StorageDriver]:
        """Return the driver class registered under ``name``.

        Raises
        ------
        InvalidStorageImplementationError
            If no driver is registered under ``name``.
        """
        try:
            return self._drivers[normalize_driver_name(name)]
        except KeyError:
            raise InvalidStorageImplementationError(
                name,
                f"no such driver is registered (available: {', '.join(self.list_drivers()) or 'none'})",
            ) from None

    def list_drivers(self) -> list[str]:
        """Return the registered driver names in alphabetical order."""
        return sorted(self._drivers)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_driver_name(name) in self._drivers

    def __len__(self) -> int:
        return len(self._drivers)

    def __repr__(self) -> str:
        return f"StorageRegistry(drivers={self.list_drivers()})"

    # ------------------------------------------------------------------
    # Entry-point loading
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> None:
        """Discover and register drivers declared as package entry-points.

        Drivers already registered under the same name are skipped, so
        repeated calls are idempotent. An entry-point that fails to import
        or does not satisfy the driver contract is logged and skipped.

        Example
        -------
        In a downstream package's ``pyproject.toml``::

            [project.entry-points."cartmanager.storage"]
            redis = "my_package.storage:RedisStorage"
        """
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name in self:
                logger.debug("Storage driver %r already registered; skipping.", ep.name)
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception(
                    "Failed to load storage driver entry-point %r from group %r; skipping.",
                    ep.name,
                    group,
                )
                continue
            try:
                self.register_class(ep.name, cls)
            except (DriverAlreadyRegisteredError, InvalidStorageImplementationError) as exc:
                logger.warning("Entry-point %r could not be registered: %s", ep.name, exc)
