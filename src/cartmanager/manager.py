"""Cart registry and lifecycle manager.

A :class:`CartManager` owns the live cart instances of an application,
keyed by cart ID, together with the configuration tree they were built
from and the *context*: the cart ID used when an operation is called
without one. It also drives persistence, moving cart state between the
cart objects and the configured storage driver.

Example
-------
::

    from cartmanager import CartManager

    manager = CartManager({
        "defaults": {"storage": {"driver": "memory", "autosave": True}},
        "carts": {"main": {}, "wishlist": {"storage": {"storage_key_prefix": "wl_"}}},
    })

    with manager.autosave_scope():
        cart = manager.get_cart_instance()        # "main", the first declared cart
        cart.items["sku-1"] = {"quantity": 2}
    # "main" and "wishlist" were saved when the scope closed

    manager.context("wishlist")
    manager.get_storage_key("wishlist")           # "wl_wishlist"
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from cartmanager.autosave import AutosaveScope
from cartmanager.cart import Cart, CartEntity, CartFactory
from cartmanager.config.schema import (
    ManagerConfig,
    merge_config,
    storage_section,
    validate_cart_config,
)
from cartmanager.errors import (
    DuplicateCartInstanceError,
    InvalidCartInstanceError,
    InvalidStorageImplementationError,
)
from cartmanager.snapshot import decode_snapshot, encode_snapshot
from cartmanager.storage import StorageDriver, StorageRegistry, default_registry, normalize_driver_name

logger = logging.getLogger(__name__)


class CartManager:
    """Registry of cart instances with context tracking and storage orchestration.

    Parameters
    ----------
    config:
        Optional configuration tree; when given, :meth:`initialize` is
        called with it.
    storage_registry:
        Registry used to resolve ``storage.driver`` names. Defaults to
        :data:`cartmanager.storage.default_registry`.
    cart_factory:
        Callable building a cart from ``(cart_id, config)``. Defaults to
        :class:`~cartmanager.cart.Cart`.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        storage_registry: StorageRegistry | None = None,
        cart_factory: CartFactory = Cart,
    ) -> None:
        self._storage_registry = storage_registry if storage_registry is not None else default_registry
        self._cart_factory = cart_factory
        self._instances: dict[str, CartEntity] = {}
        self._context = ""
        self._config = ManagerConfig()
        self._drivers: dict[tuple[str, str], StorageDriver] = {}
        self._scopes: list[AutosaveScope] = [self._new_scope("process")]

        if config is not None:
            self.initialize(config)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> ManagerConfig:
        """The configuration tree the manager was initialized with."""
        return self._config

    @property
    def storage_registry(self) -> StorageRegistry:
        return self._storage_registry

    # ------------------------------------------------------------------
    # Registry & lifecycle
    # ------------------------------------------------------------------

    def initialize(self, config: Mapping[str, Any]) -> None:
        """Load a configuration tree and create every declared cart.

        Any live instances are discarded first; their persisted state is
        left untouched. Each declared cart gets ``defaults`` merged with
        its override, the merged config is stored back into the tree, and
        an instance is created without switching context. The context is
        then set to the first declared cart, or left empty when no carts
        are declared.

        Raises
        ------
        ConfigurationError
            If ``config`` is malformed.
        InvalidStorageImplementationError
            If a declared cart names a storage driver that cannot be used.
        """
        self._config = ManagerConfig.from_mapping(config)
        self._instances.clear()
        self._context = ""

        cart_ids = list(self._config.carts)
        for cart_id in cart_ids:
            merged = self._config.resolve(cart_id)
            self._config.carts[cart_id] = merged
            self.new_cart_instance(cart_id, merged, overwrite=True, switch_context=False)

        if cart_ids:
            self._context = cart_ids[0]
        logger.debug("Initialized cart manager with carts %r", cart_ids)

    def new_cart_instance(
        self,
        cart_id: str,
        config: Mapping[str, Any] | None = None,
        overwrite: bool = True,
        switch_context: bool = True,
    ) -> CartEntity:
        """Create a cart instance and register it under ``cart_id``.

        Parameters
        ----------
        cart_id:
            The ID of the new instance.
        config:
            Configuration for the cart; when omitted it is resolved with
            :meth:`get_cart_config`.
        overwrite:
            Replace an existing instance with the same ID. When ``False``
            an existing instance is an error.
        switch_context:
            Make the new instance the current context.

        Returns
        -------
        CartEntity
            The new cart. If a storage driver is configured its previously
            saved state has already been restored.

        Raises
        ------
        DuplicateCartInstanceError
            If ``cart_id`` is live and ``overwrite`` is ``False``.
        ConfigurationError
            If an explicit ``config`` is malformed.
        """
        if not isinstance(cart_id, str) or not cart_id:
            raise ValueError(f"cart ID must be a non-empty string, got {cart_id!r}")
        if not overwrite and self.cart_instance_available(cart_id):
            raise DuplicateCartInstanceError(cart_id)

        if config is None:
            resolved = self.get_cart_config(cart_id)
        else:
            validate_cart_config(config)
            resolved = merge_config({}, config)

        previous = self._instances.get(cart_id)
        self._instances[cart_id] = self._cart_factory(cart_id, resolved)
        logger.debug("Created cart instance %r", cart_id)

        storage = storage_section(resolved)
        if storage.get("driver"):
            try:
                self.restore_state(cart_id)
            except Exception:
                # a cart that failed to restore never becomes live
                if previous is None:
                    del self._instances[cart_id]
                else:
                    self._instances[cart_id] = previous
                raise

        self._discard_autosave(cart_id)
        if storage.get("autosave", False):
            self._scopes[-1].register(cart_id)

        if switch_context:
            self._context = cart_id

        return self._instances[cart_id]

    def destroy_instance(self, cart_id: str | None = None, clear_storage: bool = True) -> None:
        """Remove a cart instance. Missing instances are ignored.

        Parameters
        ----------
        cart_id:
            The instance to destroy; defaults to the current context.
        clear_storage:
            Also clear the instance's persisted state, when it has a
            storage driver configured.
        """
        cart_id = cart_id or self._context
        if not self.cart_instance_available(cart_id):
            return

        cart = self._instances.pop(cart_id)
        self._discard_autosave(cart_id)
        if self._context == cart_id:
            self._context = ""
        logger.debug("Destroyed cart instance %r", cart_id)

        if clear_storage and storage_section(cart.config).get("driver"):
            self._clear(cart_id, cart.config)

    def destroy_all_instances(self, clear_storage: bool = True) -> None:
        """Destroy every live instance, applying ``clear_storage`` to each."""
        for cart_id in list(self._instances):
            self.destroy_instance(cart_id, clear_storage)

    def cart_instance_available(self, cart_id: str) -> bool:
        """Return ``True`` if an instance with ``cart_id`` is live."""
        return cart_id in self._instances

    def get_cart_instance(self, cart_id: str | None = None) -> CartEntity:
        """Return a live cart instance.

        Raises
        ------
        InvalidCartInstanceError
            If there is no instance with ``cart_id`` (or, when ``cart_id``
            is omitted, no instance in context).
        """
        cart_id = cart_id or self._context
        try:
            return self._instances[cart_id]
        except KeyError:
            raise InvalidCartInstanceError(cart_id) from None

    def cart_ids(self) -> list[str]:
        """Return the IDs of all live instances in creation order."""
        return list(self._instances)

    def reset(self) -> None:
        """Drop every instance, the context and the configuration.

        Persisted state and cached storage drivers are kept, so a later
        :meth:`initialize` restores carts from the same backends.
        """
        self._instances.clear()
        self._context = ""
        self._config = ManagerConfig()
        logger.debug("Cart manager reset")

    def __contains__(self, cart_id: object) -> bool:
        return cart_id in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def __repr__(self) -> str:
        return f"CartManager(carts={self.cart_ids()}, context={self._context!r})"

    # ------------------------------------------------------------------
    # Context & configuration
    # ------------------------------------------------------------------

    def context(self, cart_id: str | None = None) -> str:
        """Get, or set and get, the current context.

        Raises
        ------
        InvalidCartInstanceError
            If ``cart_id`` is given but not live; the context is unchanged.
        """
        if cart_id:
            if not self.cart_instance_available(cart_id):
                raise InvalidCartInstanceError(cart_id)
            self._context = cart_id
            logger.debug("Context switched to %r", cart_id)
        return self._context

    def get_cart_config(self, cart_id: str) -> dict[str, Any]:
        """Return the configuration of a cart from the configuration tree.

        Declared carts get their merged configuration; any other ID gets
        ``defaults``. The cart does not need to be live. A copy is
        returned, so callers may modify it freely.
        """
        if cart_id in self._config.carts:
            return merge_config({}, self._config.carts[cart_id])
        return merge_config({}, self._config.defaults)

    def _resolve_config(self, cart_id: str) -> dict[str, Any]:
        cart = self._instances.get(cart_id)
        if cart is not None:
            return cart.config
        return self.get_cart_config(cart_id)

    # ------------------------------------------------------------------
    # Storage orchestration
    # ------------------------------------------------------------------

    def get_storage_driver(self, cart_id: str) -> StorageDriver:
        """Return the storage driver configured for a cart.

        The configuration of the live instance is used when there is one,
        otherwise the configuration tree. Drivers are built with the
        ``storage.options`` mapping and cached per name and options.

        Raises
        ------
        InvalidStorageImplementationError
            If no driver is configured, the name is not registered, or the
            driver cannot be built with the configured options.
        """
        return self._driver_for(self._resolve_config(cart_id))

    def get_storage_key(self, cart_id: str) -> str:
        """Return ``storage_key_prefix + cart_id + storage_key_suffix``.

        Missing prefix or suffix contribute nothing.
        """
        return self._key_for(cart_id, self._resolve_config(cart_id))

    def save_state(self, cart_id: str | None = None) -> None:
        """Export a live cart and write it to its storage driver.

        Raises
        ------
        InvalidCartInstanceError
            If the cart is not live.
        InvalidStorageImplementationError
            If the cart has no usable storage driver.
        """
        cart_id = cart_id or self._context
        cart = self.get_cart_instance(cart_id)
        driver = self._driver_for(cart.config)
        key = self._key_for(cart_id, cart.config)
        driver.save(key, encode_snapshot(cart_id, cart.export_state()))
        logger.debug("Saved cart %r under key %r", cart_id, key)

    def restore_state(self, cart_id: str | None = None) -> None:
        """Load a live cart's persisted state into it.

        When nothing is stored the cart is left as it is.

        Raises
        ------
        InvalidCartInstanceError
            If the cart is not live.
        InvalidStorageImplementationError
            If the cart has no usable storage driver.
        SnapshotError
            If the stored blob cannot be decoded.
        """
        cart_id = cart_id or self._context
        cart = self.get_cart_instance(cart_id)
        key = self._key_for(cart_id, cart.config)
        blob = self._driver_for(cart.config).restore(key)
        if blob is None:
            logger.debug("No stored state for cart %r under key %r", cart_id, key)
            return
        cart.import_state(decode_snapshot(blob))
        logger.debug("Restored cart %r from key %r", cart_id, key)

    def clear_state(self, cart_id: str | None = None) -> None:
        """Remove a cart's persisted state. The cart does not need to be live.

        Raises
        ------
        InvalidStorageImplementationError
            If the cart has no usable storage driver.
        """
        cart_id = cart_id or self._context
        self._clear(cart_id, self._resolve_config(cart_id))

    def _clear(self, cart_id: str, config: Mapping[str, Any]) -> None:
        key = self._key_for(cart_id, config)
        self._driver_for(config).clear(key)
        logger.debug("Cleared stored state for cart %r under key %r", cart_id, key)

    def _key_for(self, cart_id: str, config: Mapping[str, Any]) -> str:
        storage = storage_section(config)
        return (
            storage.get("storage_key_prefix", "")
            + cart_id
            + storage.get("storage_key_suffix", "")
        )

    def _driver_for(self, config: Mapping[str, Any]) -> StorageDriver:
        storage = storage_section(config)
        name = storage.get("driver")
        if not isinstance(name, str) or not name.strip():
            raise InvalidStorageImplementationError(name, "no storage driver is configured")

        driver_cls = self._storage_registry.get(name)
        options = dict(storage.get("options") or {})
        cache_key = (normalize_driver_name(name), json.dumps(options, sort_keys=True, default=str))

        driver = self._drivers.get(cache_key)
        if driver is None:
            try:
                driver = driver_cls(**options)
            except TypeError as exc:
                raise InvalidStorageImplementationError(
                    name, f"cannot be built with options {sorted(options)}: {exc}"
                ) from exc
            self._drivers[cache_key] = driver
            logger.debug("Built storage driver %r with options %r", cache_key[0], options)
        return driver

    # ------------------------------------------------------------------
    # Autosave
    # ------------------------------------------------------------------

    def _new_scope(self, name: str) -> AutosaveScope:
        return AutosaveScope(self.save_state, self.cart_instance_available, name)

    def _discard_autosave(self, cart_id: str) -> None:
        # registrations belong to one instance, not to the ID
        for scope in self._scopes:
            scope.discard(cart_id)

    @contextmanager
    def autosave_scope(self, name: str = "request") -> Iterator[AutosaveScope]:
        """Open an autosave scope, typically spanning one request.

        Carts created with ``storage.autosave`` while the scope is open are
        saved once when the block exits, whether or not it raised.
        Scopes nest; registrations go to the innermost open scope.
        """
        scope = self._new_scope(name)
        self._scopes.append(scope)
        try:
            yield scope
        finally:
            self._scopes.remove(scope)
            scope.close()

    def close(self) -> None:
        """Run the autosaves registered outside any request scope.

        The manager stays usable; later registrations go to a fresh
        process-level scope.
        """
        scope = self._scopes[0]
        self._scopes[0] = self._new_scope("process")
        scope.close()

    def __enter__(self) -> "CartManager":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
