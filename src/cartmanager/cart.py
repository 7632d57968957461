"""Cart entity contract and the default cart implementation.

The manager never looks inside a cart: it only needs to build one for a
cart ID and configuration, and to move its state in and out through
``export_state`` / ``import_state`` when saving and restoring. Any class
satisfying :class:`CartEntity` can be plugged in through the
``cart_factory`` argument of :class:`~cartmanager.manager.CartManager`.
"""
from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CartEntity(Protocol):
    """Protocol for objects managed by a ``CartManager``.

    Implementations own their mutable state. ``export_state`` must not
    have side effects and must return something JSON-serializable;
    ``import_state`` replaces the current state with a previously
    exported one.
    """

    cart_id: str
    config: dict[str, Any]

    def export_state(self) -> dict[str, Any]:
        ...  # pragma: no cover

    def import_state(self, data: dict[str, Any]) -> None:
        ...  # pragma: no cover


#: Signature of the callable the manager uses to build carts.
CartFactory = Callable[[str, dict[str, Any]], CartEntity]


class Cart:
    """Default cart: a plain container for line items and attributes.

    Business rules (pricing, quantities, totals) belong to the host
    application, which typically subclasses ``Cart`` or supplies its own
    :class:`CartEntity` implementation.

    Parameters
    ----------
    cart_id:
        The registry ID this cart is bound to.
    config:
        The resolved configuration of this cart.
    """

    def __init__(self, cart_id: str, config: dict[str, Any]) -> None:
        self.cart_id = cart_id
        self.config = config
        self.items: dict[str, dict[str, Any]] = {}
        self.attributes: dict[str, Any] = {}

    def export_state(self) -> dict[str, Any]:
        return {
            "items": copy.deepcopy(self.items),
            "attributes": copy.deepcopy(self.attributes),
        }

    def import_state(self, data: dict[str, Any]) -> None:
        self.items = copy.deepcopy(dict(data.get("items", {})))
        self.attributes = copy.deepcopy(dict(data.get("attributes", {})))

    def __repr__(self) -> str:
        return f"Cart(cart_id={self.cart_id!r}, items={len(self.items)})"
