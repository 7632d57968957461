"""Error types raised by cart-manager.

Every error derives from ``CartManagerError`` so callers can catch the
whole family with one clause. The concrete classes also inherit from the
builtin exception that best describes them (``KeyError`` for a missing
instance, ``ValueError`` for a duplicate or malformed input), mirroring
how a dict or a parser would fail.
"""
from __future__ import annotations


class CartManagerError(Exception):
    """Base class for all cart-manager errors."""


class InvalidCartInstanceError(CartManagerError, KeyError):
    """Raised when an operation needs a live cart instance that does not exist."""

    def __init__(self, cart_id: str) -> None:
        self.cart_id = cart_id
        super().__init__(f"There is no cart instance with the id: {cart_id!r}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class DuplicateCartInstanceError(CartManagerError, ValueError):
    """Raised when creating a cart instance whose ID is already live and
    overwriting was not allowed."""

    def __init__(self, cart_id: str) -> None:
        self.cart_id = cart_id
        super().__init__(f"There is already a cart instance with the id: {cart_id!r}")


class InvalidStorageImplementationError(CartManagerError):
    """Raised when a configured storage driver cannot be resolved or does
    not implement the full save/restore/clear capability set.

    Parameters
    ----------
    driver:
        The driver name as it appeared in the configuration (may be
        ``None`` or empty when no driver was configured).
    reason:
        Human-readable explanation of what went wrong.
    """

    def __init__(self, driver: str | None, reason: str) -> None:
        self.driver = driver
        self.reason = reason
        super().__init__(f"Invalid storage driver {driver!r}: {reason}")


class ConfigurationError(CartManagerError, ValueError):
    """Raised when a configuration tree or configuration file is malformed."""


class SnapshotError(CartManagerError, ValueError):
    """Raised when a persisted blob is not a readable cart snapshot."""
