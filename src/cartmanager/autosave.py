"""Scoped deferred saves.

An :class:`AutosaveScope` collects the IDs of carts created with
``storage.autosave`` enabled and saves each of them once when the scope
is closed. The host application decides where a scope ends: usually at
the end of a request (``CartManager.autosave_scope()``) or when the
process shuts down (``CartManager.close()``).
"""
from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class AutosaveScope:
    """Ordered set of pending save actions, run exactly once on close.

    Parameters
    ----------
    save:
        Called with a cart ID to persist that cart.
    is_live:
        Called with a cart ID; registrations for carts that are no longer
        live when the scope closes are skipped.
    name:
        Label used in log messages.
    """

    def __init__(
        self,
        save: Callable[[str], None],
        is_live: Callable[[str], bool],
        name: str = "scope",
    ) -> None:
        self._save = save
        self._is_live = is_live
        self.name = name
        self._pending: dict[str, None] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> list[str]:
        """Cart IDs that will be saved on close, in registration order."""
        return list(self._pending)

    def register(self, cart_id: str) -> None:
        """Schedule ``cart_id`` to be saved when the scope closes.

        Registering the same ID twice schedules a single save.

        Raises
        ------
        RuntimeError
            If the scope has already been closed.
        """
        if self._closed:
            raise RuntimeError(f"autosave scope {self.name!r} is already closed")
        self._pending.setdefault(cart_id, None)
        logger.debug("Autosave for cart %r registered in %r", cart_id, self.name)

    def discard(self, cart_id: str) -> None:
        """Drop a pending registration, if any."""
        self._pending.pop(cart_id, None)

    def close(self) -> None:
        """Run every pending save once and mark the scope closed.

        A failing save does not prevent the remaining ones from running.
        A single failure is re-raised as is; several are raised together
        in an ``ExceptionGroup``. Closing an already closed scope does
        nothing.
        """
        if self._closed:
            return
        self._closed = True
        pending, self._pending = list(self._pending), {}

        errors: list[Exception] = []
        for cart_id in pending:
            if not self._is_live(cart_id):
                logger.debug("Autosave skipped for destroyed cart %r", cart_id)
                continue
            try:
                self._save(cart_id)
            except Exception as exc:
                errors.append(exc)

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise ExceptionGroup(f"autosave failed for {len(errors)} carts in {self.name!r}", errors)

    def __enter__(self) -> "AutosaveScope":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"AutosaveScope(name={self.name!r}, {state}, pending={self.pending})"
