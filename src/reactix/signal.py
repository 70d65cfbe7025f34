"""Signals — ordered subscriber lists that every observable is built from.

A Signal holds handlers in subscription order and calls them synchronously
on emit(). connect() hands back a Subscription token; disposing the token
removes exactly that registration, even when the same handler is connected
more than once.

Emission works on a snapshot: handlers connected while an emission is in
progress wait for the next one, and handlers disconnected mid-emission are
skipped if they have not been reached yet. A handler that raises stops the
emission and the exception propagates to whoever triggered it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from reactix._errors import ContractError, SubscriptionError

logger = logging.getLogger("reactix.signal")

Handler = Callable[..., Any]


class Subscription:
    """Token for one handler registration on a Signal."""

    __slots__ = ("_signal", "handler")

    def __init__(self, signal: Signal, handler: Handler) -> None:
        self._signal: Signal | None = signal
        self.handler = handler

    @property
    def active(self) -> bool:
        return self._signal is not None

    def dispose(self) -> None:
        """Remove the registration. Safe to call more than once."""
        signal, self._signal = self._signal, None
        if signal is not None:
            signal._detach(self)

    def __repr__(self) -> str:
        state = "active" if self.active else "disposed"
        return f"Subscription({self.handler!r}, {state})"


class Signal:
    """Multicast notification with explicit connect/disconnect."""

    __slots__ = ("_subscriptions",)

    def __init__(self) -> None:
        # Insertion-ordered; a dict so a token detaches in O(1).
        self._subscriptions: dict[Subscription, None] = {}

    def connect(self, handler: Handler) -> Subscription:
        """Append handler to the subscriber list. Returns its removal token."""
        if not callable(handler):
            raise ContractError(f"signal handler must be callable, got {handler!r}")
        subscription = Subscription(self, handler)
        self._subscriptions[subscription] = None
        return subscription

    def disconnect(self, handler: Handler) -> None:
        """Remove the most recent registration of handler.

        Raises SubscriptionError if handler is not connected. That is a
        bookkeeping bug in the caller, not a runtime condition.
        """
        for subscription in reversed(self._subscriptions):
            if subscription.handler == handler:
                subscription.dispose()
                return
        raise SubscriptionError(f"{handler!r} is not connected to this signal")

    def emit(self, *args: Any) -> None:
        """Call every connected handler once, in subscription order."""
        for subscription in tuple(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.handler(*args)
            except Exception:
                logger.debug("Handler %r raised; emission aborted", subscription.handler)
                raise

    def clear(self) -> None:
        """Drop every subscriber."""
        for subscription in self._subscriptions:
            subscription._signal = None
        self._subscriptions.clear()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _detach(self, subscription: Subscription) -> None:
        del self._subscriptions[subscription]

    # --- Pickling: subscribers are runtime wiring, never serialized ---

    def __reduce__(self):
        return (Signal, ())

    def __repr__(self) -> str:
        return f"Signal(subscribers={len(self._subscriptions)})"
