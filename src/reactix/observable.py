"""The observable capability — "my content changed" as an explicit interface.

Anything that can announce changes derives from Observable and exposes an
`updated` Signal fired with no arguments. TypedObservable adds a `changed`
Signal that carries the new value.

Containers and computed properties decide whether to wire nested forwarding
with updated_signal(), an isinstance() check against these ABCs. Third-party
types can opt in with Observable.register() as long as they provide
`updated`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar

from reactix.signal import Signal

T = TypeVar("T")
O = TypeVar("O", bound="Observable")
TO = TypeVar("TO", bound="TypedObservable")


class Observable(ABC):
    """A value that fires `updated` whenever its internal state changes."""

    __slots__ = ()

    @property
    @abstractmethod
    def updated(self) -> Signal:
        """Zero-argument change notification."""

    def subscribe(self: O, on_updated: Callable[[], Any]) -> O:
        """Connect on_updated to `updated`. Returns self so calls chain."""
        self.updated.connect(on_updated)
        return self


class TypedObservable(Observable, Generic[T]):
    """An Observable that also reports the value it changed to."""

    __slots__ = ()

    @property
    @abstractmethod
    def changed(self) -> Signal:
        """One-argument change notification: the new value."""

    @abstractmethod
    def get(self) -> T:
        """The value `changed` would carry right now."""

    def subscribe_changed(self: TO, on_changed: Callable[[T], Any]) -> TO:
        """Connect on_changed to `changed`. Returns self so calls chain."""
        self.changed.connect(on_changed)
        return self


class Notifier(Observable):
    """Bare observable with a manual trigger.

    Useful as an element whose mutations happen elsewhere, or as the
    dependency of a Computed that reads non-reactive state:

        tick = Notifier()
        now = Computed(time.monotonic, tick)
        tick.notify()  # now recomputes
    """

    __slots__ = ("_updated",)

    def __init__(self) -> None:
        self._updated = Signal()

    @property
    def updated(self) -> Signal:
        return self._updated

    def notify(self) -> None:
        self._updated.emit()

    def __repr__(self) -> str:
        return f"Notifier(subscribers={self._updated.subscriber_count})"


def updated_signal(value: object) -> Signal | None:
    """Return value's `updated` Signal if value is observable, else None."""
    if isinstance(value, Observable):
        return value.updated
    return None
