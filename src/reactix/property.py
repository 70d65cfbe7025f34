"""Reactive properties — single value cells that announce changes.

Property holds a value directly; writing a value equal to the current one
(under the property's equality rule) is a no-op.

Computed derives its value from a factory over an explicit, fixed list of
dependencies. The value is computed eagerly at construction and again,
synchronously, every time a dependency fires `updated`; reading never
recomputes. Observers hear about a recomputation only when the comparison
predicate says the value actually changed.

    price = Property(10)
    qty = Property(3)
    total = Computed(lambda: price.get() * qty.get(), price, qty)
    label = total.map(lambda t: f"${t}")

    qty.set(4)  # total -> 40, label -> "$40", both fire once

On every change, `updated` fires first, then `changed` with the new value.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from reactix._errors import ContractError
from reactix.observable import Observable, TypedObservable
from reactix.signal import Signal, Subscription

logger = logging.getLogger("reactix.property")

T = TypeVar("T")
U = TypeVar("U")

Comparison = Callable[[Any, Any], bool]


def _default_equals(old: Any, new: Any) -> bool:
    return old is new or old == new


def _require_callable(value: object, what: str) -> None:
    if not callable(value):
        raise ContractError(f"{what} must be callable, got {value!r}")


class BaseProperty(TypedObservable[T]):
    """Shared plumbing for Property and Computed: value, signals, dispose."""

    __slots__ = ("_value", "_updated", "_changed", "_disposed")

    def __init__(self, value: T | None) -> None:
        self._value = value
        self._updated = Signal()
        self._changed = Signal()
        self._disposed = False

    @property
    def updated(self) -> Signal:
        return self._updated

    @property
    def changed(self) -> Signal:
        return self._changed

    @property
    def disposed(self) -> bool:
        return self._disposed

    def get(self) -> T:
        """Current value. Never has side effects."""
        return self._value

    @property
    def value(self) -> T:
        return self._value

    def run(self, on_changed: Callable[[T], Any]) -> BaseProperty[T]:
        """Connect on_changed to `changed`. Returns self so calls chain."""
        self._changed.connect(on_changed)
        return self

    def map(self, fn: Callable[[T], U], *, compare: Comparison | None = None) -> Computed[U]:
        """Derive a Computed that applies fn to this property's value."""
        return derive(self, fn, compare=compare)

    def dispose(self) -> None:
        """Drop all subscribers and reset the value to None. Idempotent."""
        if self._disposed:
            return
        self._disposed = True
        self._updated.clear()
        self._changed.clear()
        self._value = None
        logger.debug("Disposed %s", type(self).__name__)

    def _emit(self, value: T) -> None:
        """Fire `updated`, then `changed` with value.

        value is passed in rather than re-read: an `updated` handler may write
        this property again before `changed` goes out.
        """
        if self._disposed:
            return
        self._updated.emit()
        self._changed.emit(value)


class Property(BaseProperty[T]):
    """A directly writable reactive value.

    `equals(old, new)` decides whether a write is a change; the default is
    identity-or-==.
    """

    __slots__ = ("_equals",)

    def __init__(self, value: T | None = None, *, equals: Comparison | None = None) -> None:
        super().__init__(value)
        if equals is not None:
            _require_callable(equals, "equals")
        self._equals = equals or _default_equals

    def set(self, value: T) -> None:
        """Store value and notify, unless it equals the current value."""
        if self._equals(self._value, value):
            return
        self._value = value
        self._emit(value)

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        self.set(value)

    def __repr__(self) -> str:
        return f"Property({self._value!r})"


def _dependency_signal(dependency: object) -> Signal:
    if isinstance(dependency, Signal):
        return dependency
    if isinstance(dependency, Observable):
        return dependency.updated
    raise ContractError(f"Computed dependency must be an Observable or Signal, got {dependency!r}")


class Computed(BaseProperty[T]):
    """A value derived from other observables, recomputed when they fire.

    `compare(old, new)` returns True when the two count as equal; in that
    case the recomputed value is still cached but nothing fires. Use it for
    tolerance comparisons and the like.
    """

    __slots__ = ("_factory", "_compare", "_subscriptions")

    def __init__(
        self,
        factory: Callable[[], T],
        *dependencies: Observable | Signal,
        compare: Comparison | None = None,
    ) -> None:
        _require_callable(factory, "factory")
        if compare is not None:
            _require_callable(compare, "compare")
        signals = [_dependency_signal(dep) for dep in dependencies]
        super().__init__(factory())
        self._factory = factory
        self._compare = compare or _default_equals
        self._subscriptions: list[Subscription] = [
            signal.connect(self._recompute) for signal in signals
        ]

    @property
    def dependency_count(self) -> int:
        return len(self._subscriptions)

    def _recompute(self) -> None:
        """Called whenever any dependency fires `updated`."""
        old = self._value
        new = self._factory()
        self._value = new
        if not self._compare(old, new):
            self._emit(new)

    def dispose(self) -> None:
        """Detach from every dependency, then drop subscribers and the value."""
        if self._disposed:
            return
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
        super().dispose()

    def __repr__(self) -> str:
        name = getattr(self._factory, "__name__", repr(self._factory))
        return f"Computed({name}, value={self._value!r})"


def computed(*dependencies: Observable | Signal, compare: Comparison | None = None):
    """Decorator form of Computed.

    Usage:
        counter = Property(0)

        @computed(counter)
        def doubled():
            return counter.get() * 2

        doubled.get()  # 0
        counter.set(5)
        doubled.get()  # 10
    """

    def decorator(factory: Callable[[], T]) -> Computed[T]:
        return Computed(factory, *dependencies, compare=compare)

    return decorator


def derive(
    source: BaseProperty[T], fn: Callable[[T], U], *, compare: Comparison | None = None
) -> Computed[U]:
    """Computed whose only dependency is source and whose value is fn(source.get())."""
    _require_callable(fn, "mapping function")
    return Computed(lambda: fn(source.get()), source, compare=compare)
