"""Observable containers — a dict and a set that announce their mutations.

Both fire `updated` once per mutating call that actually changes content,
after the change is in place, so handlers read post-mutation state. Nothing
is batched: update() on the dict fires once per assigned key.

Elements that are themselves Observable are forwarded: the container holds
exactly one Subscription per live observable entry and re-fires its own
`updated` when the element fires. The subscription is disposed before the
entry is replaced or removed.

Dict assignment is unconditional (re-assigning the same value still fires).
Set operations compute their membership delta first, apply it in one step,
rewire only the elements that entered or left, and fire at most once.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping, MutableSet
from typing import Any, Callable, Generic, Iterator, TypeVar

from reactix._errors import SnapshotStateError
from reactix.observable import Observable, TypedObservable, updated_signal
from reactix.signal import Signal, Subscription

logger = logging.getLogger("reactix.containers")

T = TypeVar("T")
KT = TypeVar("KT")
VT = TypeVar("VT")


class Snapshot(Generic[T]):
    """Point-in-time, restartable enumerator over a container's content.

    Later mutations of the container do not show up here. Works as a plain
    iterator, or step by step with move_next() / current / reset().
    """

    __slots__ = ("_items", "_index")

    def __init__(self, items: Iterable[T]) -> None:
        self._items = tuple(items)
        self._index = -1

    def move_next(self) -> bool:
        """Advance to the next item. False once the snapshot is exhausted."""
        if self._index >= len(self._items) - 1:
            self._index = len(self._items)
            return False
        self._index += 1
        return True

    def reset(self) -> None:
        """Rewind to before the first item."""
        self._index = -1

    @property
    def current(self) -> T:
        if not 0 <= self._index < len(self._items):
            raise SnapshotStateError("Snapshot is before the first or after the last item")
        return self._items[self._index]

    def __iter__(self) -> Snapshot[T]:
        return self

    def __next__(self) -> T:
        if not self.move_next():
            raise StopIteration
        return self._items[self._index]

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Snapshot({list(self._items)!r}, index={self._index})"


def _release(subscription: Subscription | None) -> None:
    if subscription is not None:
        subscription.dispose()


class ObservableDict(Observable, MutableMapping, Generic[KT, VT]):
    """A dict that fires `updated` on every mutation and forwards nested updates."""

    __slots__ = ("_entries", "_updated")

    def __init__(self, data: Mapping[KT, VT] | Iterable[tuple[KT, VT]] | None = None) -> None:
        self._updated = Signal()
        self._entries: dict[KT, tuple[VT, Subscription | None]] = {}
        if data:
            items = data.items() if isinstance(data, Mapping) else data
            for key, value in items:
                self._store(key, value)

    @property
    def updated(self) -> Signal:
        return self._updated

    def _store(self, key: KT, value: VT) -> None:
        """Put value under key, tearing down the old entry's forwarding first."""
        old = self._entries.get(key)
        if old is not None:
            _release(old[1])
        signal = updated_signal(value)
        subscription = signal.connect(self._broadcast) if signal is not None else None
        self._entries[key] = (value, subscription)

    def _broadcast(self) -> None:
        self._updated.emit()

    # --- Read operations ---

    def __getitem__(self, key: KT) -> VT:
        return self._entries[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[KT]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def contains(self, key: KT, value: VT) -> bool:
        """True if key is present and its value equals value."""
        entry = self._entries.get(key)
        return entry is not None and entry[0] == value

    def snapshot(self) -> Snapshot[tuple[KT, VT]]:
        """Point-in-time (key, value) pairs."""
        return Snapshot((key, value) for key, (value, _) in self._entries.items())

    # --- Write operations (notify) ---

    def __setitem__(self, key: KT, value: VT) -> None:
        self._store(key, value)
        self._broadcast()

    def __delitem__(self, key: KT) -> None:
        _, subscription = self._entries.pop(key)
        _release(subscription)
        self._broadcast()

    def add(self, key: KT, value: VT) -> None:
        """Insert a new key. Raises KeyError if key is already present."""
        if key in self._entries:
            raise KeyError(f"Key already present: {key!r}")
        self[key] = value

    def remove(self, key: KT) -> bool:
        """Delete key if present. Returns whether anything was removed."""
        if key not in self._entries:
            return False
        del self[key]
        return True

    def remove_item(self, key: KT, value: VT) -> bool:
        """Delete key only if its value equals value."""
        if not self.contains(key, value):
            return False
        del self[key]
        return True

    def clear(self) -> None:
        """Remove everything. Fires once, and only if there was something to remove."""
        if not self._entries:
            return
        for _, subscription in self._entries.values():
            _release(subscription)
        self._entries.clear()
        self._broadcast()

    def dispose(self) -> None:
        """Clear, then drop this container's own subscribers."""
        self.clear()
        self._updated.clear()

    # --- Pickling: only content is stored; forwarding is rewired on load ---

    def __getstate__(self) -> dict[str, Any]:
        return {"data": {key: value for key, (value, _) in self._entries.items()}}

    def __setstate__(self, state: dict[str, Any]) -> None:
        self._updated = Signal()
        self._entries = {}
        for key, value in state["data"].items():
            self._store(key, value)
        logger.debug(
            "Rewired %d nested observables after load",
            sum(1 for _, sub in self._entries.values() if sub is not None),
        )

    def __repr__(self) -> str:
        return f"ObservableDict({dict(self.items())!r})"


class ObservableSet(TypedObservable, MutableSet, Generic[T]):
    """A set that fires on membership changes and forwards nested updates.

    `changed` carries the set itself.
    """

    __slots__ = ("_items", "_subscriptions", "_updated", "_changed")

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._updated = Signal()
        self._changed = Signal()
        self._items: set[T] = set()
        self._subscriptions: dict[T, Subscription] = {}
        if items:
            for item in items:
                if item not in self._items:
                    self._items.add(item)
                    self._attach(item)

    @property
    def updated(self) -> Signal:
        return self._updated

    @property
    def changed(self) -> Signal:
        return self._changed

    def _attach(self, item: T) -> None:
        signal = updated_signal(item)
        if signal is not None:
            self._subscriptions[item] = signal.connect(self._broadcast)

    def _detach(self, item: T) -> None:
        _release(self._subscriptions.pop(item, None))

    def _broadcast(self) -> None:
        self._updated.emit()
        self._changed.emit(self)

    # --- Read operations ---

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self) -> ObservableSet[T]:
        """The set itself, which is what `changed` carries."""
        return self

    def snapshot(self) -> Snapshot[T]:
        return Snapshot(self._items)

    def issubset(self, other: Iterable[T]) -> bool:
        return self._items.issubset(other)

    def issuperset(self, other: Iterable[T]) -> bool:
        return self._items.issuperset(other)

    def is_proper_subset(self, other: Iterable[T]) -> bool:
        return self._items < set(other)

    def is_proper_superset(self, other: Iterable[T]) -> bool:
        return self._items > set(other)

    def isdisjoint(self, other: Iterable[T]) -> bool:
        return self._items.isdisjoint(other)

    def overlaps(self, other: Iterable[T]) -> bool:
        return not self._items.isdisjoint(other)

    def set_equals(self, other: Iterable[T]) -> bool:
        return self._items == set(other)

    # --- Write operations (notify) ---

    def add(self, item: T) -> bool:
        """Add item. Returns False, without firing, if it was already present."""
        if item in self._items:
            return False
        self._items.add(item)
        self._attach(item)
        self._broadcast()
        return True

    def discard(self, item: T) -> bool:
        """Remove item if present. Returns whether it was."""
        if item not in self._items:
            return False
        self._items.remove(item)
        self._detach(item)
        self._broadcast()
        return True

    def remove(self, item: T) -> None:
        """Remove item. Raises KeyError if it is not a member."""
        if not self.discard(item):
            raise KeyError(item)

    def remove_where(self, predicate: Callable[[T], bool]) -> int:
        """Remove every item matching predicate in one pass. Returns how many went."""
        removed = [item for item in self._items if predicate(item)]
        if not removed:
            return 0
        self._items.difference_update(removed)
        for item in removed:
            self._detach(item)
        self._broadcast()
        return len(removed)

    def clear(self) -> None:
        if not self._items:
            return
        for subscription in self._subscriptions.values():
            subscription.dispose()
        self._subscriptions.clear()
        self._items.clear()
        self._broadcast()

    def update(self, other: Iterable[T]) -> None:
        """Union in place."""
        added = set(other) - self._items
        if not added:
            return
        self._items |= added
        for item in added:
            self._attach(item)
        self._broadcast()

    def intersection_update(self, other: Iterable[T]) -> None:
        """Keep only items also in other."""
        removed = self._items - set(other)
        if not removed:
            return
        self._items -= removed
        for item in removed:
            self._detach(item)
        self._broadcast()

    def difference_update(self, other: Iterable[T]) -> None:
        """Remove every item that is in other."""
        removed = self._items & set(other)
        if not removed:
            return
        self._items -= removed
        for item in removed:
            self._detach(item)
        self._broadcast()

    def symmetric_difference_update(self, other: Iterable[T]) -> None:
        """Keep items in exactly one of self and other."""
        other_set = set(other)
        removed = self._items & other_set
        added = other_set - self._items
        if not removed and not added:
            return
        self._items -= removed
        self._items |= added
        for item in added:
            self._attach(item)
        for item in removed:
            self._detach(item)
        self._broadcast()

    def __ior__(self, other: Iterable[T]) -> ObservableSet[T]:
        self.update(other)
        return self

    def __iand__(self, other: Iterable[T]) -> ObservableSet[T]:
        self.intersection_update(other)
        return self

    def __isub__(self, other: Iterable[T]) -> ObservableSet[T]:
        self.difference_update(other)
        return self

    def __ixor__(self, other: Iterable[T]) -> ObservableSet[T]:
        self.symmetric_difference_update(other)
        return self

    def dispose(self) -> None:
        """Clear, then drop this set's own subscribers."""
        self.clear()
        self._updated.clear()
        self._changed.clear()

    # --- Pickling ---

    def __getstate__(self) -> dict[str, Any]:
        return {"items": list(self._items)}

    def __setstate__(self, state: dict[str, Any]) -> None:
        self._updated = Signal()
        self._changed = Signal()
        self._items = set(state["items"])
        self._subscriptions = {}
        for item in self._items:
            self._attach(item)
        logger.debug("Rewired %d nested observables after load", len(self._subscriptions))

    def __repr__(self) -> str:
        return f"ObservableSet({self._items!r})"
