"""Reactix: observable containers and reactive properties with eager, synchronous propagation."""

from importlib.metadata import version as _version

__version__ = _version("reactix")

from reactix._errors import ContractError, ReactixError, SnapshotStateError, SubscriptionError
from reactix.signal import Signal, Subscription
from reactix.observable import Observable, TypedObservable, Notifier, updated_signal
from reactix.containers import ObservableDict, ObservableSet, Snapshot
from reactix.property import BaseProperty, Property, Computed, computed, derive
# textual NOT auto-imported — opt-in only

__all__ = [
    "Signal",
    "Subscription",
    "Observable",
    "TypedObservable",
    "Notifier",
    "updated_signal",
    "ObservableDict",
    "ObservableSet",
    "Snapshot",
    "BaseProperty",
    "Property",
    "Computed",
    "computed",
    "derive",
    "ReactixError",
    "ContractError",
    "SubscriptionError",
    "SnapshotStateError",
]
