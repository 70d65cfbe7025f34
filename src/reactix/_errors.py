"""Reactix error hierarchy.

All reactix-specific errors inherit from ReactixError for easy catching.
Each one also derives from the built-in it refines, so callers that only
know about TypeError or LookupError still catch them.
"""


class ReactixError(Exception):
    """Base error for all reactix operations."""


class ContractError(ReactixError, TypeError):
    """A value handed to the API does not satisfy its contract (not callable, not observable)."""


class SubscriptionError(ReactixError, LookupError):
    """Disconnecting a handler that was never connected, or is already gone."""


class SnapshotStateError(ReactixError, LookupError):
    """Snapshot read before the first move_next() or after the last item."""
