"""Textual integration for reactix. Opt-in — requires textual.

bind() pushes every change of a typed observable (a Property, a Computed,
an ObservableSet) into a widget-updating effect and returns a Binding.
Effects only run while the app is running; NoMatches from a widget query
means the widget is not mounted right now and is skipped.

pause(*bindings) suspends bindings during widget replacement by disposing
their subscriptions, then reconnects them and pushes the current value so
the new widgets catch up on anything that changed meanwhile.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from textual.css.query import NoMatches

from reactix._errors import ContractError
from reactix.observable import TypedObservable
from reactix.signal import Subscription

logger = logging.getLogger("reactix.textual")


class Binding:
    """A typed observable wired to a Textual effect."""

    __slots__ = ("_app", "_source", "_effect", "_subscription", "_disposed")

    def __init__(self, app, source: TypedObservable, effect: Callable[[Any], Any]) -> None:
        if not isinstance(source, TypedObservable):
            raise ContractError(f"bind() needs a typed observable, got {source!r}")
        if not callable(effect):
            raise ContractError(f"bound effect must be callable, got {effect!r}")
        self._app = app
        self._source = source
        self._effect = effect
        self._disposed = False
        self._subscription: Subscription = source.changed.connect(self._deliver)

    @property
    def active(self) -> bool:
        """Connected: not suspended by pause() and not disposed."""
        return self._subscription.active

    @property
    def disposed(self) -> bool:
        return self._disposed

    def refresh(self) -> None:
        """Push the source's current value through the effect."""
        self._deliver(self._source.get())

    def suspend(self) -> None:
        self._subscription.dispose()

    def resume(self) -> None:
        """Reconnect and catch up. No-op if active or disposed."""
        if self._disposed or self.active:
            return
        self._subscription = self._source.changed.connect(self._deliver)
        self.refresh()

    def dispose(self) -> None:
        self._disposed = True
        self._subscription.dispose()

    def _deliver(self, value) -> None:
        if not self._app.is_running:
            return
        try:
            self._effect(value)
        except NoMatches:
            logger.debug("Bound effect %r found no widget; skipped", self._effect)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else ("active" if self.active else "suspended")
        return f"Binding({self._source!r}, {state})"


def bind(
    app, source: TypedObservable, effect: Callable[[Any], Any], *, fire_immediately: bool = False
) -> Binding:
    """Run effect(value) on every change of source while app is running.

    Usage:
        status = Property("idle")
        binding = bind(app, status, lambda s: app.query_one("#status").update(s))
    """
    binding = Binding(app, source, effect)
    if fire_immediately:
        binding.refresh()
    return binding


@contextmanager
def pause(*bindings: Binding) -> Iterator[None]:
    """Suspend bindings for the duration of the block, then resume and refresh them.

    Only bindings that were active on entry are resumed, so nested pauses
    over the same binding resume it once, at the outermost exit.
    """
    suspended = [binding for binding in bindings if binding.active]
    for binding in suspended:
        binding.suspend()
    try:
        yield
    finally:
        for binding in suspended:
            binding.resume()
