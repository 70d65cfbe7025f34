"""Tests for reactix.textual — Textual integration layer."""

import pytest
from textual.css.query import NoMatches

from reactix import ContractError, Notifier, ObservableSet, Property
from reactix import textual as rtx


class _MockApp:
    """Minimal mock matching the Textual App interface rtx needs."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running


class TestBind:
    def test_skips_when_not_running(self):
        app = _MockApp(is_running=False)
        p = Property(1)
        effects = []
        rtx.bind(app, p, effects.append)
        p.set(2)
        assert effects == []

    def test_fires_when_running(self):
        app = _MockApp()
        p = Property(1)
        effects = []
        rtx.bind(app, p, effects.append)
        p.set(2)
        assert effects == [2]

    def test_fire_immediately(self):
        app = _MockApp()
        p = Property("start")
        effects = []
        rtx.bind(app, p, effects.append, fire_immediately=True)
        assert effects == ["start"]

    def test_binds_typed_containers(self):
        app = _MockApp()
        s = ObservableSet()
        sizes = []
        rtx.bind(app, s, lambda items: sizes.append(len(items)))
        s.add("a")
        assert sizes == [1]

    def test_fire_immediately_with_set_passes_the_set(self):
        app = _MockApp()
        s = ObservableSet({"a"})
        out = []
        rtx.bind(app, s, out.append, fire_immediately=True)
        assert len(out) == 1
        assert out[0] is s

    def test_rejects_untyped_observable(self):
        with pytest.raises(ContractError):
            rtx.bind(_MockApp(), Notifier(), lambda v: None)

    def test_rejects_non_callable_effect(self):
        with pytest.raises(ContractError):
            rtx.bind(_MockApp(), Property(1), "label")

    def test_catches_nomatch(self):
        """NoMatches from widget queries are silently swallowed."""
        app = _MockApp()
        p = Property(1)

        def _raise_nomatch(v):
            raise NoMatches("StatusFooter")

        # Should not raise
        binding = rtx.bind(app, p, _raise_nomatch)
        p.set(2)
        binding.dispose()

    def test_propagates_real_errors(self):
        """Non-NoMatches exceptions propagate normally."""
        app = _MockApp()
        p = Property(1)

        def _raise_value_error(v):
            raise ValueError("boom")

        rtx.bind(app, p, _raise_value_error)
        with pytest.raises(ValueError, match="boom"):
            p.set(2)

    def test_dispose_unbinds(self):
        app = _MockApp()
        p = Property(1)
        effects = []
        binding = rtx.bind(app, p, effects.append)
        p.set(2)
        binding.dispose()
        p.set(3)
        assert effects == [2]
        assert binding.disposed
        assert p.changed.subscriber_count == 0

    def test_resume_after_dispose_is_noop(self):
        app = _MockApp()
        p = Property(1)
        effects = []
        binding = rtx.bind(app, p, effects.append)
        binding.dispose()
        binding.resume()
        p.set(2)
        assert effects == []


class TestPause:
    def test_pause_suspends_and_catches_up(self):
        app = _MockApp()
        p = Property(1)
        effects = []
        binding = rtx.bind(app, p, effects.append)
        with rtx.pause(binding):
            assert not binding.active
            p.set(2)
            p.set(3)
            assert effects == []
        assert binding.active
        assert effects == [3]

    def test_pause_releases_the_subscription(self):
        p = Property(1)
        binding = rtx.bind(_MockApp(), p, lambda v: None)
        with rtx.pause(binding):
            assert p.changed.subscriber_count == 0
        assert p.changed.subscriber_count == 1

    def test_pause_restores_on_exception(self):
        p = Property(1)
        binding = rtx.bind(_MockApp(), p, lambda v: None)

        with pytest.raises(RuntimeError):
            with rtx.pause(binding):
                raise RuntimeError("oops")

        # Restored despite exception
        assert binding.active

    def test_nested_pause_resumes_once_at_outer_exit(self):
        app = _MockApp()
        p = Property(1)
        effects = []
        binding = rtx.bind(app, p, effects.append)
        with rtx.pause(binding):
            with rtx.pause(binding):
                p.set(2)
            assert not binding.active
            assert effects == []
        assert effects == [2]

    def test_pause_leaves_other_bindings_alone(self):
        app = _MockApp()
        p = Property(1)
        a, b = [], []
        paused = rtx.bind(app, p, a.append)
        rtx.bind(app, p, b.append)
        with rtx.pause(paused):
            p.set(2)
        assert b == [2]
        assert a == [2]  # the catch-up on resume

    def test_pause_does_not_mutate_app(self):
        app = _MockApp()
        binding = rtx.bind(app, Property(1), lambda v: None)
        attrs_before = set(vars(app))
        with rtx.pause(binding):
            assert set(vars(app)) == attrs_before
        assert set(vars(app)) == attrs_before
