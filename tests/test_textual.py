"""Tests for peekx.textual — Textual integration layer."""

import threading
from types import SimpleNamespace

import pytest
from textual.css.query import NoMatches

from peekx import LinkedStore, ObserverError, StoreEngine
from peekx import textual as ptx


class _MockApp:
    """Minimal mock matching the Textual App interface ptx needs."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self._call_from_thread_log = []

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)


def _engine():
    return StoreEngine(lambda: SimpleNamespace(value=1))


class TestSubscribe:
    def test_skips_when_not_running(self):
        app = _MockApp(is_running=False)
        effects = []
        store, _ = ptx.subscribe(app, _engine(), lambda: effects.append(1))
        store.value
        store.value = 2
        assert effects == []

    def test_skips_during_pause(self):
        app = _MockApp()
        effects = []
        store, _ = ptx.subscribe(app, _engine(), lambda: effects.append(1))
        store.value
        with ptx.pause(app):
            store.value = 2
        assert effects == []

    def test_fires_when_safe(self):
        app = _MockApp()
        effects = []
        store, _ = ptx.subscribe(app, _engine(), lambda: effects.append(store.value))
        store.value
        store.value = 2
        assert effects == [2]

    def test_catches_nomatch(self):
        """NoMatches from widget queries are silently swallowed."""
        app = _MockApp()

        def _raise_nomatch():
            raise NoMatches("StatusFooter")

        store, _ = ptx.subscribe(app, _engine(), _raise_nomatch)
        store.value
        store.value = 2

    def test_propagates_real_errors(self):
        """Non-NoMatches exceptions propagate normally."""
        app = _MockApp()

        def _raise_value_error():
            raise ValueError("boom")

        store, _ = ptx.subscribe(app, _engine(), _raise_value_error)
        store.value
        with pytest.raises(ObserverError) as excinfo:
            store.value = 2
        assert isinstance(excinfo.value.__cause__, ValueError)

    def test_unsubscribe_stops_notifications(self):
        app = _MockApp()
        effects = []
        engine = _engine()
        store, unsubscribe = ptx.subscribe(app, engine, lambda: effects.append(1))
        writer, _ = engine.subscribe(lambda: None)
        store.value
        writer.value = 2
        assert effects == [1]
        unsubscribe()
        writer.value = 3
        assert effects == [1]

    def test_thread_marshal(self):
        """Notifications from a background thread use call_from_thread."""
        app = _MockApp()
        effects = []
        store, _ = ptx.subscribe(app, _engine(), lambda: effects.append(1))
        store.value

        def _bg():
            store.value = 2

        t = threading.Thread(target=_bg)
        t.start()
        t.join()

        assert effects == [1]
        assert len(app._call_from_thread_log) >= 1

    def test_linked_store(self):
        app = _MockApp()
        effects = []
        store, _ = ptx.subscribe(app, LinkedStore(SimpleNamespace(value=1)), lambda: effects.append(1))
        store.value
        store.value = 2
        assert effects == [1]


class TestPause:
    def test_pause_restores_on_exception(self):
        app = _MockApp()
        assert ptx.is_safe(app)

        with pytest.raises(RuntimeError):
            with ptx.pause(app):
                assert not ptx.is_safe(app)
                raise RuntimeError("oops")

        assert ptx.is_safe(app)

    def test_pause_does_not_mutate_app(self):
        app = _MockApp()
        attrs_before = set(vars(app))
        with ptx.pause(app):
            attrs_during = set(vars(app))
        attrs_after = set(vars(app))
        assert attrs_before == attrs_during, (
            f"pause() added attributes to app: {attrs_during - attrs_before}"
        )
        assert attrs_before == attrs_after

    def test_multiple_apps_independent(self):
        """Pausing one app does not affect another."""
        app_a = _MockApp()
        app_b = _MockApp()
        with ptx.pause(app_a):
            assert not ptx.is_safe(app_a)
            assert ptx.is_safe(app_b)
