"""Textual integration for peekx. Opt-in — requires textual.

A widget subscribes on mount and unsubscribes on unmount; the observer
usually calls ``refresh()`` or updates a few child widgets.

    from peekx import textual as ptx

    class Counter(Static):
        def on_mount(self):
            self._sub = ptx.subscribe(self.app, counter_store, self.redraw)
            self.redraw()

        def redraw(self):
            self.update(str(self._sub.store.count))

        def on_unmount(self):
            self._sub.unsubscribe()
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

# Module-owned pause state — keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend notifications to this app's observers during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def subscribe(app, engine, on_change):
    """Subscribe on_change to engine, bridged safely to Textual widgets.

    Skips notifications while the app is paused or not running, swallows
    NoMatches from widget queries, and marshals notifications arriving on
    another thread via call_from_thread. Works with StoreEngine and
    LinkedStore. Returns the Subscription.
    """
    _main = threading.get_ident()

    def _guarded():
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe)
        else:
            _safe()

    def _safe():
        try:
            on_change()
        except NoMatches:
            pass

    return engine.subscribe(_guarded)
