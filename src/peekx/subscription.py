"""Subscription — one observer's handle on a store."""

from __future__ import annotations

from typing import Callable


class Subscription:
    """An observer's live view of a store.

    Unpacks as ``store, unsubscribe = engine.subscribe(observer)``, and works
    as a context manager yielding the store proxy. ``unsubscribe`` is safe to
    call any number of times.
    """

    __slots__ = ("_engine", "_observer", "_active", "_store")

    def __init__(self, engine, observer: Callable[[], object]) -> None:
        self._engine = engine
        self._observer = observer
        self._active = True
        self._store = engine._wrap_root(self)

    @property
    def engine(self):
        return self._engine

    @property
    def observer(self) -> Callable[[], object]:
        return self._observer

    @property
    def active(self) -> bool:
        return self._active

    @property
    def store(self):
        return self._store

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._engine._release(self)

    def __iter__(self):
        yield self._store
        yield self.unsubscribe

    def __enter__(self):
        return self._store

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        state = "active" if self._active else "unsubscribed"
        return f"Subscription({self._observer!r}, {state})"
