"""Persisted attributes — store properties backed by a key-value medium.

The engines treat these like any other attribute: reading one through a
proxy tracks it, writing one through a proxy rechecks. Changes made to
the backend from elsewhere (another process, another window) become
visible once the store calls its manual recheck.
"""

from __future__ import annotations

from collections.abc import MutableMapping


class persisted:
    """Data descriptor reading and writing ``backend[key]``.

    Usage:
        prefs = shelve.open("prefs.db")

        class Settings:
            theme = persisted("theme", "light", backend=prefs)

    Backends that rebuild values on every read (``shelve`` unpickles) hand
    back a fresh object each time, so prefer scalar values or pass a
    ``has_changed`` that compares containers by content.
    """

    def __init__(self, key: str, default: object = None, *, backend: MutableMapping) -> None:
        self.key = key
        self.default = default
        self.backend = backend
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: object, objtype: type | None = None) -> object:
        if obj is None:
            return self
        return self.backend.get(self.key, self.default)

    def __set__(self, obj: object, value: object) -> None:
        self.backend[self.key] = value

    def __delete__(self, obj: object) -> None:
        self.backend.pop(self.key, None)

    def __repr__(self) -> str:
        return f"persisted({self.key!r}, default={self.default!r})"
