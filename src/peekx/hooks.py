"""Hook policy — caller-supplied callbacks that can veto default behavior.

Every hook answers tri-state: ``False`` vetoes, ``True`` or ``None`` keeps
the default. Exceptions raised by a hook propagate to whoever triggered it.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from peekx.kinds import strictly_changed
from peekx.paths import Path, SegmentKind


class AccessInfo(NamedTuple):
    """Argument bag for on_get, on_set and on_method_call."""

    store: object
    path: str
    obj: object
    key: object


class ChangeInfo(NamedTuple):
    """Argument bag for has_changed."""

    previous_value: object
    current_value: object
    path: str
    store: object


class Hooks:
    """The optional callbacks configured on an engine."""

    __slots__ = ("has_changed", "on_get", "on_set", "on_method_call", "on_cleanup")

    def __init__(
        self,
        has_changed: Callable[[ChangeInfo], bool | None] | None = None,
        on_get: Callable[[AccessInfo], bool | None] | None = None,
        on_set: Callable[[AccessInfo], bool | None] | None = None,
        on_method_call: Callable[[AccessInfo], bool | None] | None = None,
        on_cleanup: Callable[[object], bool | None] | None = None,
    ) -> None:
        self.has_changed = has_changed
        self.on_get = on_get
        self.on_set = on_set
        self.on_method_call = on_method_call
        self.on_cleanup = on_cleanup

    def changed(self, store, previous, current, path: Path) -> bool:
        leaf = path.leaf
        if leaf is not None and leaf.kind is SegmentKind.SHAPE:
            # shapes are rebuilt on every read; internal, never shown to has_changed
            return previous != current
        if self.has_changed is not None:
            verdict = self.has_changed(ChangeInfo(previous, current, str(path), store))
            if verdict is not None:
                return bool(verdict)
        return strictly_changed(previous, current)

    def allows_get(self, store, path: Path, obj, key) -> bool:
        return _allows(self.on_get, AccessInfo(store, str(path), obj, key))

    def allows_set(self, store, path: Path, obj, key) -> bool:
        return _allows(self.on_set, AccessInfo(store, str(path), obj, key))

    def allows_method_call(self, store, path: Path, obj, key) -> bool:
        return _allows(self.on_method_call, AccessInfo(store, str(path), obj, key))

    def allows_cleanup(self, store) -> bool:
        return self.on_cleanup is None or self.on_cleanup(store) is not False


def _allows(hook, info: AccessInfo) -> bool:
    return hook is None or hook(info) is not False
