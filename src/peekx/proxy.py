"""Tracking interceptor — transparent proxies that record reads.

A proxy stands in for one object inside a store. Reads are recorded
against the owning subscription's observer, writes are applied to the
real object before a recheck is requested, and calls run on the real
callable before the same recheck. Nested containers and callables come
back wrapped, one path segment deeper.

Proxies are revoked when their subscription ends: any further use raises
ReferenceError.
"""

from __future__ import annotations

from collections.abc import Sequence, Sized
from typing import TYPE_CHECKING, Callable

from peekx.kinds import ValueKind, classify
from peekx.paths import ROOT, SHAPE, Path, Segment, SegmentKind, shape_of

if TYPE_CHECKING:
    from peekx.subscription import Subscription

_get = object.__getattribute__
_set = object.__setattr__


def _target(proxy: Interceptor) -> object:
    if not _get(proxy, "_sub").active:
        raise ReferenceError("store proxy used after unsubscribe")
    return _get(proxy, "_target")


def unwrap(value: object) -> object:
    """Return the real object behind a proxy, or value unchanged."""
    if isinstance(value, Interceptor):
        return _get(value, "_target")
    return value


class Interceptor:
    """Base proxy: protocol plumbing shared by every engine variant.

    Subclasses decide what a read, a write and a call mean through
    ``_track``, ``_wrap``, ``_write`` and ``_call``.
    """

    __slots__ = ("_sub", "_target")

    def __init__(self, subscription: Subscription, target: object) -> None:
        _set(self, "_sub", subscription)
        _set(self, "_target", target)

    # --- Variant seams ---

    def _track(self, segment: Segment, value: object) -> None:
        raise NotImplementedError

    def _wrap(self, segment: Segment, value: object) -> object:
        raise NotImplementedError

    def _write(self, segment: Segment, apply: Callable[[], None]) -> None:
        raise NotImplementedError

    def _call(self, call: Callable[[], object]) -> object:
        raise NotImplementedError

    def _measure(self, target: object) -> None:
        if isinstance(target, Sized):
            type(self)._track(self, SHAPE, shape_of(target))

    # --- Reads ---

    def __getattribute__(self, name: str) -> object:
        target = _target(self)
        value = getattr(target, name)
        if name == "__class__":
            return value
        cls = type(self)
        segment = Segment(SegmentKind.ATTR, name)
        cls._track(self, segment, value)
        return cls._wrap(self, segment, value)

    def __getitem__(self, key: object) -> object:
        target = _target(self)
        key = unwrap(key)
        value = target[key]
        cls = type(self)
        if isinstance(key, slice):
            cls._measure(self, target)
            return value
        segment = Segment(SegmentKind.ITEM, key)
        cls._track(self, segment, value)
        return cls._wrap(self, segment, value)

    def __len__(self) -> int:
        target = _target(self)
        type(self)._measure(self, target)
        return len(target)

    def __iter__(self):
        target = _target(self)
        type(self)._measure(self, target)
        if isinstance(target, Sequence):
            return iter([self[index] for index in range(len(target))])
        return iter(target)

    def __contains__(self, item: object) -> bool:
        target = _target(self)
        type(self)._measure(self, target)
        return unwrap(item) in target

    def __bool__(self) -> bool:
        target = _target(self)
        type(self)._measure(self, target)
        return bool(target)

    # --- Writes ---

    def __setattr__(self, name: str, value: object) -> None:
        target = _target(self)
        value = unwrap(value)
        type(self)._write(
            self,
            Segment(SegmentKind.ATTR, name),
            lambda: setattr(target, name, value),
        )

    def __delattr__(self, name: str) -> None:
        target = _target(self)
        type(self)._write(
            self, Segment(SegmentKind.ATTR, name), lambda: delattr(target, name)
        )

    def __setitem__(self, key: object, value: object) -> None:
        target = _target(self)
        key, value = unwrap(key), unwrap(value)

        def apply() -> None:
            target[key] = value

        segment = SHAPE if isinstance(key, slice) else Segment(SegmentKind.ITEM, key)
        type(self)._write(self, segment, apply)

    def __delitem__(self, key: object) -> None:
        target = _target(self)
        key = unwrap(key)

        def apply() -> None:
            del target[key]

        segment = SHAPE if isinstance(key, slice) else Segment(SegmentKind.ITEM, key)
        type(self)._write(self, segment, apply)

    # --- Calls ---

    def __call__(self, *args, **kwargs) -> object:
        target = _target(self)
        args = tuple(unwrap(arg) for arg in args)
        kwargs = {name: unwrap(value) for name, value in kwargs.items()}
        return type(self)._call(self, lambda: target(*args, **kwargs))

    # --- Identity ---

    def __eq__(self, other: object) -> bool:
        return _target(self) == unwrap(other)

    def __ne__(self, other: object) -> bool:
        return _target(self) != unwrap(other)

    def __hash__(self) -> int:
        return hash(_target(self))

    def __dir__(self):
        return dir(_target(self))

    def __str__(self) -> str:
        return str(_target(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({_get(self, '_target')!r})"


class TrackingProxy(Interceptor):
    """Proxy over a value in a StoreEngine store, addressed by its full path.

    ``owner`` is the real object the value was read from; calls go to the
    callable as Python bound it on that object, so store methods see the
    real store as ``self`` and their internal writes are not intercepted.
    """

    __slots__ = ("_path", "_owner")

    def __init__(
        self,
        subscription: Subscription,
        target: object,
        path: Path = ROOT,
        owner: object = None,
    ) -> None:
        super().__init__(subscription, target)
        _set(self, "_path", path)
        _set(self, "_owner", owner)

    def _track(self, segment: Segment, value: object) -> None:
        sub = _get(self, "_sub")
        engine = sub.engine
        path = _get(self, "_path").child(segment)
        obj = _get(self, "_target")
        if engine.hooks.allows_get(engine.store, path, obj, segment.key):
            engine.registry.record(sub.observer, path, value)
        else:
            engine.registry.discard(sub.observer, path)

    def _wrap(self, segment: Segment, value: object) -> object:
        if classify(value) is ValueKind.SCALAR:
            return value
        return TrackingProxy(
            _get(self, "_sub"),
            value,
            _get(self, "_path").child(segment),
            owner=_get(self, "_target"),
        )

    def _write(self, segment: Segment, apply: Callable[[], None]) -> None:
        apply()
        engine = _get(self, "_sub").engine
        path = _get(self, "_path").child(segment)
        if engine.hooks.allows_set(engine.store, path, _get(self, "_target"), segment.key):
            engine.request_check(f'Setter at path "{path}" triggered check for updates')

    def _call(self, call: Callable[[], object]) -> object:
        engine = _get(self, "_sub").engine
        path = _get(self, "_path")
        leaf = path.leaf
        with engine.transaction():
            result = call()
            if engine.hooks.allows_method_call(
                engine.store, path, _get(self, "_owner"), leaf.key if leaf else None
            ):
                engine.request_check(
                    f'Method call at path "{path}" triggered check for updates'
                )
        return result
