"""Linked stores — every nested object keeps its own local registry.

Instead of one registry of full paths, each object reached from the root
records which observers read which of its own properties. A write or call
on any object diffs that object's ancestors (whose getters may derive from
it) and descendants (which a method may have mutated), then notifies the
union of affected observers once. Sibling and cousin objects are skipped.

All state lives in an Arena; proxies are thin handles holding an integer.
"""

from __future__ import annotations

import logging
from typing import Callable

from peekx._anchor import Arena
from peekx.errors import StoreFactoryError
from peekx.hooks import Hooks
from peekx.kinds import ValueKind, classify
from peekx.notifier import notify
from peekx.paths import Segment, step
from peekx.proxy import Interceptor
from peekx.registry import Observer
from peekx.subscription import Subscription

logger = logging.getLogger("peekx.linked")

_get = object.__getattribute__
_set = object.__setattr__


class LinkedProxy(Interceptor):
    """Proxy over one object of a LinkedStore, addressed by arena handle.

    Once its object is replaced in the tree, a proxy keeps working on that
    object but tracks and notifies nothing; objects read through it get
    handle None.
    """

    __slots__ = ("_handle", "_owner")

    def __init__(
        self,
        subscription: Subscription,
        target: object,
        handle: int | None,
        owner: int | None = None,
    ) -> None:
        super().__init__(subscription, target)
        _set(self, "_handle", handle)
        _set(self, "_owner", owner)

    def _track(self, segment: Segment, value: object) -> None:
        sub = _get(self, "_sub")
        sub.engine.arena.subscribe(_get(self, "_handle"), segment, sub.observer)

    def _wrap(self, segment: Segment, value: object) -> object:
        if classify(value) is ValueKind.SCALAR:
            return value
        sub = _get(self, "_sub")
        handle = _get(self, "_handle")
        child = sub.engine.arena.child(handle, segment, value)
        return LinkedProxy(sub, value, child, owner=handle)

    def _write(self, segment: Segment, apply: Callable[[], None]) -> None:
        _get(self, "_sub").engine.apply_change(_get(self, "_handle"), apply)

    def _call(self, call: Callable[[], object]) -> object:
        owner = _get(self, "_owner")
        if owner is None:
            owner = _get(self, "_handle")
        return _get(self, "_sub").engine.apply_change(owner, call)


class LinkedStore:
    """Subscribe observers to an existing object graph.

    Usage:
        class Child:
            value = 1

        class Parent:
            def __init__(self):
                self.child = Child()

            @property
            def doubled(self):
                return self.child.value * 2

        linked = LinkedStore(Parent())
        store, unsubscribe = linked.subscribe(rerender)
        store.doubled                # tracked on the parent
        other, _ = linked.subscribe(lambda: None)
        other.child.value = 5        # rerender runs: doubled changed
    """

    def __init__(self, root: object, *, has_changed=None) -> None:
        if classify(root) is not ValueKind.CONTAINER:
            raise StoreFactoryError(
                f"cannot link a {type(root).__name__}, expected an object"
            )
        self.root = root
        self.hooks = Hooks(has_changed=has_changed)
        self.arena = Arena()
        self.root_handle = self.arena.new_handle(root)
        self._subscribers: dict[Observer, int] = {}

    @property
    def subscriber_count(self) -> int:
        return sum(self._subscribers.values())

    def subscribe(self, observer: Observer) -> Subscription:
        self._subscribers[observer] = self._subscribers.get(observer, 0) + 1
        return Subscription(self, observer)

    __call__ = subscribe

    def _wrap_root(self, subscription: Subscription) -> LinkedProxy:
        return LinkedProxy(subscription, self.root, self.root_handle)

    def _release(self, subscription: Subscription) -> None:
        observer = subscription.observer
        remaining = self._subscribers.get(observer, 0) - 1
        if remaining > 0:
            self._subscribers[observer] = remaining
            return
        self._subscribers.pop(observer, None)
        self.arena.unsubscribe(observer)

    def apply_change(self, handle: int | None, change: Callable[[], object]) -> object:
        """Run change, then notify observers of anything it changed nearby."""
        stores = self.arena.related(handle)
        before = [self.arena.snapshot(related) for related in stores]
        result = change()

        affected: dict[Observer, None] = {}
        for related, old_values in zip(stores, before):
            target = self.arena.targets.get(related)
            by_segment = self.arena.subscriptions.get(related, {})
            base = self.arena.path(related)
            for segment, previous in old_values.items():
                current = step(target, segment)
                path = base.child(segment)
                if self.hooks.changed(self.root, previous, current, path):
                    logger.debug('Path "%s" changed from %r to %r', path, previous, current)
                    affected.update(dict.fromkeys(by_segment.get(segment, ())))

        updated = notify(affected, self._subscribers.__contains__)
        logger.debug("Change on store %s updated %d subscribers", handle, updated)
        return result
