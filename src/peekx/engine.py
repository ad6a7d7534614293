"""Store engine — owns one live store and every subscription to it.

The store is created by a factory on first subscription and torn down when
the last subscriber leaves, unless ``keep_alive`` or ``on_cleanup`` retain
it for the next subscriber.

Rechecks triggered by setters and method calls are batched: inside a
method call or ``transaction()`` they are deferred, and a single recheck
runs when the outermost scope exits.
"""

from __future__ import annotations

import enum
import inspect
import logging
from contextlib import contextmanager
from typing import Callable, Generic, TypeVar

from peekx.detector import recheck
from peekx.errors import StoreFactoryError
from peekx.hooks import Hooks
from peekx.kinds import ValueKind, classify
from peekx.notifier import notify, observers_for
from peekx.paths import ROOT, Path
from peekx.proxy import TrackingProxy
from peekx.registry import Observer, PathRegistry
from peekx.subscription import Subscription

logger = logging.getLogger("peekx.engine")

T = TypeVar("T")

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class StoreState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LIVE = "live"


def _wants_trigger(parameter: inspect.Parameter) -> bool:
    if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
        return True
    return parameter.kind in _POSITIONAL and parameter.default is inspect.Parameter.empty


def _accepts_trigger(factory: Callable) -> bool:
    """Does factory require a positional argument for the manual recheck?

    Defaulted parameters keep their defaults; ``Counter(count=0)`` is built
    as ``Counter()``.
    """
    try:
        parameters = inspect.signature(factory).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(_wants_trigger(parameter) for parameter in parameters)


class StoreEngine(Generic[T]):
    """Subscribe observers to a lazily created store.

    Usage:
        class Counter:
            count = 0

            def inc(self):
                self.count += 1

        counter = StoreEngine(Counter)
        store, unsubscribe = counter.subscribe(lambda: print("changed"))
        store.count      # tracked
        store.inc()      # prints "changed" once
        unsubscribe()
    """

    def __init__(
        self,
        factory: Callable[..., T],
        *,
        has_changed=None,
        on_get=None,
        on_set=None,
        on_method_call=None,
        on_cleanup=None,
        keep_alive: bool = False,
    ) -> None:
        self._factory = factory
        self.hooks = Hooks(has_changed, on_get, on_set, on_method_call, on_cleanup)
        self.keep_alive = keep_alive
        self.registry = PathRegistry()
        self._store: T | None = None
        self._state = StoreState.UNINITIALIZED
        self._subscribers: dict[Observer, int] = {}
        self._batch_depth = 0
        self._pending: str | None = None

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def store(self) -> T | None:
        """The raw store, or None between teardown and the next subscriber."""
        return self._store

    @property
    def subscriber_count(self) -> int:
        return sum(self._subscribers.values())

    # --- Lifecycle ---

    def subscribe(self, observer: Observer) -> Subscription:
        """Subscribe observer; returns its Subscription (store proxy + unsubscribe)."""
        if self._state is StoreState.UNINITIALIZED:
            self._create()
        self._subscribers[observer] = self._subscribers.get(observer, 0) + 1
        self.registry.add_observer(observer)
        return Subscription(self, observer)

    __call__ = subscribe

    def _create(self) -> None:
        if _accepts_trigger(self._factory):
            store = self._factory(self.check_for_updates)
        else:
            store = self._factory()
        if classify(store) is not ValueKind.CONTAINER:
            raise StoreFactoryError(
                f"store factory returned {type(store).__name__}, expected an object"
            )
        self._store = store
        self._state = StoreState.LIVE
        logger.debug("Created new store %r", store)

    def _wrap_root(self, subscription: Subscription) -> TrackingProxy:
        return TrackingProxy(subscription, self._store, ROOT)

    def _release(self, subscription: Subscription) -> None:
        observer = subscription.observer
        remaining = self._subscribers.get(observer, 0) - 1
        if remaining > 0:
            self._subscribers[observer] = remaining
        else:
            self._subscribers.pop(observer, None)
            self.registry.remove_observer(observer)
        if not self._subscribers and self._state is StoreState.LIVE:
            self._teardown()

    def _teardown(self) -> None:
        store = self._store
        if not self.hooks.allows_cleanup(store) or self.keep_alive:
            logger.debug("Keeping store %r for the next subscriber", store)
            return
        logger.debug("Deleting store %r", store)
        self._store = None
        self._state = StoreState.UNINITIALIZED
        self.registry.clear()

    # --- Rechecks ---

    def check_for_updates(self, reason: str | None = None) -> int:
        """Recheck every tracked path now and notify affected observers.

        Returns the number of observers notified. This is the manual trigger
        handed to one-argument store factories; it never waits for an
        enclosing batch.
        """
        logger.debug(reason or "Manual call triggered check for updates")
        if self._store is None:
            return 0
        changed = recheck(self.registry, self._store, self._changed)
        updated = notify(observers_for(self.registry, changed), self.registry.has_observer)
        logger.debug("Finished checking for updates. Subscribers updated: %d", updated)
        return updated

    def request_check(self, reason: str) -> None:
        """Recheck now, or at the end of the enclosing batch."""
        if self._batch_depth:
            if self._pending is None:
                self._pending = reason
            return
        self.check_for_updates(reason)

    def _changed(self, previous: object, current: object, path: Path) -> bool:
        return self.hooks.changed(self._store, previous, current, path)

    @contextmanager
    def transaction(self):
        """Batch writes and calls made through proxies into one recheck.

        Usage:
            with engine.transaction():
                store.first = "Ada"
                store.last = "Lovelace"
            # observers of either name are notified once, here
        """
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._pending is not None:
                reason, self._pending = self._pending, None
                self.check_for_updates(reason)

    def __repr__(self) -> str:
        return f"StoreEngine({self._state.value}, {self.subscriber_count} subscribers)"


def create_store(factory: Callable[..., T] | None = None, /, **options) -> StoreEngine[T]:
    """Build a StoreEngine. Also usable as a decorator, with or without options.

    Usage:
        @create_store(keep_alive=True)
        class Settings:
            theme = "dark"

        store, unsubscribe = Settings.subscribe(rerender)
    """
    if factory is None:
        return lambda fn: StoreEngine(fn, **options)
    return StoreEngine(factory, **options)
