"""Notifier — invokes each affected observer exactly once per recheck.

Observers are isolated from each other: one raising does not stop the rest
of the batch. Failures are logged and re-raised once the batch is done.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from peekx.errors import ObserverError
from peekx.paths import Path
from peekx.registry import Observer, PathRegistry

logger = logging.getLogger("peekx.notifier")


def observers_for(registry: PathRegistry, paths: Iterable[Path]) -> list[Observer]:
    """Union of observers tracking any of paths, without duplicates."""
    union: dict[Observer, None] = {}
    for path in paths:
        for observer in registry.observers_of(path):
            union[observer] = None
    return list(union)


def notify(
    observers: Iterable[Observer],
    is_live: Callable[[Observer], bool] | None = None,
) -> int:
    """Call each observer once. Returns how many were called.

    Observers that unsubscribed earlier in the same batch are skipped.
    """
    called = 0
    errors: list[ObserverError] = []
    for observer in observers:
        if is_live is not None and not is_live(observer):
            continue
        called += 1
        try:
            observer()
        except Exception as exc:
            logger.exception("Observer %r failed", observer)
            error = ObserverError(observer)
            error.__cause__ = exc
            errors.append(error)

    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ExceptionGroup(f"{len(errors)} observers failed", errors)
    return called
