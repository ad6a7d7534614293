"""Change detector — diffs tracked paths against the live store."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from peekx.paths import Path, resolve
from peekx.registry import PathRegistry

logger = logging.getLogger("peekx.detector")

ChangeTest = Callable[[object, object, Path], bool]


def recheck(
    registry: PathRegistry,
    root: object,
    changed: ChangeTest,
    scope: Iterable[Path] | None = None,
) -> list[Path]:
    """Return the paths whose value changed since they were last observed.

    Paths are visited in registration order. Every visited path has its
    last-observed value refreshed, so an immediate second recheck finds
    nothing. Paths nobody tracks any more are pruned instead of evaluated.
    Once every observer with tracked paths has been queued, remaining paths
    are only refreshed, without calling ``changed``.
    """
    waiting = registry.active_observers()
    changed_paths: list[Path] = []

    for path in registry.tracked_paths(scope):
        observers = registry.observers_of(path)
        if not observers:
            registry.prune(path)
            continue

        current = resolve(root, path)
        if waiting:
            previous = registry.last_value(path)
            if changed(previous, current, path):
                logger.debug(
                    'Path "%s" changed from %r to %r', path, previous, current
                )
                changed_paths.append(path)
                waiting -= observers
        registry.update(path, current)

    return changed_paths
