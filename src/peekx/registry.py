"""Path registry — last-observed values and the observers behind each path.

Paths keep registration order (dict insertion order); the change detector
walks them in that order.

Pruning is lazy: removing an observer leaves paths with an empty observer
set behind, and the next recheck that meets such a path drops it.
"""

from __future__ import annotations

from typing import Callable, Iterable

from peekx.paths import MISSING, Path

Observer = Callable[[], object]


class PathRegistry:
    """Many-to-many table of dependency paths and observers."""

    __slots__ = ("_values", "_observers", "_paths")

    def __init__(self) -> None:
        self._values: dict[Path, object] = {}
        self._observers: dict[Path, set[Observer]] = {}
        # observer -> insertion-ordered set of paths
        self._paths: dict[Observer, dict[Path, None]] = {}

    # --- Observers ---

    def add_observer(self, observer: Observer) -> None:
        self._paths.setdefault(observer, {})

    def has_observer(self, observer: Observer) -> bool:
        return observer in self._paths

    @property
    def observers(self) -> list[Observer]:
        return list(self._paths)

    def active_observers(self) -> set[Observer]:
        """Observers currently tracking at least one path."""
        return {observer for observer, paths in self._paths.items() if paths}

    def paths_of(self, observer: Observer) -> tuple[Path, ...]:
        return tuple(self._paths.get(observer, ()))

    def remove_observer(self, observer: Observer) -> bool:
        """Forget observer. Emptied paths are left for lazy pruning."""
        paths = self._paths.pop(observer, None)
        if paths is None:
            return False
        for path in paths:
            observers = self._observers.get(path)
            if observers is not None:
                observers.discard(observer)
        return True

    # --- Paths ---

    def record(self, observer: Observer, path: Path, value: object) -> None:
        """Store the value just read at path and subscribe observer to it."""
        paths = self._paths.get(observer)
        if paths is None:
            return
        self._values[path] = value
        self._observers.setdefault(path, set()).add(observer)
        paths[path] = None

    def discard(self, observer: Observer, path: Path) -> None:
        """Stop observer tracking path; drop the entry if nobody else does."""
        paths = self._paths.get(observer)
        if paths is not None:
            paths.pop(path, None)
        observers = self._observers.get(path)
        if observers is None:
            return
        observers.discard(observer)
        if not observers:
            del self._observers[path]
            self._values.pop(path, None)

    def prune(self, path: Path) -> bool:
        """Drop path if no observer tracks it any more."""
        if self._observers.get(path):
            return False
        self._observers.pop(path, None)
        self._values.pop(path, None)
        return True

    def last_value(self, path: Path) -> object:
        return self._values.get(path, MISSING)

    def update(self, path: Path, value: object) -> None:
        if path in self._values:
            self._values[path] = value

    def observers_of(self, path: Path) -> frozenset[Observer]:
        return frozenset(self._observers.get(path, ()))

    def tracked_paths(self, scope: Iterable[Path] | None = None) -> list[Path]:
        """Snapshot of tracked paths in registration order, optionally filtered."""
        if scope is None:
            return list(self._values)
        wanted = set(scope)
        return [path for path in self._values if path in wanted]

    def clear(self) -> None:
        self._values.clear()
        self._observers.clear()
        for paths in self._paths.values():
            paths.clear()

    def __contains__(self, path: object) -> bool:
        return path in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PathRegistry({len(self._values)} paths, {len(self._paths)} observers)"
