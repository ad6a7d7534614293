"""Data anchor — plain Python structures describing a tree of linked stores.

Every object reached from a LinkedStore root gets an integer handle. All
per-store data (the object itself, its parent, its children and the
observers subscribed to each of its properties) lives in dicts keyed by
that handle, never by object identity.
"""

from __future__ import annotations

import itertools

from peekx.kinds import ValueKind, classify
from peekx.paths import Path, Segment, step


def _same(held: object, value: object) -> bool:
    if held is value:
        return True
    # bound methods are rebuilt on every read
    return classify(value) is ValueKind.CALLABLE and held == value


class Arena:
    """Handle-indexed store metadata for one root."""

    def __init__(self) -> None:
        self.targets: dict[int, object] = {}
        self.parents: dict[int, int | None] = {}
        self.children: dict[int, dict[Segment, int]] = {}
        self.segments: dict[int, Segment] = {}
        self.subscriptions: dict[int, dict[Segment, set]] = {}
        # itertools.count is thread-safe (C-level GIL atomic)
        self._ids = itertools.count(1)

    def new_handle(self, target: object, parent: int | None = None) -> int:
        handle = next(self._ids)
        self.targets[handle] = target
        self.parents[handle] = parent
        self.children[handle] = {}
        self.subscriptions[handle] = {}
        return handle

    def child(self, handle: int | None, segment: Segment, target: object) -> int | None:
        """Handle for target found at segment under handle.

        Reused while the same object still sits there; a replaced child is
        released together with its subtree. Objects reached from a released
        handle are no longer part of the tree and get None.
        """
        siblings = self.children.get(handle)
        if siblings is None:
            return None
        existing = siblings.get(segment)
        if existing is not None:
            if _same(self.targets[existing], target):
                return existing
            self.release(existing)
        created = self.new_handle(target, parent=handle)
        siblings[segment] = created
        self.segments[created] = segment
        return created

    def release(self, handle: int) -> None:
        for child in list(self.children.get(handle, {}).values()):
            self.release(child)
        parent = self.parents.pop(handle, None)
        if parent is not None:
            siblings = self.children.get(parent, {})
            for segment, sibling in list(siblings.items()):
                if sibling == handle:
                    del siblings[segment]
        self.targets.pop(handle, None)
        self.children.pop(handle, None)
        self.segments.pop(handle, None)
        self.subscriptions.pop(handle, None)

    def subscribe(self, handle: int, segment: Segment, observer) -> None:
        by_segment = self.subscriptions.get(handle)
        if by_segment is not None:
            by_segment.setdefault(segment, set()).add(observer)

    def unsubscribe(self, observer) -> None:
        for by_segment in self.subscriptions.values():
            for observers in by_segment.values():
                observers.discard(observer)

    def ancestors(self, handle: int | None) -> list[int]:
        """handle and its ancestors, root first."""
        chain = []
        while handle is not None:
            chain.append(handle)
            handle = self.parents.get(handle)
        chain.reverse()
        return chain

    def descendants(self, handle: int) -> list[int]:
        found = []
        for child in self.children.get(handle, {}).values():
            found.append(child)
            found.extend(self.descendants(child))
        return found

    def related(self, handle: int) -> list[int]:
        """Ancestors and descendants of handle; siblings and cousins excluded."""
        return self.ancestors(handle) + self.descendants(handle)

    def snapshot(self, handle: int) -> dict[Segment, object]:
        """Current values of every subscribed property of one store."""
        if handle not in self.targets:
            return {}
        target = self.targets[handle]
        return {segment: step(target, segment) for segment in self.subscriptions[handle]}

    def path(self, handle: int) -> Path:
        """Segments leading from the root to handle."""
        return Path(
            self.segments[hop] for hop in self.ancestors(handle) if hop in self.segments
        )
