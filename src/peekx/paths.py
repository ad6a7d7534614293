"""Dependency paths — where in a store a value was read.

A path is the ordered sequence of hops from the store root to a read
location. Hops are attribute reads, item reads, or the synthetic "shape"
hop recorded when a container is measured or iterated.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping, Set
from typing import NamedTuple


class SegmentKind(enum.Enum):
    ATTR = "attr"
    ITEM = "item"
    SHAPE = "shape"


class Segment(NamedTuple):
    """One hop along a path."""

    kind: SegmentKind
    key: object = None

    def __str__(self) -> str:
        if self.kind is SegmentKind.SHAPE:
            return "__shape__"
        return str(self.key)


SHAPE = Segment(SegmentKind.SHAPE)


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


# Value of a path that no longer resolves.
MISSING = _Missing()


class Path(tuple):
    """Immutable sequence of Segments. ``str(path)`` is the dot-joined form."""

    __slots__ = ()

    def child(self, segment: Segment) -> Path:
        return Path((*self, segment))

    @property
    def leaf(self) -> Segment | None:
        return self[-1] if self else None

    def __str__(self) -> str:
        return ".".join(str(segment) for segment in self)

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"


ROOT = Path()


def shape_of(container) -> object:
    """Comparable summary of a container's membership."""
    if isinstance(container, Mapping):
        return tuple(container)
    if isinstance(container, Set):
        return frozenset(container)
    return len(container)


def step(obj, segment: Segment) -> object:
    """Follow a single hop, or MISSING if it does not resolve."""
    kind, key = segment
    try:
        if kind is SegmentKind.ATTR:
            return getattr(obj, key)
        if kind is SegmentKind.ITEM:
            return obj[key]
        return shape_of(obj)
    except (AttributeError, LookupError, TypeError):
        return MISSING


def resolve(root, path: Path) -> object:
    """Walk path from root and return the value found there."""
    value = root
    for segment in path:
        if value is MISSING:
            break
        value = step(value, segment)
    return value
