"""Value kinds — decides at wrap time whether a read value is wrapped."""

from __future__ import annotations

import datetime
import decimal
import enum
import fractions


class ValueKind(enum.Enum):
    SCALAR = "scalar"
    CONTAINER = "container"
    CALLABLE = "callable"


SCALAR_TYPES = (
    type(None),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    enum.Enum,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    decimal.Decimal,
    fractions.Fraction,
)


def classify(value: object) -> ValueKind:
    """Tag a value as SCALAR, CONTAINER or CALLABLE.

    Classes count as containers so their class-level members can be
    observed. Anything else that is neither a known scalar nor callable is
    a container.
    """
    if isinstance(value, type):
        return ValueKind.CONTAINER
    if isinstance(value, SCALAR_TYPES):
        return ValueKind.SCALAR
    if callable(value):
        return ValueKind.CALLABLE
    return ValueKind.CONTAINER


def strictly_changed(previous: object, current: object) -> bool:
    """Default change test.

    Containers compare by identity. Scalars and callables compare with
    ``!=``, since bound methods are rebuilt on every attribute access.
    """
    if previous is current:
        return False
    if (
        classify(previous) is ValueKind.CONTAINER
        or classify(current) is ValueKind.CONTAINER
    ):
        return True
    return bool(previous != current)
