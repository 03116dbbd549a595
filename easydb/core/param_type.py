"""
Bound value kinds.

Every value that ends up in a statement's parameter list is one of the scalar
kinds the backend understands: int, float, str, bool, bytes or None.
``coerce_value`` normalises binary buffers to ``bytes`` and rejects anything
else before it can reach the driver.
"""

from __future__ import annotations

from typing import Any, Iterable, Union

from easydb.core.exceptions import InvalidValue

SqlValue = Union[int, float, str, bool, bytes, None]

_SCALAR_TYPES = (bool, int, float, str, bytes)


def coerce_value(value: Any) -> SqlValue:
    """Return *value* as a ``SqlValue`` or raise ``InvalidValue``."""
    if value is None or isinstance(value, _SCALAR_TYPES):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise InvalidValue(
        f"Unsupported value type {type(value).__name__}: expected int, float, "
        f"str, bool, bytes or None"
    )


def coerce_values(values: Iterable[Any]) -> tuple[SqlValue, ...]:
    return tuple(coerce_value(v) for v in values)
