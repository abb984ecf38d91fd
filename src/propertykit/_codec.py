"""Storage representation of values.

A closed set of native types (``str``, ``bool``, ``int``, ``float`` and
``datetime``) is handed to the backend as-is. Everything else goes through
a pydantic :class:`~pydantic.TypeAdapter` and is stored as JSON bytes.
"""

from __future__ import annotations

import functools
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from propertykit.exceptions import DefaultsDecodeError, DefaultsEncodeError

NATIVE_TYPES: tuple[type, ...] = (str, bool, int, float, datetime)


def is_native_type(value_type: Any) -> bool:
    """Return ``True`` when *value_type* is stored natively by the backend.

    Membership is exact: subclasses (``IntEnum``, ``bool`` for ``int``)
    are not native and use the structured codec.
    """
    return any(value_type is native for native in NATIVE_TYPES)


def is_native_value(value: Any) -> bool:
    return is_native_type(type(value))


def coerce_native(value: Any, value_type: type) -> Any:
    """Return *value* when it can be read back as *value_type*, else ``None``."""
    if value is None:
        return None
    if value_type is bool:
        return value if isinstance(value, bool) else None
    if value_type is int:
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value
    if value_type is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)
    if value_type is str:
        return value if isinstance(value, str) else None
    if value_type is datetime:
        return value if isinstance(value, datetime) else None
    return None


@functools.lru_cache(maxsize=256)
def _adapter(value_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(value_type)


def encode(value: Any, value_type: Any, *, key: str = "") -> bytes:
    """Encode *value* as JSON bytes using the schema of *value_type*."""
    try:
        return _adapter(value_type).dump_json(value)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise DefaultsEncodeError(f"Cannot encode value for {key!r}: {exc}", key=key) from exc


def decode(data: bytes, value_type: Any, *, key: str = "") -> Any:
    """Decode JSON bytes into *value_type*.

    Raises
    ------
    DefaultsDecodeError
        When the bytes are not valid JSON or do not match the schema.
    """
    try:
        return _adapter(value_type).validate_json(data)
    except ValidationError as exc:
        raise DefaultsDecodeError(
            f"Stored value for {key!r} does not decode as {value_type!r}: {exc.error_count()} error(s)",
            key=key,
        ) from exc
