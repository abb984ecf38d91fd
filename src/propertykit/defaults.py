"""Typed accessors over a namespaced key-value store.

:class:`Defaults` resolves how a value is stored (native or encoded),
and implements "read returns the value, or persists and returns the
supplied default".

Keys are explicit strings. :class:`DefaultsProperty` derives them from
the attribute name of a ``Defaults`` subclass so declaring a setting is
a one-liner::

    class AppDefaults(Defaults):
        user_name = DefaultsProperty(str)
        theme = DefaultsProperty(Theme, default=Theme())
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Any, ClassVar, Generic, TypeVar, overload

from propertykit import _codec
from propertykit._redact import describe_payload
from propertykit.backends import DefaultsBackend, MemoryBackend, SqliteBackend
from propertykit.config import PropertyKitConfig
from propertykit.exceptions import (
    DefaultNotPersistedError,
    DefaultsDecodeError,
    DefaultsEncodeError,
    DefaultsError,
)

_logger = logging.getLogger(__name__)

T = TypeVar("T")
_D = TypeVar("_D", bound="Defaults")


@dataclasses.dataclass(frozen=True)
class Property(Generic[T]):
    """One storage slot: a key and the type stored under it.

    Two properties address the same slot iff their keys are equal; the
    value type only drives encoding.
    """

    key: str
    value_type: Any = dataclasses.field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise DefaultsError("Property key must be a non-empty string")


def _slot_key(key: str | Property[Any]) -> str:
    return key.key if isinstance(key, Property) else key


def _build_backend(config: PropertyKitConfig, suite_name: str | None) -> DefaultsBackend:
    if config.backend == "sqlite":
        return SqliteBackend(config.db_path, suite_name)
    return MemoryBackend(suite_name)


class Defaults:
    """Typed get/set/clear over a :class:`DefaultsBackend`.

    Parameters
    ----------
    suite_name : str or None
        Namespace to open. Falls back to ``config.suite_name`` and then to
        the standard suite.
    backend : DefaultsBackend or None
        Explicit backend; when given, ``suite_name`` and the backend part of
        ``config`` are ignored.
    config : PropertyKitConfig or None
        Store configuration. Defaults to ``PropertyKitConfig()``.
    """

    _shared_instances: ClassVar[dict[type, Defaults]] = {}
    _shared_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        suite_name: str | None = None,
        *,
        backend: DefaultsBackend | None = None,
        config: PropertyKitConfig | None = None,
    ) -> None:
        self._config = config or PropertyKitConfig()
        if backend is None:
            backend = _build_backend(self._config, suite_name if suite_name is not None else self._config.suite_name)
        self._backend = backend

    @classmethod
    def shared(cls: type[_D]) -> _D:
        """Return the process-wide store of this class.

        Created from the environment on first use and kept for the lifetime
        of the process; subclasses get their own instance.
        """
        with Defaults._shared_lock:
            instance = Defaults._shared_instances.get(cls)
            if instance is None:
                instance = cls(config=PropertyKitConfig.from_env())
                Defaults._shared_instances[cls] = instance
            return instance  # type: ignore[return-value]

    @property
    def backend(self) -> DefaultsBackend:
        return self._backend

    @property
    def suite_name(self) -> str:
        return self._backend.suite_name

    # ------------------------------------------------------------------
    # Slot-level operations
    # ------------------------------------------------------------------

    def load(self, prop: Property[T]) -> T | None:
        """Read the slot of *prop*; ``None`` when absent or undecodable."""
        value_type = prop.value_type
        if value_type is None:
            raise DefaultsError(f"Cannot load {prop.key!r} without a value type")
        if _codec.is_native_type(value_type):
            return _codec.coerce_native(self._backend.get_value(prop.key), value_type)  # type: ignore[no-any-return]

        data = self._backend.get_bytes(prop.key)
        if data is None:
            return None
        try:
            return _codec.decode(data, value_type, key=prop.key)  # type: ignore[no-any-return]
        except DefaultsDecodeError:
            # Undecodable data reads as absent.
            if self._config.log_decode_failures:
                _logger.debug(
                    "Discarding undecodable value key=%s payload=%s",
                    prop.key,
                    describe_payload(data, key=prop.key),
                    exc_info=True,
                )
            return None

    def store(self, value: T, prop: Property[T]) -> None:
        """Write *value* into the slot of *prop*.

        Values that cannot be encoded are logged and leave the slot untouched.
        """
        value_type = prop.value_type if prop.value_type is not None else type(value)
        if _codec.is_native_type(value_type) and _codec.is_native_value(value):
            self._backend.set_value(value, prop.key)
            return

        try:
            data = _codec.encode(value, value_type, key=prop.key)
        except DefaultsEncodeError:
            _logger.debug("Cannot encode value for key=%s", prop.key, exc_info=True)
            return
        self._backend.set_bytes(data, prop.key)

    def clear(self, key: str | Property[Any]) -> None:
        """Delete the slot. No error when it is already absent."""
        self._backend.delete(_slot_key(key))

    def has(self, key: str | Property[Any]) -> bool:
        """Whether the backend holds anything for the slot, decodable or not."""
        return self._backend.contains(_slot_key(key))

    # ------------------------------------------------------------------
    # Keyed accessors
    # ------------------------------------------------------------------

    def set(
        self,
        value: T | None = None,
        *,
        key: str,
        value_type: Any = None,
        default: T | None = None,
    ) -> None:
        """Store *value* under *key*; ``None`` deletes the slot.

        When *default* is given it replaces a missing *value*, so
        ``set(None, default=d, key=k)`` stores ``d``.
        """
        if value is None:
            value = default
        if value is None:
            self.clear(key)
            return
        self.store(value, Property(key, value_type if value_type is not None else type(value)))

    def get(self, *, key: str, value_type: Any = None, default: T | None = None) -> T | None:
        """Return the value under *key*.

        An absent slot with a *default* gets the default written through and
        returned; without one the result is ``None``.
        """
        if value_type is None:
            if default is None:
                raise DefaultsError(f"Cannot resolve the value type for {key!r}; pass value_type or default")
            value_type = type(default)

        found: T | None = self.load(Property(key, value_type))
        if found is not None:
            return found

        if default is not None:
            self.set(None, key=key, value_type=value_type, default=default)
            return default

        return None

    def get_or_default(self, default: T, *, key: str, value_type: Any = None) -> T:
        """Like :meth:`get` with a mandatory default; never returns ``None``.

        Raises
        ------
        DefaultNotPersistedError
            When the default was not readable after being written.
        """
        if default is None:
            raise DefaultsError(f"get_or_default for {key!r} needs a non-None default")
        self.get(key=key, value_type=value_type, default=default)
        found = self.load(Property(key, value_type if value_type is not None else type(default)))
        if found is None:
            raise DefaultNotPersistedError(f"the default value {default!r} of {key!r} was not persisted", key=key)
        return found


class DefaultsProperty(Generic[T]):
    """Descriptor exposing one slot as an attribute of a :class:`Defaults` subclass.

    The storage key is the attribute name unless *key* is given.

    Parameters
    ----------
    value_type
        Type stored in the slot.
    default
        Value persisted and returned when the slot is read while absent.
        With a default, reads never return ``None``.
    set_default
        Value stored instead of deleting the slot when ``None`` is assigned.
    key
        Explicit storage key.
    """

    def __init__(
        self,
        value_type: Any,
        *,
        default: T | None = None,
        set_default: T | None = None,
        key: str | None = None,
    ) -> None:
        self.value_type = value_type
        self.default = default
        self.set_default = set_default
        self.key = key

    def __set_name__(self, owner: type, name: str) -> None:
        if self.key is None:
            self.key = name

    @property
    def property(self) -> Property[T]:
        if self.key is None:
            raise DefaultsError("DefaultsProperty used before being bound to a class attribute")
        return Property(self.key, self.value_type)

    @overload
    def __get__(self, instance: None, owner: type) -> DefaultsProperty[T]: ...

    @overload
    def __get__(self, instance: Defaults, owner: type) -> T | None: ...

    def __get__(self, instance: Defaults | None, owner: type) -> DefaultsProperty[T] | T | None:
        if instance is None:
            return self
        key = self.property.key
        if self.default is not None:
            return instance.get_or_default(self.default, key=key, value_type=self.value_type)
        return instance.get(key=key, value_type=self.value_type)

    def __set__(self, instance: Defaults, value: T | None) -> None:
        instance.set(value, key=self.property.key, value_type=self.value_type, default=self.set_default)

    def __delete__(self, instance: Defaults) -> None:
        instance.clear(self.property.key)
