"""Custom exception hierarchy for propertykit."""

from __future__ import annotations


class PropertyKitError(Exception):
    """Base exception for all propertykit errors."""


class PropertyKitConfigError(PropertyKitError):
    """Invalid or missing configuration."""


class DefaultsError(PropertyKitError):
    """Misuse of the defaults store (e.g. no way to resolve a value type)."""


class DefaultsDecodeError(DefaultsError):
    """Stored bytes could not be decoded into the requested type.

    :class:`~propertykit.defaults.Defaults` never lets this escape; a slot
    that fails to decode reads as absent.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class DefaultsEncodeError(DefaultsError):
    """A value could not be encoded for storage."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class DefaultNotPersistedError(DefaultsError, AssertionError):
    """A default value was supplied but could not be read back.

    Signals a broken backend or a logic error, never a normal runtime
    condition.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class WatchError(PropertyKitError):
    """Base for property-watching failures."""


class ObservationError(WatchError):
    """An observation could not be registered (e.g. invalid key path)."""


class EmptyUnwatchError(WatchError, AssertionError):
    """A scoped unwatch found nothing registered for the group.

    Raised by :meth:`PropertyWatcher.unwatch_group`; unwatching an empty
    group is a caller error, not a no-op.
    """

    def __init__(self, message: str, *, group: str = "") -> None:
        self.group = group
        super().__init__(message)


class InconsistentUnwatchError(WatchError, AssertionError):
    """Observations were still registered after being unwatched."""

    def __init__(self, message: str, *, ids: list[str] | None = None) -> None:
        self.ids = list(ids or [])
        super().__init__(message)
