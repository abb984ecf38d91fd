"""propertykit - typed settings storage and property watching."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("propertykit")
except PackageNotFoundError:
    __version__ = "0+local"
from propertykit.backends import STANDARD_SUITE, DefaultsBackend, MemoryBackend, SqliteBackend
from propertykit.config import PropertyKitConfig
from propertykit.defaults import Defaults, DefaultsProperty, Property
from propertykit.exceptions import (
    DefaultNotPersistedError,
    DefaultsDecodeError,
    DefaultsEncodeError,
    DefaultsError,
    EmptyUnwatchError,
    InconsistentUnwatchError,
    ObservationError,
    PropertyKitConfigError,
    PropertyKitError,
    WatchError,
)
from propertykit.watch import (
    STATIC_ID,
    ChangeKind,
    Observable,
    Observation,
    ObservationOptions,
    ObservedChange,
    PropertyWatchable,
    PropertyWatcher,
    WatchInfo,
)

__all__ = [
    "__version__",
    "STANDARD_SUITE",
    "STATIC_ID",
    "ChangeKind",
    "DefaultNotPersistedError",
    "Defaults",
    "DefaultsBackend",
    "DefaultsDecodeError",
    "DefaultsEncodeError",
    "DefaultsError",
    "DefaultsProperty",
    "EmptyUnwatchError",
    "InconsistentUnwatchError",
    "MemoryBackend",
    "Observable",
    "Observation",
    "ObservationError",
    "ObservationOptions",
    "ObservedChange",
    "Property",
    "PropertyKitConfig",
    "PropertyKitConfigError",
    "PropertyKitError",
    "PropertyWatchable",
    "PropertyWatcher",
    "SqliteBackend",
    "WatchError",
    "WatchInfo",
]
