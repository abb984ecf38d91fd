"""Property watching.

:mod:`~propertykit.watch.observable` is the observation primitive: it
turns attribute assignment into change notifications.
:mod:`~propertykit.watch.registry` names and groups those observations,
and :mod:`~propertykit.watch.watchable` attaches a registry to each
observed object.
"""

from propertykit.watch.events import ChangeKind, ObservationOptions, ObservedChange
from propertykit.watch.observable import Observable, Observation
from propertykit.watch.registry import STATIC_ID, PropertyWatcher, WatchInfo
from propertykit.watch.watchable import PropertyWatchable

__all__ = [
    "STATIC_ID",
    "ChangeKind",
    "Observable",
    "Observation",
    "ObservationOptions",
    "ObservedChange",
    "PropertyWatchable",
    "PropertyWatcher",
    "WatchInfo",
]
