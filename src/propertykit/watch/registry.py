"""Registry of named property observations.

A :class:`PropertyWatcher` owns the observations registered on one
object. Each observation is stored under an id; registering an id again
invalidates and replaces the previous observation. Ids derived from a
group token (normally the caller's source file) are also indexed by
group, so everything one module registered can be torn down at once.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePath

from propertykit.exceptions import EmptyUnwatchError, InconsistentUnwatchError
from propertykit.watch.events import ObservationOptions
from propertykit.watch.observable import ChangeHandler, Observable, Observation

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WatchInfo:
    """A registered observation.

    The observation is invalidated before the entry is removed from or
    replaced in its registry.
    """

    id: str
    observation: Observation
    key_path: str


#: Conventional id for a single app-wide watch on a property.
STATIC_ID = f"{WatchInfo.__name__}_static"


class PropertyWatcher:
    """Observations of one object, by id and by group.

    Invariant: every id listed under a group is registered, except after
    :meth:`unwatch_ids` or :meth:`unwatch_all`, which leave the group index
    alone. :meth:`unwatch_group` prunes both.
    """

    def __init__(self, owner_name: str = "PropertyWatcher") -> None:
        self._owner_name = owner_name
        self._observations: dict[str, WatchInfo] = {}
        self._auto_ids_by_group: dict[str, list[str]] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._observations)

    def __contains__(self, id: object) -> bool:
        with self._lock:
            return id in self._observations

    @property
    def ids(self) -> list[str]:
        with self._lock:
            return list(self._observations)

    def ids_in_group(self, group: str) -> list[str]:
        with self._lock:
            return list(self._auto_ids_by_group.get(group, ()))

    def get(self, id: str) -> WatchInfo | None:
        with self._lock:
            return self._observations.get(id)

    def watch(
        self,
        target: Observable,
        key_path: str,
        *,
        id: str,
        options: ObservationOptions | None = None,
        handler: ChangeHandler,
    ) -> WatchInfo:
        """Observe *key_path* on *target* under *id*, replacing any previous entry."""
        with self._lock:
            existing = self._observations.pop(id, None)
            if existing is not None:
                existing.observation.invalidate()
                _logger.debug("Replacing watch id=%s key_path=%s", id, existing.key_path)

            observation = target.observe(key_path, handler, options)
            info = WatchInfo(id=id, observation=observation, key_path=key_path)
            self._observations[id] = info
            return info

    def auto_identifier(self, group: str, label: str, disambiguator: str | None = None) -> str:
        """Build the id for a registration made at *label* inside *group*.

        Two registrations with the same group and label get the same id and
        replace each other.
        """
        stem = PurePath(group).stem if group else ""
        return f"{disambiguator or ''}{stem or self._owner_name}_{label}"

    def derive_group_scoped_id(
        self,
        group: str,
        label: str,
        *,
        disambiguator: str | None = None,
        explicit_id: str | None = None,
    ) -> str:
        """Return the id to register under and record it for *group*.

        An *explicit_id* is used verbatim but is still recorded, so
        :meth:`unwatch_group` covers it.
        """
        watch_id = explicit_id if explicit_id is not None else self.auto_identifier(group, label, disambiguator)
        with self._lock:
            self._auto_ids_by_group.setdefault(group, []).append(watch_id)
        return watch_id

    def watching(self, key_path: str, id: str | None = None) -> list[WatchInfo]:
        """Entries observing *key_path*, optionally only the one with *id*.

        The order of the result is unspecified.
        """
        with self._lock:
            return [
                info
                for watch_id, info in self._observations.items()
                if (id is None or id == watch_id) and info.key_path == key_path
            ]

    def unwatch_ids(self, ids: Iterable[str]) -> dict[str, bool]:
        """Invalidate and drop the given ids.

        Returns ``{id: existed}``. The group index is not pruned.
        """
        result: dict[str, bool] = {}
        with self._lock:
            for watch_id in ids:
                info = self._observations.pop(watch_id, None)
                result[watch_id] = info is not None
                if info is not None:
                    info.observation.invalidate()
        return result

    def unwatch_key_path(self, key_path: str, ids: Iterable[str] | None = None) -> dict[str, bool]:
        """Drop every entry observing *key_path*, or only those among *ids*.

        Raises
        ------
        InconsistentUnwatchError
            When any of *ids* is still registered afterwards.
        """
        with self._lock:
            candidates = [info.id for info in self.watching(key_path)]
            requested = None if ids is None else set(ids)
            if requested is not None:
                candidates = [watch_id for watch_id in candidates if watch_id in requested]

            result = self.unwatch_ids(candidates)
            if requested is not None:
                remaining = sorted(requested & self._observations.keys())
                if remaining:
                    raise InconsistentUnwatchError(f"{remaining} are still remaining", ids=remaining)
            return result

    def unwatch_group(self, group: str, key_path: str | None = None) -> bool:
        """Drop the ids recorded for *group*, optionally only those on *key_path*.

        Raises
        ------
        EmptyUnwatchError
            When nothing is recorded for the group (and key path).
        InconsistentUnwatchError
            When an id is still registered after removal.
        """
        with self._lock:
            ids_in_group = self._auto_ids_by_group.get(group, [])
            if key_path is None:
                ids = list(ids_in_group)
            else:
                ids = [
                    watch_id
                    for watch_id in ids_in_group
                    if (info := self._observations.get(watch_id)) is not None and info.key_path == key_path
                ]
            if not ids:
                raise EmptyUnwatchError(f"Already unwatched in {group!r} ({key_path!r})", group=group)

            self.unwatch_ids(ids)
            removed = set(ids)
            remaining_in_group = [watch_id for watch_id in ids_in_group if watch_id not in removed]
            if remaining_in_group:
                self._auto_ids_by_group[group] = remaining_in_group
            else:
                self._auto_ids_by_group.pop(group, None)

            still_registered = sorted(removed & self._observations.keys())
            if still_registered:
                raise InconsistentUnwatchError(
                    f"unwatch for ids {still_registered} failed",
                    ids=still_registered,
                )
            return True

    def unwatch_all(self) -> None:
        """Invalidate and drop every entry. The group index is left as is."""
        with self._lock:
            for info in self._observations.values():
                info.observation.invalidate()
            self._observations.clear()

    def close(self) -> None:
        """Tear the registry down: unwatch everything and forget all groups."""
        with self._lock:
            self.unwatch_all()
            self._auto_ids_by_group.clear()
