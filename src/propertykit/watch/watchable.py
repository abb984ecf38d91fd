"""Per-object watch registry with call-site derived ids.

Subclass :class:`PropertyWatchable` to give an object its own
:class:`PropertyWatcher`. Watches registered without an explicit id are
named after the calling file, function and line, so re-running the same
``watch`` call replaces the earlier registration instead of stacking a
second one::

    class Player(PropertyWatchable):
        def __init__(self) -> None:
            self.score = 0

    player = Player()
    player.watch("score", lambda target, change: print(change.new_value),
                 options=ObservationOptions.NEW)
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable
from typing import Any

from propertykit.watch.events import ObservationOptions, ObservedChange
from propertykit.watch.observable import ChangeHandler, Observable
from propertykit.watch.registry import PropertyWatcher, WatchInfo

_WATCHER_ATTR = "_propertykit_watcher"


def _call_site(depth: int) -> tuple[str, str]:
    """Return ``(file, "function_line")`` for the frame *depth* levels up."""
    frame = sys._getframe(depth + 1)  # noqa: SLF001
    code = frame.f_code
    return code.co_filename, f"{code.co_name}_{frame.f_lineno}"


class PropertyWatchable(Observable):
    """Observable object that owns a :class:`PropertyWatcher`."""

    @property
    def watcher(self) -> PropertyWatcher:
        watcher: PropertyWatcher | None = self.__dict__.get(_WATCHER_ATTR)
        if watcher is None:
            watcher = PropertyWatcher(type(self).__name__)
            object.__setattr__(self, _WATCHER_ATTR, watcher)
        return watcher

    def _register(
        self,
        key_path: str,
        handler: ChangeHandler,
        *,
        id: str | None,
        group: str | None,
        options: ObservationOptions | None,
        depth: int,
    ) -> WatchInfo:
        file, label = _call_site(depth + 1)
        watch_id = self.watcher.derive_group_scoped_id(group if group is not None else file, label, explicit_id=id)
        return self.watcher.watch(self, key_path, id=watch_id, options=options, handler=handler)

    def watch(
        self,
        key_path: str,
        handler: Callable[[Any, ObservedChange], None],
        *,
        id: str | None = None,
        group: str | None = None,
        options: ObservationOptions | None = None,
    ) -> WatchInfo:
        """Call ``handler(self, change)`` whenever *key_path* is assigned.

        Without *id*, the id is derived from the calling line. *group*
        defaults to the caller's file and scopes :meth:`unwatch_file_private`.
        """
        return self._register(key_path, handler, id=id, group=group, options=options, depth=1)

    def on_change(
        self,
        key_path: str,
        callback: Callable[[], None],
        *,
        id: str | None = None,
        group: str | None = None,
        options: ObservationOptions | None = None,
    ) -> WatchInfo:
        """Like :meth:`watch` for callbacks that take no arguments."""

        def _handler(_target: Any, _change: ObservedChange) -> None:
            callback()

        return self._register(key_path, _handler, id=id, group=group, options=options, depth=1)

    def watching(self, key_path: str, id: str | None = None) -> list[WatchInfo]:
        return self.watcher.watching(key_path, id)

    def unwatch(self, key_path: str, ids: Iterable[str] | None = None) -> dict[str, bool]:
        """Stop every watch on *key_path* (or only those among *ids*)."""
        return self.watcher.unwatch_key_path(key_path, ids)

    def unwatch_ids(self, ids: Iterable[str]) -> dict[str, bool]:
        return self.watcher.unwatch_ids(ids)

    def unwatch_file_private(self, key_path: str | None = None, *, group: str | None = None) -> bool:
        """Stop the watches registered from the calling file (or *group*)."""
        if group is None:
            group, _ = _call_site(1)
        return self.watcher.unwatch_group(group, key_path)

    def unwatch_all(self) -> None:
        self.watcher.unwatch_all()
