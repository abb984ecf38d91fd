"""Attribute observation primitive.

:class:`Observable` turns attribute assignment into change notifications.
``observe`` returns an :class:`Observation` token; invalidating the token
stops delivery. Tokens hold their target weakly, so an object and its
observations are collected together.
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable
from typing import Any

from propertykit.exceptions import ObservationError
from propertykit.watch.events import ChangeKind, ObservationOptions, ObservedChange

_logger = logging.getLogger(__name__)

ChangeHandler = Callable[[Any, ObservedChange], None]

_OBSERVATIONS_ATTR = "_propertykit_observations"


class Observation:
    """Live subscription to one attribute of one object."""

    __slots__ = ("_target", "key_path", "options", "_handler", "_valid", "__weakref__")

    def __init__(
        self,
        target: Observable,
        key_path: str,
        options: ObservationOptions,
        handler: ChangeHandler,
    ) -> None:
        self._target: weakref.ref[Observable] = weakref.ref(target)
        self.key_path = key_path
        self.options = options
        self._handler: ChangeHandler | None = handler
        self._valid = True

    @property
    def is_valid(self) -> bool:
        return self._valid and self._target() is not None

    @property
    def target(self) -> Observable | None:
        return self._target()

    def invalidate(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if not self._valid:
            return
        self._valid = False
        self._handler = None
        target = self._target()
        if target is not None:
            target._remove_observation(self)  # noqa: SLF001

    def _deliver(self, target: Observable, change: ObservedChange) -> None:
        handler = self._handler
        if not self._valid or handler is None:
            return
        try:
            handler(target, change)
        except Exception:
            _logger.exception("Change handler for %r failed", self.key_path)

    def __repr__(self) -> str:
        state = "valid" if self.is_valid else "invalid"
        return f"<Observation {self.key_path!r} {state}>"


def _validate_key_path(key_path: Any) -> str:
    if not isinstance(key_path, str) or not key_path.isidentifier():
        raise ObservationError(f"Key path must be an attribute name, got {key_path!r}")
    return key_path


class Observable:
    """Mixin delivering attribute assignments to registered observations."""

    def _observation_table(self) -> dict[str, list[Observation]]:
        table: dict[str, list[Observation]] | None = self.__dict__.get(_OBSERVATIONS_ATTR)
        if table is None:
            table = {}
            object.__setattr__(self, _OBSERVATIONS_ATTR, table)
        return table

    def observe(
        self,
        key_path: str,
        handler: ChangeHandler,
        options: ObservationOptions | None = None,
    ) -> Observation:
        """Deliver ``handler(self, change)`` whenever *key_path* is assigned."""
        key_path = _validate_key_path(key_path)
        opts = options if options is not None else ObservationOptions.NONE
        observation = Observation(self, key_path, opts, handler)
        self._observation_table().setdefault(key_path, []).append(observation)

        if opts & ObservationOptions.INITIAL:
            current = getattr(self, key_path, None)
            observation._deliver(  # noqa: SLF001
                self,
                ObservedChange(
                    kind=ChangeKind.INITIAL,
                    key_path=key_path,
                    new_value=current if opts & ObservationOptions.NEW else None,
                ),
            )
        return observation

    def observations(self, key_path: str | None = None) -> list[Observation]:
        table = self.__dict__.get(_OBSERVATIONS_ATTR) or {}
        if key_path is not None:
            return list(table.get(key_path, ()))
        return [obs for observations in table.values() for obs in observations]

    def _remove_observation(self, observation: Observation) -> None:
        table = self.__dict__.get(_OBSERVATIONS_ATTR)
        if not table:
            return
        observations = table.get(observation.key_path)
        if observations is None:
            return
        if observation in observations:
            observations.remove(observation)
        if not observations:
            table.pop(observation.key_path, None)

    def __setattr__(self, name: str, value: Any) -> None:
        table = self.__dict__.get(_OBSERVATIONS_ATTR)
        observations = list(table.get(name, ())) if table else []
        if not observations:
            object.__setattr__(self, name, value)
            return

        old_value = getattr(self, name, None)
        for observation in observations:
            opts = observation.options
            if opts & ObservationOptions.ONLY_ON_CHANGE and old_value == value:
                continue
            if opts & ObservationOptions.PRIOR:
                observation._deliver(  # noqa: SLF001
                    self,
                    ObservedChange(
                        key_path=name,
                        old_value=old_value if opts & ObservationOptions.OLD else None,
                        is_prior=True,
                    ),
                )

        object.__setattr__(self, name, value)

        for observation in observations:
            opts = observation.options
            if opts & ObservationOptions.ONLY_ON_CHANGE and old_value == value:
                continue
            observation._deliver(  # noqa: SLF001
                self,
                ObservedChange(
                    key_path=name,
                    new_value=value if opts & ObservationOptions.NEW else None,
                    old_value=old_value if opts & ObservationOptions.OLD else None,
                ),
            )
