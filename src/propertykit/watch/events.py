"""Change notifications delivered to property observers."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ObservationOptions(enum.IntFlag):
    """What an observation delivers.

    ``NEW`` and ``OLD`` select which values a change carries. ``INITIAL``
    delivers once at registration, ``PRIOR`` delivers an extra notification
    before each assignment, and ``ONLY_ON_CHANGE`` skips assignments that
    leave the value equal to what it was.
    """

    NONE = 0
    NEW = enum.auto()
    OLD = enum.auto()
    INITIAL = enum.auto()
    PRIOR = enum.auto()
    ONLY_ON_CHANGE = enum.auto()


class ChangeKind(enum.StrEnum):
    SETTING = "setting"
    INITIAL = "initial"


class ObservedChange(BaseModel):
    """A single notification for one attribute of an observed object."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ChangeKind = ChangeKind.SETTING
    key_path: str
    new_value: Any = None
    old_value: Any = None
    is_prior: bool = False
