from __future__ import annotations

import gc
import logging
from typing import Any

import pytest

from propertykit.exceptions import ObservationError
from propertykit.watch.events import ChangeKind, ObservationOptions, ObservedChange
from propertykit.watch.observable import Observable


class Sample(Observable):
    def __init__(self) -> None:
        self.testing_property: str | None = None


def _recorder() -> tuple[list[ObservedChange], Any]:
    changes: list[ObservedChange] = []

    def handler(_target: Any, change: ObservedChange) -> None:
        changes.append(change)

    return changes, handler


def test_assignment_delivers_change() -> None:
    sample = Sample()
    changes, handler = _recorder()
    sample.observe("testing_property", handler, ObservationOptions.NEW | ObservationOptions.OLD)

    sample.testing_property = "newValue"

    assert len(changes) == 1
    assert changes[0].kind == ChangeKind.SETTING
    assert changes[0].new_value == "newValue"
    assert changes[0].old_value is None
    assert sample.testing_property == "newValue"


def test_values_omitted_without_options() -> None:
    sample = Sample()
    changes, handler = _recorder()
    sample.observe("testing_property", handler)

    sample.testing_property = "x"

    assert changes[0].new_value is None
    assert changes[0].key_path == "testing_property"


def test_setting_nil_is_delivered() -> None:
    sample = Sample()
    seen: list[str | None] = []
    sample.observe("testing_property", lambda target, _change: seen.append(target.testing_property))

    sample.testing_property = None

    assert seen == [None]


def test_initial_and_prior_options() -> None:
    sample = Sample()
    sample.testing_property = "first"
    changes, handler = _recorder()

    sample.observe(
        "testing_property",
        handler,
        ObservationOptions.INITIAL | ObservationOptions.PRIOR | ObservationOptions.NEW | ObservationOptions.OLD,
    )
    sample.testing_property = "second"

    assert [c.kind for c in changes] == [ChangeKind.INITIAL, ChangeKind.SETTING, ChangeKind.SETTING]
    assert changes[0].new_value == "first"
    assert changes[1].is_prior and changes[1].old_value == "first"
    assert not changes[2].is_prior and changes[2].new_value == "second"


def test_only_on_change_skips_equal_assignment() -> None:
    sample = Sample()
    changes, handler = _recorder()
    sample.observe("testing_property", handler, ObservationOptions.ONLY_ON_CHANGE)

    sample.testing_property = None
    sample.testing_property = "x"
    sample.testing_property = "x"

    assert len(changes) == 1


def test_invalidate_stops_delivery() -> None:
    sample = Sample()
    changes, handler = _recorder()
    observation = sample.observe("testing_property", handler)

    observation.invalidate()
    observation.invalidate()
    sample.testing_property = "after"

    assert changes == []
    assert not observation.is_valid
    assert sample.observations("testing_property") == []


def test_other_attributes_are_not_delivered() -> None:
    sample = Sample()
    changes, handler = _recorder()
    sample.observe("testing_property", handler)

    sample.other = 1  # type: ignore[attr-defined]

    assert changes == []


def test_failing_handler_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    sample = Sample()
    changes, handler = _recorder()

    def broken(_target: Any, _change: ObservedChange) -> None:
        raise RuntimeError("boom")

    sample.observe("testing_property", broken)
    sample.observe("testing_property", handler)

    with caplog.at_level(logging.ERROR, logger="propertykit.watch.observable"):
        sample.testing_property = "x"

    assert len(changes) == 1
    assert "boom" in caplog.text


@pytest.mark.parametrize("key_path", ["", "not.valid", "1abc", 3])
def test_invalid_key_path_rejected(key_path: Any) -> None:
    with pytest.raises(ObservationError):
        Sample().observe(key_path, lambda *_: None)


def test_observation_does_not_keep_target_alive() -> None:
    sample = Sample()
    observation = sample.observe("testing_property", lambda *_: None)

    del sample
    gc.collect()

    assert observation.target is None
    assert not observation.is_valid
    observation.invalidate()
