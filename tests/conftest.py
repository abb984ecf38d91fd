from __future__ import annotations

from collections.abc import Iterator

import pytest

from propertykit.backends import MemoryBackend
from propertykit.defaults import Defaults


@pytest.fixture(autouse=True)
def _isolated_memory_suites() -> Iterator[None]:
    MemoryBackend._suites.clear()
    Defaults._shared_instances.clear()
    yield
    MemoryBackend._suites.clear()
    Defaults._shared_instances.clear()


@pytest.fixture
def defaults() -> Defaults:
    return Defaults()
