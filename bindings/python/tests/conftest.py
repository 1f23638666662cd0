from typing import List

import pytest

from fakes import FakeNative
from metrix.events import DriverEvent
from metrix.state import AppState


@pytest.fixture
def native() -> FakeNative:
    return FakeNative()


@pytest.fixture
def events() -> List[DriverEvent]:
    return []


@pytest.fixture
def app_state(native: FakeNative, events: List[DriverEvent]) -> AppState:
    return AppState(native=native, on_event=events.append)
