from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.qr_attendance.qr_attendance.common.datetime_utils import FrozenTimeSource
from src.qr_attendance.qr_attendance.container import EngineSettings, build_container
from src.qr_attendance.qr_attendance.database.memory_tree_store import InMemoryTreeStore

ORG_TZ = ZoneInfo("America/Chicago")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 3, 8, 30, tzinfo=ORG_TZ)


@pytest.fixture
def at():
    """Organizational wall-clock time on a day of March 2024."""

    def _at(hour: int, minute: int = 0, day: int = 3) -> datetime:
        return datetime(2024, 3, day, hour, minute, tzinfo=ORG_TZ)

    return _at


@pytest.fixture
def clock(fixed_now):
    return FrozenTimeSource(fixed_now, "America/Chicago")


@pytest.fixture
def store():
    return InMemoryTreeStore(
        {
            "users": {
                "u1": {"name": "Ana Ruiz", "location": "Aurora", "status": "active"},
                "u2": {"name": "Luis Ortega", "location": "West Chicago", "status": "inactive"},
            }
        }
    )


@pytest.fixture
def settings():
    return EngineSettings(store_backend="memory")


@pytest.fixture
def container(settings, store, clock):
    return build_container(settings, store=store, clock=clock)


@pytest.fixture
def engine(container):
    return container.engine
