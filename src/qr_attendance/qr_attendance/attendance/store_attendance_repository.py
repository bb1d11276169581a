from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import TimeSource
from ..database.paths import LOCATIONS, attendance_day_path, attendance_path
from ..database.tree_store import TreeStore
from .model import AttendanceRecord
from .repository import AttendanceRepository


class StoreAttendanceRepository(AttendanceRepository):
    def __init__(self, store: TreeStore, clock: Optional[TimeSource] = None):
        self._store = store
        self._clock = clock or TimeSource()

    def list_for_day(self, location_key: str, day: date) -> Sequence[AttendanceRecord]:
        raw = self._store.read(attendance_day_path(location_key, day)) or {}
        records = []
        for session_key, data in raw.items():
            if not isinstance(data, Mapping):
                continue
            record = AttendanceRecord.from_dict(location_key, day, session_key, data, self._clock.tz)
            if record:
                records.append(record)
        return records

    def get(self, location_key: str, day: date, session_key: str) -> Optional[AttendanceRecord]:
        raw = self._store.read(attendance_path(location_key, day, session_key))
        if not isinstance(raw, Mapping):
            return None
        return AttendanceRecord.from_dict(location_key, day, session_key, raw, self._clock.tz)

    def list_location_keys(self) -> Sequence[str]:
        raw = self._store.read(LOCATIONS) or {}
        return sorted(raw.keys())
