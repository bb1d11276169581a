from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Read side of attendance/{location}/{date}/{sessionKey}."""

    def list_for_day(self, location_key: str, day: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get(self, location_key: str, day: date, session_key: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_location_keys(self) -> Sequence[str]:
        """Every known location, from the location registry."""

        raise NotImplementedError
