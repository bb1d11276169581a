from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from ...users.model import User
from ..model import AttendanceRecord, OpenSession


@dataclass(frozen=True)
class SearchContext:
    user: User
    as_of: date
    location_key: Optional[str] = None

    @property
    def window(self) -> tuple[date, date]:
        """The scan date and the day before (after-midnight clock-outs)."""
        return self.as_of, self.as_of - timedelta(days=1)


class SessionSearchStep(ABC):
    """Strategy Pattern: one place an open clock-in may live."""

    name: str = "step"

    @abstractmethod
    def find(self, ctx: SearchContext) -> Optional[OpenSession]:
        raise NotImplementedError


def latest(candidates: Iterable[OpenSession]) -> Optional[OpenSession]:
    """Latest clock-in wins; equal timestamps fall back to the greatest session key."""
    return max(candidates, key=lambda c: (c.clock_in_time, c.session_key), default=None)


def from_record(record: AttendanceRecord, *, source: str) -> OpenSession:
    return OpenSession(
        session_key=record.session_key,
        user_id=record.user_id,
        clock_in_time=record.clock_in_time,
        location=record.location,
        day=record.day,
        event_id=record.event_id,
        category=record.event_type or None,
        source=source,
    )


def open_records_for(records: Iterable[AttendanceRecord], user_id: str) -> list[AttendanceRecord]:
    return [r for r in records if r.user_id == user_id and r.is_open]
