from __future__ import annotations

from typing import Optional

from ..model import OpenSession
from ..repository import AttendanceRepository
from .base import SearchContext, SessionSearchStep, from_record, latest, open_records_for


class LocationLogStep(SessionSearchStep):
    """The scan location's attendance log for the scan date."""

    name = "location-log"

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def find(self, ctx: SearchContext) -> Optional[OpenSession]:
        if not ctx.location_key:
            return None
        records = self._attendance.list_for_day(ctx.location_key, ctx.as_of)
        return latest(from_record(r, source=self.name) for r in open_records_for(records, ctx.user.user_id))
