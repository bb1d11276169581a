from __future__ import annotations

from typing import Optional

from ...common.validators import normalize_location
from ..model import OpenSession
from ..repository import AttendanceRepository
from .base import SearchContext, SessionSearchStep, from_record, latest, open_records_for


class GlobalSweepStep(SessionSearchStep):
    """Every known location, scan date and the day before. Costly; runs last."""

    name = "global-sweep"

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def find(self, ctx: SearchContext) -> Optional[OpenSession]:
        locations = set(self._attendance.list_location_keys())
        for extra in (ctx.location_key, normalize_location(ctx.user.location)):
            if extra:
                locations.add(extra)

        found: list[OpenSession] = []
        for location_key in sorted(locations):
            for day in ctx.window:
                records = self._attendance.list_for_day(location_key, day)
                found.extend(from_record(r, source=self.name) for r in open_records_for(records, ctx.user.user_id))
        return latest(found)
