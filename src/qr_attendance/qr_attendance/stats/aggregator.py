from __future__ import annotations

from datetime import datetime
from typing import Any

from ..database.paths import user_path
from ..users.model import User, UserStats


def _rate(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


class StatsAggregator:
    """Incremental per-user counters.

    Returns store updates instead of writing, so the recorder can commit them in
    the same batch as the session itself. Counters only ever grow here.
    """

    def on_clock_in(self, user: User, timestamp: datetime, *, is_late: bool, first_of_day: bool) -> dict[str, Any]:
        s = user.stats
        present = s.days_present
        late = s.days_late
        updates: dict[str, Any] = {}

        if first_of_day:
            present += 1
            if is_late:
                late += 1
            updates[self._path(user, "daysPresent")] = present
            updates[self._path(user, "daysLate")] = late
            updates[self._path(user, "attendanceRate")] = _rate(present, present + s.days_absent)
            updates[self._path(user, "onTimeRate")] = _rate(present - late, present)

        updates[self._path(user, "lastClockIn")] = timestamp.isoformat()
        return updates

    def on_clock_out(self, user: User, timestamp: datetime, hours_worked: float) -> dict[str, Any]:
        return {
            self._path(user, "totalHours"): round(user.stats.total_hours + hours_worked, 2),
            self._path(user, "lastClockOut"): timestamp.isoformat(),
        }

    def on_absent_day(self, user: User) -> dict[str, Any]:
        s: UserStats = user.stats
        absent = s.days_absent + 1
        return {
            self._path(user, "daysAbsent"): absent,
            self._path(user, "attendanceRate"): _rate(s.days_present, s.days_present + absent),
        }

    @staticmethod
    def _path(user: User, name: str) -> str:
        return user_path(user.user_id, "stats", name)
