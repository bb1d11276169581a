from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Mapping, Optional

from ..common.datetime_utils import TimeSource
from ..events.model import ScheduledEvent


@dataclass(frozen=True)
class LatenessDecision:
    is_late: bool
    expected_start: datetime
    minutes_late: int = 0


@dataclass
class LatenessPolicy:
    """Compare a clock-in with the start it was expected at.

    A resolved event sets the expected start (its start time of day on the scan
    date, so multi-day events are measured daily); otherwise, and for events
    stored as bare dates, the configured default for the category applies.
    """

    clock: TimeSource
    grace_minutes: int
    default_start: time
    start_by_category: Mapping[str, time] = field(default_factory=dict)

    def expected_start(self, clock_in: datetime, category: str, event: Optional[ScheduledEvent]) -> datetime:
        day = self.clock.local_date(clock_in)
        if event is not None and not event.all_day:
            wall = self.clock.localize(event.start).time()
        else:
            wall = self.start_by_category.get(category, self.default_start)
        return self.clock.at(day, wall)

    def decide(self, clock_in: datetime, category: str, event: Optional[ScheduledEvent]) -> LatenessDecision:
        expected = self.expected_start(clock_in, category, event)
        clock_in = self.clock.localize(clock_in)
        if clock_in <= expected + timedelta(minutes=self.grace_minutes):
            return LatenessDecision(is_late=False, expected_start=expected)
        minutes = int((clock_in - expected).total_seconds() // 60)
        return LatenessDecision(is_late=True, expected_start=expected, minutes_late=minutes)
