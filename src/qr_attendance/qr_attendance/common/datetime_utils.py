from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from ..core.constants import DATE_FORMAT, DEFAULT_ORG_TIMEZONE


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DATE_FORMAT).date()


def parse_hhmm(value: str) -> time:
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time string: {value!r}")
    return time(hour=int(parts[0]), minute=int(parts[1]))


def format_day(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def to_epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


class TimeSource:
    """Supplies "now" and all date bucketing in the organizational timezone.

    Note: Wrapped so tests can pass a frozen clock.
    """

    def __init__(self, tz_name: str = DEFAULT_ORG_TIMEZONE):
        self._tz = ZoneInfo(tz_name)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(self._tz)

    def localize(self, value: datetime) -> datetime:
        """Naive datetimes are read as organizational wall-clock time."""
        if value.tzinfo is None:
            return value.replace(tzinfo=self._tz)
        return value.astimezone(self._tz)

    def local_date(self, value: datetime) -> date:
        return self.localize(value).date()

    def at(self, day: date, wall: time) -> datetime:
        return datetime.combine(day, wall, tzinfo=self._tz)

    def parse(self, value: str) -> datetime:
        return self.localize(datetime.fromisoformat(value))


class FrozenTimeSource(TimeSource):
    def __init__(self, frozen: datetime, tz_name: str = DEFAULT_ORG_TIMEZONE):
        super().__init__(tz_name)
        self._frozen = self.localize(frozen)

    def now(self) -> datetime:
        return self._frozen
