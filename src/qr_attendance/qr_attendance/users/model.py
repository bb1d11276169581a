from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_ORG_TIMEZONE

INACTIVE_STATUSES = {"inactive", "deleted"}
ORG_TZ = ZoneInfo(DEFAULT_ORG_TIMEZONE)


def parse_timestamp(raw: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse a stored ISO timestamp; values without an offset are org wall time."""
    if not raw or not isinstance(raw, str):
        return None
    try:
        value = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz or ORG_TZ)
    return value


def parse_day(raw: Any) -> Optional[date]:
    if not raw or not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


@dataclass(frozen=True)
class UserStats:
    """Derived counters, written only by the stats aggregator."""

    days_present: int = 0
    days_absent: int = 0
    days_late: int = 0
    total_hours: float = 0.0
    on_time_rate: float = 0.0
    attendance_rate: float = 0.0
    last_clock_in: Optional[str] = None
    last_clock_out: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "UserStats":
        raw = raw or {}
        return cls(
            days_present=int(raw.get("daysPresent") or 0),
            days_absent=int(raw.get("daysAbsent") or 0),
            days_late=int(raw.get("daysLate") or 0),
            total_hours=float(raw.get("totalHours") or 0.0),
            on_time_rate=float(raw.get("onTimeRate") or 0.0),
            attendance_rate=float(raw.get("attendanceRate") or 0.0),
            last_clock_in=raw.get("lastClockIn"),
            last_clock_out=raw.get("lastClockOut"),
        )


@dataclass(frozen=True)
class SessionEntry:
    """One entry of the user's own session index."""

    session_key: str
    clock_in_time: datetime
    clock_out_time: Optional[datetime]
    location: str
    day: Optional[date]
    category: Optional[str] = None
    event_id: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None

    @classmethod
    def from_dict(
        cls, session_key: str, raw: Mapping[str, Any], tz: Optional[tzinfo] = None
    ) -> Optional["SessionEntry"]:
        clock_in = parse_timestamp(raw.get("clockInTime"), tz)
        if clock_in is None:
            return None
        return cls(
            session_key=str(session_key),
            clock_in_time=clock_in,
            clock_out_time=parse_timestamp(raw.get("clockOutTime"), tz),
            location=str(raw.get("location") or ""),
            day=parse_day(raw.get("date")) or clock_in.date(),
            category=raw.get("category"),
            event_id=raw.get("eventId"),
        )


@dataclass(frozen=True)
class User:
    """Thực thể miền (domain): thành viên quét mã QR.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập store).
    """

    user_id: str
    name: str
    location: str
    status: str
    stats: UserStats = field(default_factory=UserStats)
    sessions: tuple[SessionEntry, ...] = ()
    events: Mapping[str, Mapping[str, Mapping[str, Any]]] = field(default_factory=dict)
    profile: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return (self.status or "active").lower() not in INACTIVE_STATUSES

    def sessions_on(self, day: date) -> list[SessionEntry]:
        return [s for s in self.sessions if s.day == day]

    def open_sessions(self) -> list[SessionEntry]:
        return [s for s in self.sessions if s.is_open]

    @classmethod
    def from_dict(cls, user_id: str, raw: Mapping[str, Any], tz: Optional[tzinfo] = None) -> "User":
        sessions = []
        for key, entry in (raw.get("sessions") or {}).items():
            if isinstance(entry, Mapping):
                parsed = SessionEntry.from_dict(key, entry, tz)
                if parsed:
                    sessions.append(parsed)

        name = raw.get("name")
        return cls(
            user_id=str(user_id),
            name=name if isinstance(name, str) else "Unknown User",
            location=str(raw.get("location") or ""),
            status=str(raw.get("status") or "active"),
            stats=UserStats.from_dict(raw.get("stats")),
            sessions=tuple(sorted(sessions, key=lambda s: (s.clock_in_time, s.session_key))),
            events=raw.get("events") or {},
            profile=raw.get("profile") or {},
        )
