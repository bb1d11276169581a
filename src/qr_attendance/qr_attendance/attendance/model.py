from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Mapping, Optional

from ..common.datetime_utils import TimeSource
from ..core.enums import Outcome, ScanMode, SessionStatus
from ..core.exceptions import InvalidScan
from ..users.model import parse_day, parse_timestamp


@dataclass(frozen=True)
class ScanRequest:
    """One scan, passed explicitly into the engine (no hidden scanner state)."""

    user_id: str
    mode: ScanMode
    timestamp: datetime
    location: Optional[str] = None
    category_hint: Optional[str] = None
    event_hint: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): bản ghi chấm công theo địa điểm/ngày.

    Carries denormalized user/event fields; the store has no joins.
    """

    session_key: str
    user_id: str
    clock_in_time: datetime
    clock_out_time: Optional[datetime]
    location: str
    day: date
    event_type: str
    event_id: Optional[str] = None
    hours_worked: Optional[float] = None
    is_late: bool = False
    status: SessionStatus = SessionStatus.CLOCKED_IN

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None

    @classmethod
    def from_dict(
        cls,
        location: str,
        day: date,
        session_key: str,
        raw: Mapping[str, Any],
        tz: Optional[tzinfo] = None,
    ) -> Optional["AttendanceRecord"]:
        clock_in = parse_timestamp(raw.get("clockInTime"), tz)
        if clock_in is None or not raw.get("userId"):
            return None
        hours = raw.get("hoursWorked")
        try:
            status = SessionStatus(raw.get("status") or SessionStatus.CLOCKED_IN.value)
        except ValueError:
            status = SessionStatus.CLOCKED_IN
        return cls(
            session_key=str(session_key),
            user_id=str(raw["userId"]),
            clock_in_time=clock_in,
            clock_out_time=parse_timestamp(raw.get("clockOutTime"), tz),
            location=str(raw.get("location") or location),
            day=parse_day(raw.get("date")) or day,
            event_type=str(raw.get("eventType") or ""),
            event_id=raw.get("eventId"),
            hours_worked=float(hours) if hours is not None else None,
            is_late=bool(raw.get("isLate", False)),
            status=status,
        )


@dataclass(frozen=True)
class OpenSession:
    """An unmatched clock-in located by the session finder."""

    session_key: str
    user_id: str
    clock_in_time: datetime
    location: str
    day: date
    event_id: Optional[str] = None
    category: Optional[str] = None
    source: str = ""


@dataclass(frozen=True)
class ReconciliationResult:
    outcome: Outcome
    user_id: str
    session_key: Optional[str] = None
    location: Optional[str] = None
    event_id: Optional[str] = None
    category: Optional[str] = None
    clock_in_time: Optional[datetime] = None
    clock_out_time: Optional[datetime] = None
    is_late: Optional[bool] = None
    hours_worked: Optional[float] = None
    hours_clamped: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["outcome"] = self.outcome.value
        for key in ("clock_in_time", "clock_out_time"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


_MODE_ALIASES = {
    "in": ScanMode.IN,
    "clock-in": ScanMode.IN,
    "clockin": ScanMode.IN,
    "out": ScanMode.OUT,
    "clock-out": ScanMode.OUT,
    "clockout": ScanMode.OUT,
}


def parse_scan_mode(raw: Any) -> ScanMode:
    mode = _MODE_ALIASES.get(str(raw or "").strip().lower())
    if mode is None:
        raise InvalidScan(f"Unknown scan mode: {raw!r}")
    return mode


def parse_scan_request(payload: Mapping[str, Any], clock: TimeSource) -> ScanRequest:
    """Build a ScanRequest from an API payload (camelCase keys)."""
    user_id = str(payload.get("userId") or "").strip()
    if not user_id:
        raise InvalidScan("userId is required")

    raw_ts = payload.get("timestamp")
    if raw_ts:
        try:
            timestamp = clock.parse(str(raw_ts))
        except ValueError as e:
            raise InvalidScan(f"Invalid timestamp: {raw_ts!r}") from e
    else:
        timestamp = clock.now()

    def _opt(name: str) -> Optional[str]:
        value = payload.get(name)
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    return ScanRequest(
        user_id=user_id,
        mode=parse_scan_mode(payload.get("mode")),
        timestamp=timestamp,
        location=_opt("location"),
        category_hint=_opt("categoryHint"),
        event_hint=_opt("eventHint"),
    )
