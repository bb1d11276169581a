from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, tzinfo
from typing import Any, Mapping, Optional

from ..common.validators import normalize_category, normalize_location
from ..users.model import ORG_TZ, parse_timestamp

END_OF_DAY = time(23, 59, 59)


def _parse_bound(raw: Any, tz: tzinfo, *, end: bool) -> tuple[Optional[datetime], bool]:
    """Parse an event bound; a bare YYYY-MM-DD covers that whole day."""
    if isinstance(raw, str) and len(raw.strip()) == 10:
        try:
            day = date.fromisoformat(raw.strip())
        except ValueError:
            return None, False
        return datetime.combine(day, END_OF_DAY if end else time.min, tzinfo=tz), True
    return parse_timestamp(raw, tz), False


@dataclass(frozen=True)
class ScheduledEvent:
    """Thực thể miền (domain): sự kiện đã lên lịch.

    Immutable once created except for `participants`, which only the recorder touches.
    `all_day` is set when the start was stored as a bare date.
    """

    event_id: str
    title: str
    start: datetime
    end: datetime
    location: str
    category: str
    participants: Mapping[str, Any] = field(default_factory=dict)
    all_day: bool = False

    @property
    def location_key(self) -> str:
        return normalize_location(self.location)

    @classmethod
    def from_dict(
        cls, event_id: str, raw: Mapping[str, Any], tz: Optional[tzinfo] = None
    ) -> Optional["ScheduledEvent"]:
        tz = tz or ORG_TZ
        start, all_day = _parse_bound(raw.get("start"), tz, end=False)
        if start is None:
            return None
        end, _ = _parse_bound(raw.get("end"), tz, end=True)
        if end is None:
            end = datetime.combine(start.date(), END_OF_DAY, tzinfo=start.tzinfo) if all_day else start
        if end < start:
            end = start
        return cls(
            event_id=str(event_id),
            title=str(raw.get("title") or "Untitled Event"),
            start=start,
            end=end,
            location=str(raw.get("location") or ""),
            category=normalize_category(raw.get("category") or raw.get("eventType")),
            participants=raw.get("participants") or {},
            all_day=all_day,
        )
