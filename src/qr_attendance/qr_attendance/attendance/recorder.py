from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import format_day, to_epoch_millis
from ..core.constants import MAX_HOURS_WORKED, MIN_HOURS_WORKED
from ..core.enums import SessionStatus
from ..core.exceptions import SessionAlreadyClosed
from ..database.paths import attendance_path, event_path, location_path, session_path, user_event_path, user_path
from ..database.tree_store import TreeStore, join_path
from ..events.model import ScheduledEvent
from ..users.model import SessionEntry, User
from .model import OpenSession
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HoursWorked:
    hours: float
    raw_hours: float
    clamped: bool


@dataclass(frozen=True)
class OpenedSession:
    session_key: str
    created: bool = True
    existing: Optional[SessionEntry] = None


def measure_hours(clock_in: datetime, clock_out: datetime) -> HoursWorked:
    """Hours between two instants, clamped to [0.1, 24] to absorb clock skew."""
    raw = round((clock_out - clock_in).total_seconds() / 3600, 2)
    hours = min(max(raw, MIN_HOURS_WORKED), MAX_HOURS_WORKED)
    return HoursWorked(hours=hours, raw_hours=raw, clamped=hours != raw)


def make_session_key(user_id: str, clock_in: datetime) -> str:
    return f"{to_epoch_millis(clock_in)}-{user_id}"


class AttendanceRecorder:
    """Writes sessions as single multi-path batches.

    Batch order is part of the contract: the user's session index entry is
    always the last update, so a store that applies updates one by one never
    exposes an open index entry without its attendance record.
    """

    def __init__(self, store: TreeStore, attendance: AttendanceRepository):
        self._store = store
        self._attendance = attendance

    def open_session(
        self,
        *,
        user: User,
        location_key: str,
        location_name: str,
        timestamp: datetime,
        category: str,
        is_late: bool,
        event: Optional[ScheduledEvent] = None,
        stale: Sequence[SessionEntry] = (),
        extra_updates: Optional[Mapping[str, Any]] = None,
    ) -> OpenedSession:
        day = timestamp.date()
        window = (day, day - timedelta(days=1))
        stale_keys = {s.session_key for s in stale}
        late_stale = []
        # Another writer may have opened a session since `user` was read.
        for entry in self._open_index_entries(user.user_id, timestamp):
            if entry.session_key in stale_keys:
                continue
            if entry.day in window:
                logger.warning(
                    "user %s already has open session %s; not opening another", user.user_id, entry.session_key
                )
                return OpenedSession(entry.session_key, created=False, existing=entry)
            late_stale.append(entry)

        key = make_session_key(user.user_id, timestamp)
        clock_in = timestamp.isoformat()
        event_id = event.event_id if event else None

        updates: dict[str, Any] = {
            attendance_path(location_key, day, key): {
                "userId": user.user_id,
                "name": user.name,
                "clockInTime": clock_in,
                "location": location_key,
                "locationName": location_name,
                "date": format_day(day),
                "eventType": category,
                "eventId": event_id,
                "isLate": is_late,
                "status": SessionStatus.CLOCKED_IN.value,
            },
            location_path(location_key): {"name": location_name},
        }

        if event is not None:
            entry = user_event_path(user.user_id, category, event.event_id)
            updates[join_path(entry, "attended")] = True
            updates[join_path(entry, "attendedAt")] = clock_in
            updates[join_path(entry, "markedAbsent")] = False
            updates[join_path(entry, "scheduled")] = True
            updates[join_path(entry, "date")] = format_day(day)
            updates[join_path(entry, "eventId")] = event.event_id
            updates[join_path(entry, "title")] = event.title
            updates[event_path(event.event_id, "participants", user.user_id)] = True

        for entry in (*stale, *late_stale):
            updates.update(self._auto_close(user, entry))

        updates.update(extra_updates or {})

        updates[session_path(user.user_id, key)] = {
            "clockInTime": clock_in,
            "location": location_key,
            "date": format_day(day),
            "category": category,
            "eventId": event_id,
        }

        self._store.batch_write(updates)
        logger.info("opened session %s for user %s at %s (event=%s)", key, user.user_id, location_key, event_id)
        return OpenedSession(key)

    def close_session(
        self,
        session: OpenSession,
        timestamp: datetime,
        *,
        stats_updates: Optional[Callable[[float], Mapping[str, Any]]] = None,
    ) -> HoursWorked:
        record = self._attendance.get(session.location, session.day, session.session_key)
        if record is not None and not record.is_open:
            # The index lagged behind the log; bring it in line before refusing.
            self._store.write(
                join_path(session_path(session.user_id, session.session_key), "clockOutTime"),
                record.clock_out_time.isoformat(),
            )
            raise SessionAlreadyClosed(session.session_key)

        hours = measure_hours(session.clock_in_time, timestamp)
        if hours.clamped:
            logger.warning(
                "session %s for user %s: hours %.2f clamped to %.2f",
                session.session_key,
                session.user_id,
                hours.raw_hours,
                hours.hours,
            )

        clock_out = timestamp.isoformat()
        record_path = attendance_path(session.location, session.day, session.session_key)
        closing = {
            "clockOutTime": clock_out,
            "hoursWorked": hours.hours,
            "status": SessionStatus.COMPLETED.value,
        }
        if hours.clamped:
            closing["hoursClamped"] = True
            closing["rawHours"] = hours.raw_hours

        updates: dict[str, Any] = {}
        if record is None:
            logger.warning("session %s has no attendance record; rebuilding it", session.session_key)
            updates[record_path] = {**self._record_from_session(session), **closing}
        else:
            for name, value in closing.items():
                updates[join_path(record_path, name)] = value

        if stats_updates is not None:
            updates.update(stats_updates(hours.hours))

        updates[session_path(session.user_id, session.session_key)] = {
            "clockInTime": session.clock_in_time.isoformat(),
            "clockOutTime": clock_out,
            "hoursWorked": hours.hours,
            "location": session.location,
            "date": format_day(session.day),
            "category": session.category,
            "eventId": session.event_id,
        }

        self._store.batch_write(updates)
        logger.info("closed session %s for user %s (%.2f h)", session.session_key, session.user_id, hours.hours)
        return hours

    def _open_index_entries(self, user_id: str, timestamp: datetime) -> list[SessionEntry]:
        raw = self._store.read(user_path(user_id, "sessions")) or {}
        entries = []
        for key, data in raw.items():
            if not isinstance(data, Mapping):
                continue
            entry = SessionEntry.from_dict(key, data, timestamp.tzinfo)
            if entry is not None and entry.is_open:
                entries.append(entry)
        return entries

    def _auto_close(self, user: User, entry: SessionEntry) -> dict[str, Any]:
        logger.warning("auto-closing stale session %s for user %s", entry.session_key, user.user_id)
        clock_in = entry.clock_in_time.isoformat()
        updates: dict[str, Any] = {}

        day: Optional[date] = entry.day
        if entry.location and day is not None:
            record_path = attendance_path(entry.location, day, entry.session_key)
            if self._attendance.get(entry.location, day, entry.session_key) is not None:
                updates[join_path(record_path, "clockOutTime")] = clock_in
                updates[join_path(record_path, "hoursWorked")] = 0
                updates[join_path(record_path, "status")] = SessionStatus.AUTO_CLOSED.value

        index_path = session_path(user.user_id, entry.session_key)
        updates[join_path(index_path, "clockOutTime")] = clock_in
        updates[join_path(index_path, "autoClosed")] = True
        return updates

    @staticmethod
    def _record_from_session(session: OpenSession) -> dict[str, Any]:
        return {
            "userId": session.user_id,
            "clockInTime": session.clock_in_time.isoformat(),
            "location": session.location,
            "date": format_day(session.day),
            "eventType": session.category,
            "eventId": session.event_id,
        }
