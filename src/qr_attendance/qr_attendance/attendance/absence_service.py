from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import TimeSource
from ..common.validators import require_path_segment
from ..core.exceptions import EventNotFound, UserNotFound
from ..database.paths import user_event_path
from ..database.tree_store import TreeStore, join_path
from ..stats.aggregator import StatsAggregator
from ..users.model import User, parse_day
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndOfDaySummary:
    day: date
    entries_marked: int
    users_absent: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "entriesMarked": self.entries_marked,
            "usersAbsent": list(self.users_absent),
        }


def _absent_updates(base: str, marked_at: datetime) -> dict[str, Any]:
    return {
        join_path(base, "attended"): False,
        join_path(base, "markedAbsent"): True,
        join_path(base, "absentMarkedAt"): marked_at.isoformat(),
    }


def _is_pending(entry: Mapping[str, Any]) -> bool:
    return bool(entry.get("scheduled")) and entry.get("attended") is not True and entry.get("markedAbsent") is not True


class AbsenceService:
    """Explicit absence marking for scheduled event entries.

    Nothing here is decremented: absence only adds `markedAbsent` flags and
    grows `daysAbsent`.
    """

    def __init__(self, store: TreeStore, users: UserRepository, stats: StatsAggregator, clock: TimeSource):
        self._store = store
        self._users = users
        self._stats = stats
        self._clock = clock

    def mark_absent(self, user_id: str, category: str, instance_id: str, *, now: Optional[datetime] = None) -> None:
        user_id = require_path_segment(user_id, "userId")
        category = require_path_segment(category, "category")
        instance_id = require_path_segment(instance_id, "eventId")

        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)
        entry = (user.events.get(category) or {}).get(instance_id)
        if not isinstance(entry, Mapping):
            raise EventNotFound(instance_id)

        now = self._clock.localize(now) if now else self._clock.now()
        self._store.batch_write(_absent_updates(user_event_path(user_id, category, instance_id), now))
        logger.info("marked user %s absent for %s/%s", user_id, category, instance_id)

    def process_end_of_day(self, day: Optional[date] = None, *, now: Optional[datetime] = None) -> EndOfDaySummary:
        """Mark every still-pending entry dated `day` absent, in one batch.

        Users left without any session that day also get one more absent day.
        """

        now = self._clock.localize(now) if now else self._clock.now()
        day = day or now.date()

        updates: dict[str, Any] = {}
        marked = 0
        absent_users: list[str] = []
        for user in self._users.list_all():
            if not user.is_active:
                continue
            pending = self._pending_entries(user, day)
            if not pending:
                continue
            for category, instance_id in pending:
                updates.update(_absent_updates(user_event_path(user.user_id, category, instance_id), now))
            marked += len(pending)
            if not user.sessions_on(day):
                updates.update(self._stats.on_absent_day(user))
                absent_users.append(user.user_id)

        if updates:
            self._store.batch_write(updates)
        logger.info("end of day %s: %d entries marked absent, %d users absent", day, marked, len(absent_users))
        return EndOfDaySummary(day=day, entries_marked=marked, users_absent=tuple(absent_users))

    @staticmethod
    def _pending_entries(user: User, day: date) -> list[tuple[str, str]]:
        out = []
        for category, entries in sorted(user.events.items()):
            if not isinstance(entries, Mapping):
                continue
            for instance_id, entry in sorted(entries.items()):
                if isinstance(entry, Mapping) and _is_pending(entry) and parse_day(entry.get("date")) == day:
                    out.append((category, instance_id))
        return out
