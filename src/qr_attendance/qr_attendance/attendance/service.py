from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import TimeSource
from ..common.validators import normalize_category, normalize_location, require_path_segment
from ..core.constants import DEFAULT_CATEGORY
from ..core.enums import Outcome, ScanMode
from ..core.exceptions import EventNotFound, InvalidScan, NoOpenSession, UserInactive, UserNotFound, ValidationError
from ..events.model import ScheduledEvent
from ..events.repository import EventCatalog
from ..events.resolver import EventResolver
from ..stats.aggregator import StatsAggregator
from ..stats.lateness import LatenessPolicy
from ..users.model import User
from ..users.repository import UserRepository
from .model import OpenSession, ReconciliationResult, ScanRequest
from .recorder import AttendanceRecorder
from .session_finder import OpenSessionFinder

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Turn one scan into at most one persisted state transition.

    Stateless between calls: everything it needs is read from the store on
    each `reconcile`, and everything it changes goes through the recorder.
    """

    def __init__(
        self,
        users: UserRepository,
        catalog: EventCatalog,
        resolver: EventResolver,
        finder: OpenSessionFinder,
        recorder: AttendanceRecorder,
        stats: StatsAggregator,
        lateness: LatenessPolicy,
        clock: TimeSource,
        *,
        default_category: str = DEFAULT_CATEGORY,
    ):
        self._users = users
        self._catalog = catalog
        self._resolver = resolver
        self._finder = finder
        self._recorder = recorder
        self._stats = stats
        self._lateness = lateness
        self._clock = clock
        self._default_category = normalize_category(default_category) or DEFAULT_CATEGORY

    def reconcile(self, scan: ScanRequest) -> ReconciliationResult:
        user = self._load_user(scan.user_id)
        timestamp = self._clock.localize(scan.timestamp)

        if scan.mode == ScanMode.IN:
            return self._clock_in(user, scan, timestamp)
        if scan.mode == ScanMode.OUT:
            return self._clock_out(user, scan, timestamp)
        raise InvalidScan(f"Unknown scan mode: {scan.mode!r}")

    def _load_user(self, user_id: str) -> User:
        try:
            user_id = require_path_segment(user_id, "userId")
        except ValidationError as e:
            raise InvalidScan(str(e)) from e

        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)
        if not user.is_active:
            raise UserInactive(user_id)
        return user

    def _clock_in(self, user: User, scan: ScanRequest, timestamp: datetime) -> ReconciliationResult:
        location_key = normalize_location(scan.location)
        if not location_key:
            return ReconciliationResult(outcome=Outcome.LOCATION_REQUIRED, user_id=user.user_id)

        day = timestamp.date()
        existing = self._finder.find_open_session(user, day, location_key)
        if existing:
            logger.info("duplicate clock-in for user %s; session %s already open", user.user_id, existing.session_key)
            return self._result(Outcome.NO_OP, existing)

        event = self._resolve_event(scan, day, location_key)
        if event is not None:
            category = event.category or self._default_category
        else:
            category = normalize_category(scan.category_hint) or self._default_category

        decision = self._lateness.decide(timestamp, category, event)
        first_of_day = not user.sessions_on(day)
        stats_updates = self._stats.on_clock_in(user, timestamp, is_late=decision.is_late, first_of_day=first_of_day)

        opened = self._recorder.open_session(
            user=user,
            location_key=location_key,
            location_name=str(scan.location).strip(),
            timestamp=timestamp,
            category=category,
            is_late=decision.is_late,
            event=event,
            stale=user.open_sessions(),
            extra_updates=stats_updates,
        )
        if not opened.created:
            entry = opened.existing
            return ReconciliationResult(
                outcome=Outcome.NO_OP,
                user_id=user.user_id,
                session_key=entry.session_key,
                location=entry.location,
                event_id=entry.event_id,
                category=entry.category,
                clock_in_time=entry.clock_in_time,
            )
        if decision.is_late:
            logger.info("user %s is %d minutes late", user.user_id, decision.minutes_late)

        return ReconciliationResult(
            outcome=Outcome.OPENED,
            user_id=user.user_id,
            session_key=opened.session_key,
            location=location_key,
            event_id=event.event_id if event else None,
            category=category,
            clock_in_time=timestamp,
            is_late=decision.is_late,
        )

    def _clock_out(self, user: User, scan: ScanRequest, timestamp: datetime) -> ReconciliationResult:
        location_key = normalize_location(scan.location) or None
        session = self._finder.find_open_session(user, timestamp.date(), location_key)
        if not session:
            raise NoOpenSession(user.user_id)

        hours = self._recorder.close_session(
            session,
            timestamp,
            stats_updates=lambda worked: self._stats.on_clock_out(user, timestamp, worked),
        )
        return ReconciliationResult(
            outcome=Outcome.CLOSED,
            user_id=user.user_id,
            session_key=session.session_key,
            location=session.location,
            event_id=session.event_id,
            category=session.category,
            clock_in_time=session.clock_in_time,
            clock_out_time=timestamp,
            hours_worked=hours.hours,
            hours_clamped=hours.clamped,
        )

    def _resolve_event(self, scan: ScanRequest, day: date, location_key: str) -> Optional[ScheduledEvent]:
        if scan.event_hint:
            try:
                require_path_segment(scan.event_hint, "eventHint")
            except ValidationError as e:
                raise InvalidScan(str(e)) from e
            event = self._catalog.get_by_id(scan.event_hint)
            if not event:
                raise EventNotFound(scan.event_hint)
            scheduled = {e.event_id for e in self._resolver.candidates(day, location_key)}
            if event.event_id not in scheduled:
                raise InvalidScan(f"Event {event.event_id!r} is not scheduled at {location_key!r} on {day.isoformat()}")
            return event
        return self._resolver.resolve(day, location_key, scan.category_hint)

    @staticmethod
    def _result(outcome: Outcome, session: OpenSession) -> ReconciliationResult:
        return ReconciliationResult(
            outcome=outcome,
            user_id=session.user_id,
            session_key=session.session_key,
            location=session.location,
            event_id=session.event_id,
            category=session.category,
            clock_in_time=session.clock_in_time,
        )
