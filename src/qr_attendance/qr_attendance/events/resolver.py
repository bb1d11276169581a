from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import TimeSource
from ..common.validators import normalize_category, normalize_location
from ..core.exceptions import AmbiguousEvent
from .model import ScheduledEvent
from .repository import EventCatalog

logger = logging.getLogger(__name__)


class EventResolver:
    """Pick the one scheduled event a scan satisfies.

    Candidates are events starting on the scan date plus multi-day events whose
    date range contains it. One candidate is selected, none yields None, and
    more than one is never guessed: the caller has to name the event.
    """

    def __init__(self, catalog: EventCatalog, clock: TimeSource):
        self._catalog = catalog
        self._clock = clock

    def candidates(
        self,
        day: date,
        location: Optional[str] = None,
        category_hint: Optional[str] = None,
    ) -> list[ScheduledEvent]:
        location_key = normalize_location(location)
        category = normalize_category(category_hint)

        out: list[ScheduledEvent] = []
        for event in self._catalog.list_events():
            start_day = self._clock.local_date(event.start)
            end_day = self._clock.local_date(event.end)
            same_day = start_day == day
            spans_day = end_day > start_day and start_day <= day <= end_day
            if not (same_day or spans_day):
                continue
            if location_key and event.location_key and event.location_key != location_key:
                continue
            if category and event.category != category:
                continue
            out.append(event)
        return out

    def resolve(
        self,
        day: date,
        location: Optional[str] = None,
        category_hint: Optional[str] = None,
    ) -> Optional[ScheduledEvent]:
        found = self.candidates(day, location, category_hint)
        if not found:
            logger.debug("no scheduled event on %s at %r", day, location)
            return None
        if len(found) > 1:
            ids = [e.event_id for e in found]
            logger.info("ambiguous events on %s at %r: %s", day, location, ids)
            raise AmbiguousEvent(ids)
        logger.debug("resolved event %s on %s", found[0].event_id, day)
        return found[0]
