from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import TimeSource
from ..database.paths import EVENTS, event_path
from ..database.tree_store import TreeStore
from .model import ScheduledEvent
from .repository import EventCatalog


class StoreEventCatalog(EventCatalog):
    """Events as stored; bounds without an offset are org wall time."""

    def __init__(self, store: TreeStore, clock: Optional[TimeSource] = None):
        self._store = store
        self._clock = clock or TimeSource()

    def list_events(self) -> Sequence[ScheduledEvent]:
        raw = self._store.read(EVENTS) or {}
        events = []
        for event_id, data in raw.items():
            if not isinstance(data, Mapping):
                continue
            event = ScheduledEvent.from_dict(event_id, data, self._clock.tz)
            if event:
                events.append(event)
        events.sort(key=lambda e: (e.start, e.event_id))
        return events

    def get_by_id(self, event_id: str) -> Optional[ScheduledEvent]:
        raw = self._store.read(event_path(event_id))
        if not isinstance(raw, Mapping):
            return None
        return ScheduledEvent.from_dict(event_id, raw, self._clock.tz)
