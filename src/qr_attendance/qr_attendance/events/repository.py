from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ScheduledEvent


class EventCatalog(Protocol):
    """Read side of the scheduled events."""

    def list_events(self) -> Sequence[ScheduledEvent]:
        raise NotImplementedError

    def get_by_id(self, event_id: str) -> Optional[ScheduledEvent]:
        raise NotImplementedError
