from __future__ import annotations

import logging
from typing import Optional

from ..model import OpenSession
from .base import SearchContext, SessionSearchStep, latest

logger = logging.getLogger(__name__)


class UserIndexStep(SessionSearchStep):
    """The user's own session index, limited to the scan date and the day before."""

    name = "user-index"

    def find(self, ctx: SearchContext) -> Optional[OpenSession]:
        open_entries = ctx.user.open_sessions()
        if len(open_entries) > 1:
            logger.warning(
                "user %s has %d open sessions: %s",
                ctx.user.user_id,
                len(open_entries),
                [s.session_key for s in open_entries],
            )

        window = ctx.window
        return latest(
            OpenSession(
                session_key=s.session_key,
                user_id=ctx.user.user_id,
                clock_in_time=s.clock_in_time,
                location=s.location,
                day=s.day,
                event_id=s.event_id,
                category=s.category,
                source=self.name,
            )
            for s in open_entries
            if s.day in window
        )
