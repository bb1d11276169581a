from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..users.model import User
from .model import OpenSession
from .steps.base import SearchContext, SessionSearchStep

logger = logging.getLogger(__name__)


class OpenSessionFinder:
    """Locate a user's most recent unmatched clock-in.

    Steps run in order and the first one that finds something wins.
    """

    def __init__(self, steps: Sequence[SessionSearchStep]):
        self._steps = list(steps)

    def find_open_session(
        self,
        user: User,
        as_of: date,
        location_key: Optional[str] = None,
    ) -> Optional[OpenSession]:
        ctx = SearchContext(user=user, as_of=as_of, location_key=location_key or None)
        for step in self._steps:
            found = step.find(ctx)
            if found:
                logger.info(
                    "open session %s for user %s found via %s (%s, %s)",
                    found.session_key,
                    user.user_id,
                    step.name,
                    found.location,
                    found.day,
                )
                return found
        return None
