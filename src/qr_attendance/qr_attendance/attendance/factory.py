from __future__ import annotations

from dataclasses import dataclass

from .repository import AttendanceRepository
from .steps.base import SessionSearchStep
from .steps.global_sweep_step import GlobalSweepStep
from .steps.location_log_step import LocationLogStep
from .steps.user_index_step import UserIndexStep


@dataclass
class SessionSearchFactory:
    """Factory Pattern: build the ordered open-session search chain."""

    attendance: AttendanceRepository

    def default_chain(self) -> list[SessionSearchStep]:
        return [
            UserIndexStep(),
            LocationLogStep(self.attendance),
            GlobalSweepStep(self.attendance),
        ]
