from __future__ import annotations

from abc import ABC, abstractmethod

from ...users.model import User
from ..model import EligibilitySnapshot


class EligibilityCalculator(ABC):
    """Calculator interface (Strategy Pattern for padrino tiers)."""

    @abstractmethod
    def rank(self, user: User) -> EligibilitySnapshot:
        raise NotImplementedError
