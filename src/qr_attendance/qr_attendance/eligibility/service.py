from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import require_path_segment
from ..core.exceptions import UserNotFound
from ..database.paths import user_path
from ..database.tree_store import TreeStore
from ..users.repository import UserRepository
from .calculator.base import EligibilityCalculator
from .calculator.threshold_calculator import ThresholdEligibilityCalculator
from .model import EligibilitySnapshot

logger = logging.getLogger(__name__)


class EligibilityService:
    def __init__(
        self,
        users: UserRepository,
        store: TreeStore,
        *,
        calculator: Optional[EligibilityCalculator] = None,
    ):
        self._users = users
        self._store = store
        self._calculator = calculator or ThresholdEligibilityCalculator()

    def rank_user(self, user_id: str) -> EligibilitySnapshot:
        user_id = require_path_segment(user_id, "userId")
        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)
        return self._calculator.rank(user)

    def refresh_all(self) -> dict[str, str]:
        """Rank every active user and store `profile/padrinoColor` in one batch."""
        updates = {}
        tiers: dict[str, str] = {}
        for user in self._users.list_all():
            if not user.is_active:
                continue
            snapshot = self._calculator.rank(user)
            tiers[user.user_id] = snapshot.tier.value
            if user.profile.get("padrinoColor") != snapshot.tier.value:
                updates[user_path(user.user_id, "profile", "padrinoColor")] = snapshot.tier.value

        if updates:
            self._store.batch_write(updates)
        logger.info("padrino tiers refreshed for %d users (%d changed)", len(tiers), len(updates))
        return tiers
