from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence

from ...common.validators import normalize_category
from ...core.enums import PadrinoTier
from ...users.model import User
from ..model import CategoryRatio, EligibilitySnapshot, RequirementCheck
from ..thresholds import DEFAULT_TIER_RULES, TierRule, rule_categories, sort_rules
from .base import EligibilityCalculator


def count_category(events: Mapping[str, Any], category: str) -> CategoryRatio:
    """Count scheduled/attended entries stored under any alias of `category`.

    `groupMeetings` and `meetings` both feed "meetings", for example.
    """
    attended = 0
    total = 0
    for stored_name, entries in events.items():
        if normalize_category(stored_name) != category or not isinstance(entries, Mapping):
            continue
        for entry in entries.values():
            if not isinstance(entry, Mapping) or entry.get("scheduled") is False:
                continue
            total += 1
            if entry.get("attended") is True:
                attended += 1
    return CategoryRatio(category=category, attended=attended, total=total)


class ThresholdEligibilityCalculator(EligibilityCalculator):
    """Pure tier ranking from per-category attendance ratios."""

    def __init__(
        self,
        rules: Optional[Sequence[TierRule]] = None,
        *,
        vacuous_categories: Iterable[str] = (),
    ):
        self._rules = sort_rules(rules or DEFAULT_TIER_RULES)
        self._vacuous = {normalize_category(c) for c in vacuous_categories}
        self._categories = rule_categories(self._rules)

    def ratios(self, user: User) -> dict[str, CategoryRatio]:
        return {c: count_category(user.events, c) for c in self._categories}

    def _met(self, ratio: CategoryRatio, minimum: float) -> bool:
        if ratio.total == 0:
            return ratio.category in self._vacuous
        return ratio.ratio >= minimum

    def rank(self, user: User) -> EligibilitySnapshot:
        ratios = self.ratios(user)

        tier = PadrinoTier.RED
        for rule in self._rules:
            if not all(self._met(ratios[c], pct) for c, pct in rule.minimums.items()):
                break
            tier = rule.tier

        # Report against the strictest rule so the UI can show what is missing.
        checks: list[RequirementCheck] = []
        if self._rules:
            for category, pct in self._rules[-1].minimums.items():
                r = ratios[category]
                checks.append(RequirementCheck(category=category, required=pct, actual=r.ratio, met=self._met(r, pct)))

        return EligibilitySnapshot(user_id=user.user_id, tier=tier, ratios=ratios, requirements=tuple(checks))
