"""Padrino tier rules as data.

Each rule lists the minimum percent per category for one tier. A tier is only
reached when its own rule and every lower rule hold, which keeps the ranking
monotonic in attendance no matter how the numbers are configured.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import normalize_category
from ..core.enums import Category, PadrinoTier
from ..core.exceptions import ValidationError

TRACKED_CATEGORIES = (Category.HACIENDAS.value, Category.WORKSHOPS.value, Category.MEETINGS.value)


@dataclass(frozen=True)
class TierRule:
    tier: PadrinoTier
    minimums: Mapping[str, float]


DEFAULT_TIER_RULES: tuple[TierRule, ...] = (
    TierRule(PadrinoTier.ORANGE, {Category.HACIENDAS.value: 95.0}),
    TierRule(PadrinoTier.GREEN, {Category.HACIENDAS.value: 95.0, Category.WORKSHOPS.value: 60.0}),
    TierRule(
        PadrinoTier.BLUE,
        {Category.HACIENDAS.value: 95.0, Category.WORKSHOPS.value: 60.0, Category.MEETINGS.value: 100.0},
    ),
)


def parse_tier_rules(raw: Optional[Mapping[str, Mapping[str, Any]]]) -> tuple[TierRule, ...]:
    """Read `{"orange": {"haciendas": 95}, ...}` from settings; empty means defaults."""
    if not raw:
        return DEFAULT_TIER_RULES

    rules = []
    for tier_name, minimums in raw.items():
        try:
            tier = PadrinoTier(str(tier_name).lower())
        except ValueError as e:
            raise ValidationError(f"Unknown padrino tier: {tier_name!r}") from e
        if tier == PadrinoTier.RED:
            raise ValidationError("The lowest tier has no requirements")
        parsed = {}
        for category, value in (minimums or {}).items():
            pct = float(value)
            if not 0 <= pct <= 100:
                raise ValidationError(f"Threshold for {category!r} must be between 0 and 100")
            parsed[normalize_category(category)] = pct
        rules.append(TierRule(tier, parsed))
    return sort_rules(rules)


def sort_rules(rules: Sequence[TierRule]) -> tuple[TierRule, ...]:
    return tuple(sorted(rules, key=lambda r: r.tier.rank))


def rule_categories(rules: Sequence[TierRule]) -> list[str]:
    names = list(TRACKED_CATEGORIES)
    for rule in rules:
        for category in rule.minimums:
            if category not in names:
                names.append(category)
    return names
