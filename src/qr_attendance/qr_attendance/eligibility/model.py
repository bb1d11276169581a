from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from ..core.enums import PadrinoTier


@dataclass(frozen=True)
class CategoryRatio:
    category: str
    attended: int
    total: int

    @property
    def ratio(self) -> float:
        """Percent attended; 0 when nothing was scheduled."""
        if self.total <= 0:
            return 0.0
        return self.attended / self.total * 100


@dataclass(frozen=True)
class RequirementCheck:
    category: str
    required: float
    actual: float
    met: bool


@dataclass(frozen=True)
class EligibilitySnapshot:
    """Derived eligibility; recomputed on demand, never stored as a whole."""

    user_id: str
    tier: PadrinoTier
    ratios: Mapping[str, CategoryRatio] = field(default_factory=dict)
    requirements: tuple[RequirementCheck, ...] = ()

    @property
    def eligible(self) -> bool:
        return self.tier == PadrinoTier.BLUE

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "tier": self.tier.value,
            "eligible": self.eligible,
            "ratios": {
                name: {"attended": r.attended, "total": r.total, "ratio": round(r.ratio, 1)}
                for name, r in self.ratios.items()
            },
            "requirements": [
                {"category": c.category, "required": c.required, "actual": round(c.actual, 1), "met": c.met}
                for c in self.requirements
            ],
        }
