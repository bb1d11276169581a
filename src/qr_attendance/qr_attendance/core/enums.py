from __future__ import annotations

from enum import Enum


class ScanMode(str, Enum):
    """Hướng quét: vào ca hoặc tan ca."""

    IN = "in"
    OUT = "out"


class Outcome(str, Enum):
    """Kết quả kết thúc của một lần đối soát (không phải lỗi)."""

    OPENED = "OPENED"
    CLOSED = "CLOSED"
    LOCATION_REQUIRED = "LOCATION_REQUIRED"
    NO_OP = "NO_OP"


class SessionStatus(str, Enum):
    CLOCKED_IN = "clocked-in"
    COMPLETED = "completed"
    AUTO_CLOSED = "auto-closed"


class Category(str, Enum):
    """Canonical event categories stored under users/{id}/events/{category}."""

    HACIENDAS = "haciendas"
    WORKSHOPS = "workshops"
    MEETINGS = "meetings"
    JUNTA_HACIENDA = "juntaHacienda"
    GESTION = "gestion"
    GENERAL = "general"


class PadrinoTier(str, Enum):
    """Four ordinal eligibility tiers, lowest first."""

    RED = "red"
    ORANGE = "orange"
    GREEN = "green"
    BLUE = "blue"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER = [PadrinoTier.RED, PadrinoTier.ORANGE, PadrinoTier.GREEN, PadrinoTier.BLUE]
