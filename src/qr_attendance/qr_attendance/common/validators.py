from __future__ import annotations

import re

from ..core.enums import Category
from ..core.exceptions import ValidationError

_FORBIDDEN_SEGMENT_CHARS = set("/.#$[]")

_CATEGORY_ALIASES = {
    "workshop": Category.WORKSHOPS,
    "workshops": Category.WORKSHOPS,
    "poworkshop": Category.WORKSHOPS,
    "poworkshops": Category.WORKSHOPS,
    "poworkshop(monthly)": Category.WORKSHOPS,
    "meeting": Category.MEETINGS,
    "meetings": Category.MEETINGS,
    "groupmeeting": Category.MEETINGS,
    "groupmeetings": Category.MEETINGS,
    "pogroupmeeting": Category.MEETINGS,
    "pomeeting": Category.MEETINGS,
    "hacienda": Category.HACIENDAS,
    "haciendas": Category.HACIENDAS,
    "juntahacienda": Category.JUNTA_HACIENDA,
    "juntadehacienda": Category.JUNTA_HACIENDA,
    "gestion": Category.GESTION,
    "general": Category.GENERAL,
    "generalmeeting": Category.GENERAL,
}


def require_non_empty(value: str | None, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_path_segment(value: str | None, field_name: str) -> str:
    """A value used as one key of a store path."""
    value = require_non_empty(value, field_name)
    if any(ch in _FORBIDDEN_SEGMENT_CHARS for ch in value):
        raise ValidationError(f"{field_name} contains characters not allowed in a key: {value!r}")
    return value


def normalize_location(value: str | None) -> str:
    """Location key: case-insensitive, whitespace-free ("West Chicago" -> "westchicago").

    Characters that cannot appear in a store key are dropped as well.
    """
    if not value:
        return ""
    return re.sub(r"[\s/.#$\[\]]+", "", str(value)).lower()


def normalize_category(value: str | None) -> str:
    if not value or not str(value).strip():
        return ""
    compact = re.sub(r"[\s_\-/.#$\[\]]+", "", str(value)).lower()
    known = _CATEGORY_ALIASES.get(compact)
    if known:
        return known.value
    return compact
