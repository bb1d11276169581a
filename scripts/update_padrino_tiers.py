"""Recompute every active member's padrino tier and store it in profile/padrinoColor.

Run after attendance imports or at the end of each week.
"""
from __future__ import annotations

import importlib
import logging
import sys
from collections import Counter
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.qr_attendance.qr_attendance.container import EngineSettings, build_container


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper())

    container = build_container(EngineSettings.from_module(settings))
    tiers = container.eligibility_service.refresh_all()

    counts = Counter(tiers.values())
    summary = ", ".join(f"{tier}={counts[tier]}" for tier in ("blue", "green", "orange", "red"))
    print(f"OK: padrino tiers updated for {len(tiers)} members ({summary})")


if __name__ == "__main__":
    main()
