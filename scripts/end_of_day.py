"""Mark scheduled-but-unattended event entries absent.

Usage: python scripts/end_of_day.py [YYYY-MM-DD]   (default: today, organizational timezone)
"""
from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.qr_attendance.qr_attendance.common.datetime_utils import parse_iso_date
from src.qr_attendance.qr_attendance.container import EngineSettings, build_container


def main(argv: list[str]) -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper())

    day = parse_iso_date(argv[0]) if argv else None
    container = build_container(EngineSettings.from_module(settings))
    summary = container.absence_service.process_end_of_day(day)
    print(
        f"OK: {summary.day.isoformat()}: {summary.entries_marked} entries marked absent, "
        f"{len(summary.users_absent)} members absent"
    )


if __name__ == "__main__":
    main(sys.argv[1:])
