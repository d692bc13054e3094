"""Deactivate expired class sessions in one pass.

Reads already treat expired sessions as gone; this keeps the ``active`` flag
tidy for reporting. Safe to run from cron at any interval.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.qr_attendance.qr_attendance.common.logging_config import configure_logging
from src.qr_attendance.qr_attendance.container import build_container


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    count = container.session_service.sweep_expired()
    print(f"OK: deactivated {count} expired session(s)")


if __name__ == "__main__":
    main()
