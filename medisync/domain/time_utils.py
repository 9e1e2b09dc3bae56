from __future__ import annotations

"""Stamp formatting for slot records and journal entries."""

from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone().replace(microsecond=0)


def slot_stamp(now: Optional[datetime] = None) -> str:
    """``HH:MM`` in 24-hour local time, written to ``lastUpdated``."""
    moment = now or local_now()
    return moment.strftime("%H:%M")


def log_timestamp(now: Optional[datetime] = None) -> str:
    """``HH:MM:SS`` in 24-hour local time for journal entries."""
    moment = now or local_now()
    return moment.strftime("%H:%M:%S")


def log_date(now: Optional[datetime] = None) -> str:
    """UTC calendar date (``YYYY-MM-DD``) for journal entries."""
    moment = now or local_now()
    return moment.astimezone(timezone.utc).date().isoformat()


__all__ = ["Clock", "local_now", "log_date", "log_timestamp", "slot_stamp"]
