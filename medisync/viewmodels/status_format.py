"""Status-token labeling helpers for view models.

Call context:
    ``DashboardVM`` calls these helpers to map slot and journal status tokens
    into consistent operator-facing labels.
"""

from __future__ import annotations

from typing import Optional


def status_key(status: Optional[str]) -> str:
    """Normalize status text into lowercase canonical token."""
    value = getattr(status, "value", status)
    return str(value or "").strip().lower()


def status_label(status: Optional[str]) -> str:
    """Convert a status token into operator-facing label text."""
    key = status_key(status)
    mapping = {
        "taken": "Medication Taken",
        "missed": "Medication Missed",
        "started": "Dispensing Started",
        "manual_trigger": "Manually Triggered",
        "in_progress": "Dispensing in Progress",
        "pending": "Pending",
    }
    if key in mapping:
        return mapping[key]
    # unknown tokens are shown verbatim
    return str(getattr(status, "value", status) or "")


def status_tone(status: Optional[str]) -> str:
    """Coarse tone used to colour rows: ``ok``, ``error``, ``active`` or ``idle``."""
    key = status_key(status)
    if key == "taken":
        return "ok"
    if key == "missed":
        return "error"
    if key in {"started", "in_progress", "manual_trigger"}:
        return "active"
    return "idle"


__all__ = ["status_key", "status_label", "status_tone"]
