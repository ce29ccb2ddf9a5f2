"""
State management utilities.

Helpers for presenting session state on the progress dashboard.
"""

from datetime import datetime, timezone
from typing import Optional


def format_session_duration(started_at: datetime, now: Optional[datetime] = None) -> str:
    """Elapsed time as '12m' or '1h 5m' (whole minutes, rounded down)."""
    now = now or datetime.now(timezone.utc)
    minutes = max(0, int((now - started_at).total_seconds() // 60))
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes - hours * 60}m"
    return f"{minutes}m"


def sorted_mastery(concept_mastery: dict[str, int]) -> list[tuple[str, int]]:
    """Most-studied concepts first, ties broken alphabetically."""
    return sorted(concept_mastery.items(), key=lambda item: (-item[1], item[0]))
