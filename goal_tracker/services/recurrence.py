"""Recurrence reset policy - decides when recurring tasks start a new window.

Daily tasks reset when the calendar day changes; weekly tasks reset when the
ISO week (ISO year and week number) changes.
"""
from datetime import datetime

from goal_tracker.models.recurring_task import TaskKind


def window_of(moment: datetime, kind: TaskKind) -> tuple[int, ...]:
    """
    Identify the reset window containing a moment.

    Examples:
        >>> window_of(datetime(2026, 10, 19, 8), TaskKind.DAILY)
        (2026, 10, 19)
        >>> window_of(datetime(2026, 10, 19, 8), TaskKind.WEEKLY)
        (2026, 43)
    """
    if kind == TaskKind.DAILY:
        return (moment.year, moment.month, moment.day)
    iso = moment.isocalendar()
    return (iso[0], iso[1])


def is_stale(last_reset: datetime, current: datetime, kind: TaskKind) -> bool:
    """True when a window boundary was crossed since the last reset check."""
    return window_of(last_reset, kind) != window_of(current, kind)
