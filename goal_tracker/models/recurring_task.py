"""Recurring task model definitions (daily and weekly habits)."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from goal_tracker.models.base import CamelModel


class TaskKind(str, Enum):
    """Recurrence kinds; each has its own collection and reset window."""

    DAILY = "daily"
    WEEKLY = "weekly"


class DayOfWeek(str, Enum):
    """Weekday names, Monday first (matches ``date.weekday()``)."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, moment: datetime) -> "DayOfWeek":
        """Weekday of a datetime."""
        return list(cls)[moment.weekday()]


class RecurringTaskBase(CamelModel):
    """Fields shared by daily and weekly tasks."""

    title: str
    description: Optional[str] = None
    is_reward_trigger: bool = False
    reward_note: Optional[str] = None
    scheduled_time: Optional[str] = None  # HH:MM


class DailyTaskCreate(RecurringTaskBase):
    """Daily task creation model."""

    pass


class WeeklyTaskCreate(RecurringTaskBase):
    """Weekly task creation model."""

    day_of_week: DayOfWeek


class DailyTaskUpdate(CamelModel):
    """Daily task update model - all fields optional.

    Completion and streak change only through toggling.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    is_reward_trigger: Optional[bool] = None
    reward_note: Optional[str] = None
    scheduled_time: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=0)


class WeeklyTaskUpdate(DailyTaskUpdate):
    """Weekly task update model - all fields optional."""

    day_of_week: Optional[DayOfWeek] = None


class DailyTask(RecurringTaskBase):
    """Full daily task model."""

    id: str
    completed: bool = False
    streak: int = Field(default=0, ge=0)
    order: int = 0
    created_at: datetime
    updated_at: datetime


class WeeklyTask(DailyTask):
    """Full weekly task model."""

    day_of_week: DayOfWeek


class TaskConfiguration(CamelModel):
    """Last reset check for one recurrence kind."""

    type: TaskKind
    updated_at: datetime
