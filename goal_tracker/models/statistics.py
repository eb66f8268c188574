"""Statistics response models."""
from goal_tracker.models.base import CamelModel


class TaskStatistics(CamelModel):
    """Completion counts across recurring task subsets."""

    daily_completed: int = 0
    daily_total: int = 0
    weekly_completed: int = 0
    weekly_total: int = 0
    today_weekly_completed: int = 0
    today_weekly_total: int = 0


class GoalSummary(CamelModel):
    """Dashboard summary across all goals."""

    total_goals: int = 0
    completed_goals: int = 0
    average_progress: int = 0
    total_task_blocks: int = 0
