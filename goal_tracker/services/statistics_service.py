"""Statistics service - completion counts over recurring tasks and goals."""
import math

from goal_tracker.models.recurring_task import TaskKind
from goal_tracker.models.statistics import GoalSummary, TaskStatistics
from goal_tracker.services.goal_service import GoalService
from goal_tracker.services.recurring_task_service import RecurringTaskService
from goal_tracker.storage import StorageAdapter
from goal_tracker.utils.clock import Clock, now


def _completed(tasks) -> int:
    return sum(1 for task in tasks if task.completed)


class StatisticsService:
    """Service deriving dashboard counts from the other services."""

    def __init__(self, storage: StorageAdapter, clock: Clock = now):
        """Initialize service with a storage adapter and clock."""
        self.tasks = RecurringTaskService(storage, clock)
        self.goals = GoalService(storage, clock)

    async def get_statistics(self) -> TaskStatistics:
        """
        Count completed and total recurring tasks.

        Lists go through the task service, so pending resets are applied
        before counting.

        Returns:
            Counts for daily, weekly and today's weekly tasks
        """
        daily = await self.tasks.list_tasks(TaskKind.DAILY)
        weekly = await self.tasks.list_tasks(TaskKind.WEEKLY)
        today_weekly = await self.tasks.list_today_weekly()

        return TaskStatistics(
            daily_completed=_completed(daily),
            daily_total=len(daily),
            weekly_completed=_completed(weekly),
            weekly_total=len(weekly),
            today_weekly_completed=_completed(today_weekly),
            today_weekly_total=len(today_weekly),
        )

    async def get_goal_summary(self) -> GoalSummary:
        """Summarize goals: count, completed count, mean progress and block total."""
        goals = await self.goals.list_goals()
        if not goals:
            return GoalSummary()

        average = sum(goal.progress for goal in goals) / len(goals)
        return GoalSummary(
            total_goals=len(goals),
            completed_goals=sum(1 for goal in goals if goal.completed),
            average_progress=math.floor(average + 0.5),
            total_task_blocks=sum(len(goal.task_blocks) for goal in goals),
        )
