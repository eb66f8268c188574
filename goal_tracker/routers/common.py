"""Shared router helpers."""
from fastapi import Depends, HTTPException, status

from goal_tracker.database import get_storage
from goal_tracker.errors import GoalTrackerError, NotFoundError, TaskLockedError
from goal_tracker.services.goal_service import GoalService
from goal_tracker.services.recurring_task_service import RecurringTaskService
from goal_tracker.services.statistics_service import StatisticsService
from goal_tracker.utils.clock import get_clock


def to_http_exception(error: GoalTrackerError) -> HTTPException:
    """Map a service error to an HTTP error response."""
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, TaskLockedError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(error))


def get_goal_service(storage=Depends(get_storage), clock=Depends(get_clock)) -> GoalService:
    """Dependency building a goal service."""
    return GoalService(storage, clock)


def get_task_service(
    storage=Depends(get_storage),
    clock=Depends(get_clock),
) -> RecurringTaskService:
    """Dependency building a recurring task service."""
    return RecurringTaskService(storage, clock)


def get_statistics_service(
    storage=Depends(get_storage),
    clock=Depends(get_clock),
) -> StatisticsService:
    """Dependency building a statistics service."""
    return StatisticsService(storage, clock)
