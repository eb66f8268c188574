"""Daily task router - API endpoints for daily recurring tasks."""
from fastapi import APIRouter, Depends, status

from goal_tracker.errors import GoalTrackerError
from goal_tracker.models.recurring_task import (
    DailyTask,
    DailyTaskCreate,
    DailyTaskUpdate,
    TaskKind,
)
from goal_tracker.routers.common import get_task_service, to_http_exception
from goal_tracker.services.recurring_task_service import RecurringTaskService


router = APIRouter(prefix="/daily-tasks", tags=["daily-tasks"])


@router.get("", response_model=list[DailyTask])
async def list_daily_tasks(service: RecurringTaskService = Depends(get_task_service)):
    """
    List daily tasks.

    - Completion flags are cleared first when a new day has begun
    """
    return await service.list_tasks(TaskKind.DAILY)


@router.post("", response_model=DailyTask, status_code=status.HTTP_201_CREATED)
async def create_daily_task(
    task: DailyTaskCreate,
    service: RecurringTaskService = Depends(get_task_service),
):
    """
    Create a new daily task.

    Args:
        task: Daily task creation data
        service: Recurring task service

    Returns:
        Created task (streak 0, not completed)

    Raises:
        HTTPException: If title or scheduled time is invalid (400)
    """
    try:
        return await service.create_task(TaskKind.DAILY, task)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.get("/{task_id}", response_model=DailyTask)
async def get_daily_task(
    task_id: str,
    service: RecurringTaskService = Depends(get_task_service),
):
    """Get a daily task by ID."""
    try:
        return await service.get_task(TaskKind.DAILY, task_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.patch("/{task_id}", response_model=DailyTask)
async def update_daily_task(
    task_id: str,
    task_update: DailyTaskUpdate,
    service: RecurringTaskService = Depends(get_task_service),
):
    """Update a daily task."""
    try:
        return await service.update_task(TaskKind.DAILY, task_id, task_update)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.post("/{task_id}/toggle", response_model=DailyTask)
async def toggle_daily_task(
    task_id: str,
    service: RecurringTaskService = Depends(get_task_service),
):
    """
    Toggle a daily task's completion.

    - Completing increments the streak, un-completing decrements it (min 0)
    - Returns 404 if task not found
    """
    try:
        return await service.toggle_task(TaskKind.DAILY, task_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.delete("/{task_id}")
async def delete_daily_task(
    task_id: str,
    service: RecurringTaskService = Depends(get_task_service),
):
    """Delete a daily task."""
    try:
        return await service.delete_task(TaskKind.DAILY, task_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)
