"""Weekly task router - API endpoints for weekly recurring tasks."""
from fastapi import APIRouter, Depends, status

from goal_tracker.errors import GoalTrackerError
from goal_tracker.models.recurring_task import (
    TaskKind,
    WeeklyTask,
    WeeklyTaskCreate,
    WeeklyTaskUpdate,
)
from goal_tracker.routers.common import get_task_service, to_http_exception
from goal_tracker.services.recurring_task_service import RecurringTaskService


router = APIRouter(prefix="/weekly-tasks", tags=["weekly-tasks"])


@router.get("", response_model=list[WeeklyTask])
async def list_weekly_tasks(service: RecurringTaskService = Depends(get_task_service)):
    """
    List weekly tasks.

    - Completion flags are cleared first when a new ISO week has begun
    """
    return await service.list_tasks(TaskKind.WEEKLY)


@router.get("/today", response_model=list[WeeklyTask])
async def list_today_weekly_tasks(
    service: RecurringTaskService = Depends(get_task_service),
):
    """List weekly tasks scheduled for today's weekday."""
    return await service.list_today_weekly()


@router.post("", response_model=WeeklyTask, status_code=status.HTTP_201_CREATED)
async def create_weekly_task(
    task: WeeklyTaskCreate,
    service: RecurringTaskService = Depends(get_task_service),
):
    """
    Create a new weekly task.

    Args:
        task: Weekly task creation data, including dayOfWeek
        service: Recurring task service

    Returns:
        Created task (streak 0, not completed)

    Raises:
        HTTPException: If title or scheduled time is invalid (400)
    """
    try:
        return await service.create_task(TaskKind.WEEKLY, task)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.get("/{task_id}", response_model=WeeklyTask)
async def get_weekly_task(
    task_id: str,
    service: RecurringTaskService = Depends(get_task_service),
):
    """Get a weekly task by ID."""
    try:
        return await service.get_task(TaskKind.WEEKLY, task_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.patch("/{task_id}", response_model=WeeklyTask)
async def update_weekly_task(
    task_id: str,
    task_update: WeeklyTaskUpdate,
    service: RecurringTaskService = Depends(get_task_service),
):
    """Update a weekly task, including moving it to another weekday."""
    try:
        return await service.update_task(TaskKind.WEEKLY, task_id, task_update)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.post("/{task_id}/toggle", response_model=WeeklyTask)
async def toggle_weekly_task(
    task_id: str,
    service: RecurringTaskService = Depends(get_task_service),
):
    """Toggle a weekly task's completion and adjust its streak."""
    try:
        return await service.toggle_task(TaskKind.WEEKLY, task_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.delete("/{task_id}")
async def delete_weekly_task(
    task_id: str,
    service: RecurringTaskService = Depends(get_task_service),
):
    """Delete a weekly task."""
    try:
        return await service.delete_task(TaskKind.WEEKLY, task_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)
