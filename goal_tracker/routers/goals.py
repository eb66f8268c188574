"""Goal router - API endpoints for goals, task blocks and subtasks."""
from fastapi import APIRouter, Depends, status

from goal_tracker.errors import GoalTrackerError
from goal_tracker.models.goal import (
    Goal,
    GoalCreate,
    GoalUpdate,
    SubtaskCreate,
    TaskBlockCreate,
    TitleUpdate,
)
from goal_tracker.routers.common import get_goal_service, to_http_exception
from goal_tracker.services.goal_service import GoalService


router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal: GoalCreate,
    service: GoalService = Depends(get_goal_service),
):
    """
    Create a new goal.

    - Title is required (max 100 characters)
    - Deadline cannot be in the past
    - Starts with no task blocks and 0% progress
    """
    try:
        return await service.create_goal(goal)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[Goal])
async def list_goals(service: GoalService = Depends(get_goal_service)):
    """List all goals."""
    return await service.list_goals()


@router.get("/{goal_id}", response_model=Goal)
async def get_goal(
    goal_id: str,
    service: GoalService = Depends(get_goal_service),
):
    """
    Get a single goal by ID.

    - Returns 404 if goal not found
    """
    try:
        return await service.get_goal(goal_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.patch("/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: str,
    goal_update: GoalUpdate,
    service: GoalService = Depends(get_goal_service),
):
    """
    Update a goal.

    - Switching stepByStep re-derives task block locks
    - Returns 404 if goal not found
    """
    try:
        return await service.update_goal(goal_id, goal_update)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: str,
    service: GoalService = Depends(get_goal_service),
):
    """
    Delete a goal with all its task blocks.

    - Returns 404 if goal not found
    """
    try:
        return await service.delete_goal(goal_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.post(
    "/{goal_id}/task-blocks",
    response_model=Goal,
    status_code=status.HTTP_201_CREATED,
)
async def add_task_block(
    goal_id: str,
    block: TaskBlockCreate,
    service: GoalService = Depends(get_goal_service),
):
    """
    Append a task block to a goal.

    Args:
        goal_id: Goal ID
        block: Task block creation data (subtasks for grouped blocks)
        service: Goal service

    Returns:
        Updated goal

    Raises:
        HTTPException: If goal not found (404) or title invalid (400)
    """
    try:
        return await service.add_task_block(goal_id, block)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.patch("/{goal_id}/task-blocks/{block_id}", response_model=Goal)
async def edit_task_block(
    goal_id: str,
    block_id: str,
    update: TitleUpdate,
    service: GoalService = Depends(get_goal_service),
):
    """Rename a task block."""
    try:
        return await service.edit_task_block(goal_id, block_id, update.title)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.post("/{goal_id}/task-blocks/{block_id}/toggle", response_model=Goal)
async def toggle_task_block(
    goal_id: str,
    block_id: str,
    service: GoalService = Depends(get_goal_service),
):
    """
    Toggle a task block's completion.

    Args:
        goal_id: Goal ID
        block_id: Task block ID
        service: Goal service

    Returns:
        Updated goal with recomputed progress

    Raises:
        HTTPException: If not found (404), locked (409) or grouped (400)
    """
    try:
        return await service.toggle_task_block(goal_id, block_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.delete("/{goal_id}/task-blocks/{block_id}", response_model=Goal)
async def delete_task_block(
    goal_id: str,
    block_id: str,
    service: GoalService = Depends(get_goal_service),
):
    """Delete a task block; remaining blocks are renumbered from 0."""
    try:
        return await service.delete_task_block(goal_id, block_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.post(
    "/{goal_id}/task-blocks/{block_id}/subtasks",
    response_model=Goal,
    status_code=status.HTTP_201_CREATED,
)
async def add_subtask(
    goal_id: str,
    block_id: str,
    subtask: SubtaskCreate,
    service: GoalService = Depends(get_goal_service),
):
    """Append a subtask to a grouped task block."""
    try:
        return await service.add_subtask(goal_id, block_id, subtask)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.patch(
    "/{goal_id}/task-blocks/{block_id}/subtasks/{subtask_id}",
    response_model=Goal,
)
async def edit_subtask(
    goal_id: str,
    block_id: str,
    subtask_id: str,
    update: TitleUpdate,
    service: GoalService = Depends(get_goal_service),
):
    """Rename a subtask."""
    try:
        return await service.edit_subtask(goal_id, block_id, subtask_id, update.title)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.post(
    "/{goal_id}/task-blocks/{block_id}/subtasks/{subtask_id}/toggle",
    response_model=Goal,
)
async def toggle_subtask(
    goal_id: str,
    block_id: str,
    subtask_id: str,
    service: GoalService = Depends(get_goal_service),
):
    """
    Toggle a subtask's completion.

    - Parent block completes when all its subtasks are completed
    - Returns 409 if the subtask or its block is locked
    """
    try:
        return await service.toggle_subtask(goal_id, block_id, subtask_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)


@router.delete(
    "/{goal_id}/task-blocks/{block_id}/subtasks/{subtask_id}",
    response_model=Goal,
)
async def delete_subtask(
    goal_id: str,
    block_id: str,
    subtask_id: str,
    service: GoalService = Depends(get_goal_service),
):
    """Delete a subtask; remaining subtasks are renumbered from 0."""
    try:
        return await service.delete_subtask(goal_id, block_id, subtask_id)
    except GoalTrackerError as e:
        raise to_http_exception(e)
