"""Goal progress engine - task block tree, progress and step-by-step unlocking.

Every function here is pure: it takes a Goal, returns an updated deep copy and
never touches storage. Derived fields (grouped block completion, progress,
goal completion) are recomputed in one place, ``_refresh``.

Locking policy in step-by-step mode:

- the item at order 0 is unlocked, every later item starts locked;
- completing item k-1 unlocks item k, and that unlock is permanent
  (un-completing k-1 does not lock k again);
- a grouped block follows the same rule through its subtasks, and when the
  last subtask completes the block itself counts as completed for the chain.
"""
import math
from typing import Optional

from bson import ObjectId

from goal_tracker.errors import NotFoundError, TaskLockedError, ValidationError
from goal_tracker.models.goal import (
    Goal,
    Subtask,
    SubtaskCreate,
    TaskBlock,
    TaskBlockCreate,
    TaskBlockType,
)
from goal_tracker.utils.validation import clean_title


def new_id() -> str:
    """Generate a new entity id."""
    return str(ObjectId())


def is_block_completed(block: TaskBlock) -> bool:
    """
    Completion of a single block as it counts toward the goal.

    A grouped block is completed when it has subtasks and all of them are
    completed; an empty grouped block is never completed.
    """
    if block.type == TaskBlockType.GROUPED:
        subtasks = block.subtasks or []
        return bool(subtasks) and all(subtask.completed for subtask in subtasks)
    return block.completed


def count_units(task_blocks: list[TaskBlock]) -> tuple[int, int]:
    """
    Count completed and total progress units.

    Single blocks are one unit each; grouped blocks contribute one unit per
    subtask (zero when they have none).

    Returns:
        (completed_units, total_units)
    """
    completed = 0
    total = 0
    for block in task_blocks:
        if block.type == TaskBlockType.GROUPED:
            subtasks = block.subtasks or []
            total += len(subtasks)
            completed += sum(1 for subtask in subtasks if subtask.completed)
        else:
            total += 1
            completed += 1 if block.completed else 0
    return completed, total


def compute_progress(task_blocks: list[TaskBlock]) -> int:
    """
    Completion percentage in [0, 100], rounded half up.

    Examples:
        Two single blocks with one completed -> 50.
        One grouped block with 1 of 3 subtasks completed -> 33.
    """
    completed, total = count_units(task_blocks)
    if total == 0:
        return 0
    return math.floor(100 * completed / total + 0.5)


def compute_completed(task_blocks: list[TaskBlock]) -> bool:
    """A goal is completed when it has blocks and every block is completed."""
    return bool(task_blocks) and all(is_block_completed(block) for block in task_blocks)


Siblings = list[TaskBlock] | list[Subtask]


def _next_sibling(items: Siblings, order: int) -> Optional[TaskBlock | Subtask]:
    for item in items:
        if item.order == order + 1:
            return item
    return None


def _unlock_next(goal: Goal, items: Siblings, order: int) -> None:
    if not goal.step_by_step:
        return
    sibling = _next_sibling(items, order)
    if sibling is not None and sibling.locked:
        sibling.locked = False


def _reindex(items: Siblings) -> None:
    for index, item in enumerate(sorted(items, key=lambda i: i.order)):
        item.order = index
    items.sort(key=lambda i: i.order)


def _unlock_head(goal: Goal, items: Siblings) -> None:
    if goal.step_by_step and items and items[0].locked:
        items[0].locked = False


def _refresh(goal: Goal) -> Goal:
    """Recompute grouped block completion, progress and goal completion.

    A grouped block that becomes completed here unlocks its next sibling,
    exactly as toggling a single block would.
    """
    for block in goal.task_blocks:
        if block.type != TaskBlockType.GROUPED:
            continue
        was_completed = block.completed
        block.completed = is_block_completed(block)
        if block.completed and not was_completed:
            _unlock_next(goal, goal.task_blocks, block.order)

    goal.progress = compute_progress(goal.task_blocks)
    goal.completed = compute_completed(goal.task_blocks)
    return goal


def _find_block(goal: Goal, block_id: str) -> TaskBlock:
    for block in goal.task_blocks:
        if block.id == block_id:
            return block
    raise NotFoundError("Task block not found")


def _find_subtask(block: TaskBlock, subtask_id: str) -> Subtask:
    if not block.subtasks:
        raise NotFoundError("Subtask not found")
    for subtask in block.subtasks:
        if subtask.id == subtask_id:
            return subtask
    raise NotFoundError("Subtask not found")


def _build_subtask(goal: Goal, subtask_create: SubtaskCreate, order: int) -> Subtask:
    return Subtask(
        id=new_id(),
        title=clean_title(subtask_create.title),
        is_reward_trigger=subtask_create.is_reward_trigger,
        reward_note=subtask_create.reward_note,
        locked=goal.step_by_step and order > 0,
        order=order,
    )


def add_task_block(goal: Goal, block_create: TaskBlockCreate) -> Goal:
    """
    Append a task block at the end of the goal.

    Args:
        goal: Goal to extend
        block_create: Title, type, reward flags and (grouped only) subtasks

    Returns:
        Updated copy of the goal

    Raises:
        ValidationError: If a title is empty or a single block carries subtasks
    """
    goal = goal.model_copy(deep=True)
    order = len(goal.task_blocks)
    title = clean_title(block_create.title)

    subtasks: Optional[list[Subtask]] = None
    if block_create.type == TaskBlockType.GROUPED:
        subtasks = [
            _build_subtask(goal, subtask_create, index)
            for index, subtask_create in enumerate(block_create.subtasks)
        ]
    elif block_create.subtasks:
        raise ValidationError("Only grouped task blocks can have subtasks")

    goal.task_blocks.append(
        TaskBlock(
            id=new_id(),
            title=title,
            type=block_create.type,
            locked=goal.step_by_step and order > 0,
            is_reward_trigger=block_create.is_reward_trigger,
            reward_note=block_create.reward_note,
            subtasks=subtasks,
            order=order,
        )
    )
    return _refresh(goal)


def add_subtask(goal: Goal, block_id: str, subtask_create: SubtaskCreate) -> Goal:
    """Append a subtask to a grouped task block."""
    goal = goal.model_copy(deep=True)
    block = _find_block(goal, block_id)
    if block.type != TaskBlockType.GROUPED:
        raise ValidationError("Only grouped task blocks can have subtasks")

    if block.subtasks is None:
        block.subtasks = []
    block.subtasks.append(_build_subtask(goal, subtask_create, len(block.subtasks)))
    return _refresh(goal)


def toggle_task_block(goal: Goal, block_id: str) -> Goal:
    """
    Flip a single task block's completion.

    Completing a block in step-by-step mode unlocks the next block.

    Raises:
        NotFoundError: If the block does not exist
        TaskLockedError: If the block is locked
        ValidationError: If the block is grouped (it completes through subtasks)
    """
    goal = goal.model_copy(deep=True)
    block = _find_block(goal, block_id)
    if block.locked:
        raise TaskLockedError("Task block is locked")
    if block.type == TaskBlockType.GROUPED:
        raise ValidationError("Grouped task blocks are completed through their subtasks")

    block.completed = not block.completed
    if block.completed:
        _unlock_next(goal, goal.task_blocks, block.order)
    return _refresh(goal)


def toggle_subtask(goal: Goal, block_id: str, subtask_id: str) -> Goal:
    """
    Flip a subtask's completion.

    Completing a subtask in step-by-step mode unlocks the next subtask; when it
    completes the parent block, the next block is unlocked as well.

    Raises:
        NotFoundError: If the block or subtask does not exist
        TaskLockedError: If the subtask or its parent block is locked
    """
    goal = goal.model_copy(deep=True)
    block = _find_block(goal, block_id)
    subtask = _find_subtask(block, subtask_id)
    if block.locked or subtask.locked:
        raise TaskLockedError("Subtask is locked")

    subtask.completed = not subtask.completed
    if subtask.completed:
        _unlock_next(goal, block.subtasks, subtask.order)
    return _refresh(goal)


def delete_task_block(goal: Goal, block_id: str) -> Goal:
    """
    Remove a task block and reindex the remaining blocks from 0.

    Unlocked blocks stay unlocked; in step-by-step mode the new first block is
    unlocked.
    """
    goal = goal.model_copy(deep=True)
    block = _find_block(goal, block_id)
    goal.task_blocks = [b for b in goal.task_blocks if b.id != block.id]
    _reindex(goal.task_blocks)
    _unlock_head(goal, goal.task_blocks)
    return _refresh(goal)


def delete_subtask(goal: Goal, block_id: str, subtask_id: str) -> Goal:
    """Remove a subtask and reindex its siblings from 0."""
    goal = goal.model_copy(deep=True)
    block = _find_block(goal, block_id)
    subtask = _find_subtask(block, subtask_id)
    block.subtasks = [s for s in block.subtasks if s.id != subtask.id]
    _reindex(block.subtasks)
    _unlock_head(goal, block.subtasks)
    return _refresh(goal)


def edit_task_block(goal: Goal, block_id: str, title: str) -> Goal:
    """Rename a task block."""
    goal = goal.model_copy(deep=True)
    block = _find_block(goal, block_id)
    block.title = clean_title(title)
    return goal


def edit_subtask(goal: Goal, block_id: str, subtask_id: str, title: str) -> Goal:
    """Rename a subtask."""
    goal = goal.model_copy(deep=True)
    subtask = _find_subtask(_find_block(goal, block_id), subtask_id)
    subtask.title = clean_title(title)
    return goal


def apply_step_locks(goal: Goal) -> Goal:
    """
    Re-derive every lock after step-by-step mode is switched.

    With step-by-step on, an item is locked when it is not first and its
    predecessor is not completed. With it off, nothing is locked.
    """
    goal = goal.model_copy(deep=True)

    def relock(items, completed_of) -> None:
        previous = None
        for item in sorted(items, key=lambda i: i.order):
            item.locked = (
                goal.step_by_step
                and previous is not None
                and not completed_of(previous)
            )
            previous = item

    relock(goal.task_blocks, is_block_completed)
    for block in goal.task_blocks:
        if block.subtasks:
            relock(block.subtasks, lambda subtask: subtask.completed)
    return _refresh(goal)
