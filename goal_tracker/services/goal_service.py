"""Goal service - goal CRUD and task block operations over the goals collection."""
import logging
from typing import Callable

from goal_tracker.errors import NotFoundError
from goal_tracker.models.goal import (
    Goal,
    GoalCreate,
    GoalUpdate,
    SubtaskCreate,
    TaskBlockCreate,
)
from goal_tracker.services import progress
from goal_tracker.storage import GOALS_KEY, StorageAdapter
from goal_tracker.utils.clock import Clock, now
from goal_tracker.utils.validation import check_deadline, clean_description, clean_title

logger = logging.getLogger(__name__)


class GoalService:
    """Service for handling goal operations."""

    def __init__(self, storage: StorageAdapter, clock: Clock = now):
        """Initialize service with a storage adapter and clock."""
        self.storage = storage
        self.clock = clock

    async def _load(self) -> list[Goal]:
        docs = await self.storage.get(GOALS_KEY)
        return [Goal.model_validate(doc) for doc in docs]

    async def _save(self, goals: list[Goal]) -> None:
        await self.storage.set(
            GOALS_KEY,
            [goal.model_dump(mode="json", by_alias=True) for goal in goals],
        )

    @staticmethod
    def _index_of(goals: list[Goal], goal_id: str) -> int:
        for index, goal in enumerate(goals):
            if goal.id == goal_id:
                return index
        raise NotFoundError("Goal not found")

    async def _mutate(self, goal_id: str, change: Callable[[Goal], Goal]) -> Goal:
        """
        Apply a change to one goal inside a locked read-modify-write cycle.

        Args:
            goal_id: Goal ID
            change: Function returning the updated goal

        Returns:
            Updated goal as persisted

        Raises:
            NotFoundError: If goal not found
        """
        async with self.storage.lock(GOALS_KEY):
            goals = await self._load()
            index = self._index_of(goals, goal_id)

            updated = change(goals[index])
            updated.updated_at = self.clock()
            goals[index] = updated

            await self._save(goals)
            return updated

    async def create_goal(self, goal_create: GoalCreate) -> Goal:
        """
        Create a new goal.

        Args:
            goal_create: Goal creation data

        Returns:
            Created goal object

        Raises:
            ValidationError: If title, description or deadline is invalid
        """
        current = self.clock()
        check_deadline(goal_create.deadline, current)

        goal = Goal(
            id=progress.new_id(),
            title=clean_title(goal_create.title),
            description=clean_description(goal_create.description),
            deadline=goal_create.deadline,
            priority=goal_create.priority,
            reward=goal_create.reward or None,
            step_by_step=goal_create.step_by_step,
            created_at=current,
            updated_at=current,
        )

        async with self.storage.lock(GOALS_KEY):
            goals = await self._load()
            goals.append(goal)
            await self._save(goals)

        logger.debug("Created goal %s", goal.id)
        return goal

    async def list_goals(self) -> list[Goal]:
        """List all goals."""
        return await self._load()

    async def get_goal(self, goal_id: str) -> Goal:
        """
        Get a single goal by ID.

        Raises:
            NotFoundError: If goal not found
        """
        goals = await self._load()
        return goals[self._index_of(goals, goal_id)]

    async def update_goal(self, goal_id: str, goal_update: GoalUpdate) -> Goal:
        """
        Update goal fields.

        Switching step-by-step mode re-derives every lock.

        Raises:
            NotFoundError: If goal not found
            ValidationError: If an updated field is invalid
        """
        fields = goal_update.model_dump(exclude_unset=True)
        if "title" in fields:
            fields["title"] = clean_title(fields["title"])
        if "description" in fields:
            fields["description"] = clean_description(fields["description"])
        if "reward" in fields:
            fields["reward"] = fields["reward"] or None
        if fields.get("deadline") is not None:
            check_deadline(fields["deadline"], self.clock())

        # Non-nullable fields ignore explicit nulls
        for key in ("step_by_step", "priority"):
            if key in fields and fields[key] is None:
                del fields[key]

        def change(goal: Goal) -> Goal:
            step_changed = fields.get("step_by_step", goal.step_by_step) != goal.step_by_step
            goal = goal.model_copy(update=fields, deep=True)
            if step_changed:
                goal = progress.apply_step_locks(goal)
            return goal

        return await self._mutate(goal_id, change)

    async def delete_goal(self, goal_id: str) -> dict:
        """
        Delete a goal and all of its task blocks.

        Returns:
            Dictionary with deleted_count

        Raises:
            NotFoundError: If goal not found
        """
        async with self.storage.lock(GOALS_KEY):
            goals = await self._load()
            index = self._index_of(goals, goal_id)
            del goals[index]
            await self._save(goals)

        logger.debug("Deleted goal %s", goal_id)
        return {"deleted_count": 1}

    async def add_task_block(self, goal_id: str, block_create: TaskBlockCreate) -> Goal:
        """Append a task block to a goal."""
        return await self._mutate(
            goal_id, lambda goal: progress.add_task_block(goal, block_create)
        )

    async def edit_task_block(self, goal_id: str, block_id: str, title: str) -> Goal:
        """Rename a task block."""
        return await self._mutate(
            goal_id, lambda goal: progress.edit_task_block(goal, block_id, title)
        )

    async def toggle_task_block(self, goal_id: str, block_id: str) -> Goal:
        """Toggle a task block's completion."""
        return await self._mutate(
            goal_id, lambda goal: progress.toggle_task_block(goal, block_id)
        )

    async def delete_task_block(self, goal_id: str, block_id: str) -> Goal:
        """Delete a task block."""
        return await self._mutate(
            goal_id, lambda goal: progress.delete_task_block(goal, block_id)
        )

    async def add_subtask(
        self,
        goal_id: str,
        block_id: str,
        subtask_create: SubtaskCreate,
    ) -> Goal:
        """Append a subtask to a grouped task block."""
        return await self._mutate(
            goal_id, lambda goal: progress.add_subtask(goal, block_id, subtask_create)
        )

    async def edit_subtask(
        self,
        goal_id: str,
        block_id: str,
        subtask_id: str,
        title: str,
    ) -> Goal:
        """Rename a subtask."""
        return await self._mutate(
            goal_id,
            lambda goal: progress.edit_subtask(goal, block_id, subtask_id, title),
        )

    async def toggle_subtask(
        self,
        goal_id: str,
        block_id: str,
        subtask_id: str,
    ) -> Goal:
        """Toggle a subtask's completion."""
        return await self._mutate(
            goal_id,
            lambda goal: progress.toggle_subtask(goal, block_id, subtask_id),
        )

    async def delete_subtask(self, goal_id: str, block_id: str, subtask_id: str) -> Goal:
        """Delete a subtask."""
        return await self._mutate(
            goal_id,
            lambda goal: progress.delete_subtask(goal, block_id, subtask_id),
        )
