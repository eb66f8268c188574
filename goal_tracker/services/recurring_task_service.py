"""Recurring task service - daily/weekly habits with streaks and periodic resets."""
import logging
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from goal_tracker.errors import NotFoundError, ValidationError
from goal_tracker.models.recurring_task import (
    DailyTask,
    DailyTaskCreate,
    DailyTaskUpdate,
    DayOfWeek,
    TaskConfiguration,
    TaskKind,
    WeeklyTask,
    WeeklyTaskCreate,
    WeeklyTaskUpdate,
)
from goal_tracker.services.progress import new_id
from goal_tracker.services.recurrence import is_stale
from goal_tracker.storage import (
    DAILY_TASKS_KEY,
    TASK_CONFIGURATIONS_KEY,
    WEEKLY_TASKS_KEY,
    StorageAdapter,
)
from goal_tracker.utils.clock import Clock, now
from goal_tracker.utils.validation import check_scheduled_time, clean_description, clean_title

logger = logging.getLogger(__name__)

RecurringTask = Union[DailyTask, WeeklyTask]

_COLLECTIONS = {
    TaskKind.DAILY: (DAILY_TASKS_KEY, DailyTask),
    TaskKind.WEEKLY: (WEEKLY_TASKS_KEY, WeeklyTask),
}


class RecurringTaskService:
    """Service for handling daily and weekly task operations."""

    def __init__(self, storage: StorageAdapter, clock: Clock = now):
        """Initialize service with a storage adapter and clock."""
        self.storage = storage
        self.clock = clock

    async def get_configuration(self, kind: TaskKind) -> Optional[TaskConfiguration]:
        """Get the stored reset configuration for a kind, if any."""
        docs = await self.storage.get(TASK_CONFIGURATIONS_KEY)
        for doc in docs:
            config = TaskConfiguration.model_validate(doc)
            if config.type == kind:
                return config
        return None

    async def _save_configuration(self, config: TaskConfiguration) -> None:
        async with self.storage.lock(TASK_CONFIGURATIONS_KEY):
            docs = await self.storage.get(TASK_CONFIGURATIONS_KEY)
            configs = [
                doc for doc in docs
                if TaskConfiguration.model_validate(doc).type != config.type
            ]
            configs.append(config.model_dump(mode="json", by_alias=True))
            await self.storage.set(TASK_CONFIGURATIONS_KEY, configs)

    async def _save(self, kind: TaskKind, tasks: list[RecurringTask]) -> None:
        key, _ = _COLLECTIONS[kind]
        await self.storage.set(
            key,
            [task.model_dump(mode="json", by_alias=True) for task in tasks],
        )

    async def _load(self, kind: TaskKind) -> list[RecurringTask]:
        """
        Load a collection, resetting completion if its window has elapsed.

        Callers must hold the collection lock.

        Without a configuration record the newest task ``updated_at`` is the
        last reset, so a lost or unreadable record still resets tasks left
        over from an earlier window. The record is (re)stamped afterwards.
        """
        key, model = _COLLECTIONS[kind]
        tasks = [model.model_validate(doc) for doc in await self.storage.get(key)]

        current = self.clock()
        config = await self.get_configuration(kind)

        if config is not None:
            last_reset = config.updated_at
        elif tasks:
            last_reset = max(task.updated_at for task in tasks)
        else:
            last_reset = current

        stale = is_stale(last_reset, current, kind)
        if stale:
            for task in tasks:
                task.completed = False
                task.updated_at = current
            await self._save(kind, tasks)
            logger.info("Reset %d %s tasks for a new window", len(tasks), kind.value)

        if stale or config is None:
            await self._save_configuration(TaskConfiguration(type=kind, updated_at=current))
        return tasks

    @staticmethod
    def _index_of(tasks: list[RecurringTask], task_id: str, kind: TaskKind) -> int:
        for index, task in enumerate(tasks):
            if task.id == task_id:
                return index
        raise NotFoundError(f"{kind.value.capitalize()} task not found")

    async def list_tasks(self, kind: TaskKind) -> list[RecurringTask]:
        """
        List tasks of a kind, applying the reset policy first.

        Args:
            kind: daily or weekly

        Returns:
            List of tasks
        """
        key, _ = _COLLECTIONS[kind]
        async with self.storage.lock(key):
            return await self._load(kind)

    async def get_task(self, kind: TaskKind, task_id: str) -> RecurringTask:
        """
        Get a task by ID.

        Raises:
            NotFoundError: If task not found
        """
        tasks = await self.list_tasks(kind)
        return tasks[self._index_of(tasks, task_id, kind)]

    async def create_task(
        self,
        kind: TaskKind,
        task_create: Union[DailyTaskCreate, WeeklyTaskCreate],
    ) -> RecurringTask:
        """
        Create a new recurring task at the end of its collection.

        Args:
            kind: daily or weekly
            task_create: Task creation data (weekly tasks need a day of week)

        Returns:
            Created task with streak 0, not completed

        Raises:
            ValidationError: If title, scheduled time or day of week is invalid
        """
        key, model = _COLLECTIONS[kind]
        check_scheduled_time(task_create.scheduled_time)
        fields = task_create.model_dump()
        fields["title"] = clean_title(task_create.title)
        fields["description"] = clean_description(task_create.description)
        fields["reward_note"] = task_create.reward_note or None

        async with self.storage.lock(key):
            tasks = await self._load(kind)
            current = self.clock()

            try:
                task = model(
                    **fields,
                    id=new_id(),
                    completed=False,
                    streak=0,
                    order=len(tasks),
                    created_at=current,
                    updated_at=current,
                )
            except PydanticValidationError as e:
                raise ValidationError(str(e)) from e

            tasks.append(task)
            await self._save(kind, tasks)

        logger.debug("Created %s task %s", kind.value, task.id)
        return task

    async def update_task(
        self,
        kind: TaskKind,
        task_id: str,
        task_update: Union[DailyTaskUpdate, WeeklyTaskUpdate],
    ) -> RecurringTask:
        """
        Merge updates into a task and refresh its updated_at.

        Raises:
            NotFoundError: If task not found
            ValidationError: If an updated field is invalid
        """
        key, model = _COLLECTIONS[kind]
        nullable = ("title", "description", "reward_note", "scheduled_time")
        fields = {
            name: value
            for name, value in task_update.model_dump(exclude_unset=True).items()
            if name in model.model_fields and (value is not None or name in nullable)
        }
        if "title" in fields:
            fields["title"] = clean_title(fields["title"])
        if "reward_note" in fields:
            fields["reward_note"] = fields["reward_note"] or None
        if "description" in fields:
            fields["description"] = clean_description(fields["description"])
        check_scheduled_time(fields.get("scheduled_time"))

        async with self.storage.lock(key):
            tasks = await self._load(kind)
            index = self._index_of(tasks, task_id, kind)

            updated = tasks[index].model_copy(update=fields)
            updated.updated_at = self.clock()
            tasks[index] = updated
            await self._save(kind, tasks)

        return updated

    async def toggle_task(self, kind: TaskKind, task_id: str) -> RecurringTask:
        """
        Flip completion and adjust the streak.

        Completing increments the streak; un-completing decrements it, never
        below zero.

        Raises:
            NotFoundError: If task not found
        """
        key, _ = _COLLECTIONS[kind]
        async with self.storage.lock(key):
            tasks = await self._load(kind)
            index = self._index_of(tasks, task_id, kind)
            task = tasks[index]

            completed = not task.completed
            streak = task.streak + 1 if completed else max(0, task.streak - 1)
            updated = task.model_copy(
                update={
                    "completed": completed,
                    "streak": streak,
                    "updated_at": self.clock(),
                }
            )
            tasks[index] = updated
            await self._save(kind, tasks)

        return updated

    async def delete_task(self, kind: TaskKind, task_id: str) -> dict:
        """
        Delete a task. Remaining tasks keep their order values.

        Returns:
            Dictionary with deleted_count

        Raises:
            NotFoundError: If task not found
        """
        key, _ = _COLLECTIONS[kind]
        async with self.storage.lock(key):
            tasks = await self._load(kind)
            index = self._index_of(tasks, task_id, kind)
            del tasks[index]
            await self._save(kind, tasks)

        logger.debug("Deleted %s task %s", kind.value, task_id)
        return {"deleted_count": 1}

    async def list_today_weekly(self) -> list[WeeklyTask]:
        """Weekly tasks scheduled for the current weekday."""
        today = DayOfWeek.of(self.clock())
        tasks = await self.list_tasks(TaskKind.WEEKLY)
        return [task for task in tasks if task.day_of_week == today]
