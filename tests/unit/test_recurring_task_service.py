"""Tests for RecurringTaskService."""
from datetime import datetime

import pytest

from goal_tracker.errors import NotFoundError, ValidationError
from goal_tracker.models.recurring_task import (
    DailyTaskCreate,
    DailyTaskUpdate,
    DayOfWeek,
    TaskKind,
    WeeklyTaskCreate,
    WeeklyTaskUpdate,
)
from goal_tracker.services.recurring_task_service import RecurringTaskService
from goal_tracker.storage import DAILY_TASKS_KEY, TASK_CONFIGURATIONS_KEY, InMemoryStorage


class FlakyConfigStorage(InMemoryStorage):
    """In-memory storage whose next configuration reads come back empty."""

    def __init__(self):
        super().__init__()
        self.config_outages = 0

    async def get(self, key: str) -> list[dict]:
        if key == TASK_CONFIGURATIONS_KEY and self.config_outages:
            self.config_outages -= 1
            return []
        return await super().get(key)


@pytest.mark.asyncio
class TestRecurringTaskCreate:
    """Tests for creating recurring tasks."""

    async def test_create_daily_task(self, storage, clock):
        """Test a new daily task starts incomplete with streak 0."""
        service = RecurringTaskService(storage, clock)

        task = await service.create_task(
            TaskKind.DAILY,
            DailyTaskCreate(title="Drink water", scheduled_time="09:00"),
        )

        assert task.title == "Drink water"
        assert task.completed is False
        assert task.streak == 0
        assert task.order == 0
        assert task.scheduled_time == "09:00"
        assert task.created_at == clock()

    async def test_create_assigns_order(self, storage, clock):
        """Test order is the current collection length."""
        service = RecurringTaskService(storage, clock)

        await service.create_task(TaskKind.DAILY, DailyTaskCreate(title="One"))
        second = await service.create_task(TaskKind.DAILY, DailyTaskCreate(title="Two"))

        assert second.order == 1

    async def test_create_weekly_task(self, storage, clock):
        """Test weekly tasks keep their day of week."""
        service = RecurringTaskService(storage, clock)

        task = await service.create_task(
            TaskKind.WEEKLY,
            WeeklyTaskCreate(title="Long run", day_of_week=DayOfWeek.SATURDAY),
        )

        assert task.day_of_week == DayOfWeek.SATURDAY

    async def test_create_weekly_without_day(self, storage, clock):
        """Test weekly tasks require a day of week."""
        service = RecurringTaskService(storage, clock)

        with pytest.raises(ValidationError):
            await service.create_task(TaskKind.WEEKLY, DailyTaskCreate(title="Long run"))

    async def test_create_empty_title(self, storage, clock):
        """Test empty titles are rejected."""
        service = RecurringTaskService(storage, clock)

        with pytest.raises(ValidationError, match="Title is required"):
            await service.create_task(TaskKind.DAILY, DailyTaskCreate(title=""))

    async def test_create_bad_scheduled_time(self, storage, clock):
        """Test scheduled times must be HH:MM."""
        service = RecurringTaskService(storage, clock)

        with pytest.raises(ValidationError):
            await service.create_task(
                TaskKind.DAILY, DailyTaskCreate(title="Walk", scheduled_time="25:00")
            )


@pytest.mark.asyncio
class TestRecurringTaskToggle:
    """Tests for toggling and streaks."""

    async def test_streak_scenario(self, storage, clock):
        """Test streak goes 0 -> 1 -> 0 -> 1 across toggles."""
        service = RecurringTaskService(storage, clock)
        task = await service.create_task(TaskKind.DAILY, DailyTaskCreate(title="Stretch"))

        task = await service.toggle_task(TaskKind.DAILY, task.id)
        assert (task.completed, task.streak) == (True, 1)

        task = await service.toggle_task(TaskKind.DAILY, task.id)
        assert (task.completed, task.streak) == (False, 0)

        task = await service.toggle_task(TaskKind.DAILY, task.id)
        assert (task.completed, task.streak) == (True, 1)

    async def test_streak_never_negative(self, storage, clock):
        """Test un-completing with streak 0 keeps it at 0."""
        storage_items = [{
            "id": "t1",
            "title": "Stretch",
            "completed": True,
            "streak": 0,
            "order": 0,
            "createdAt": "2026-10-19T08:00:00",
            "updatedAt": "2026-10-19T08:00:00",
        }]
        await storage.set(DAILY_TASKS_KEY, storage_items)
        service = RecurringTaskService(storage, clock)

        task = await service.toggle_task(TaskKind.DAILY, "t1")

        assert task.completed is False
        assert task.streak == 0

    async def test_toggle_missing(self, storage, clock):
        """Test toggling a missing task raises NotFoundError."""
        service = RecurringTaskService(storage, clock)

        with pytest.raises(NotFoundError, match="Daily task not found"):
            await service.toggle_task(TaskKind.DAILY, "missing")


@pytest.mark.asyncio
class TestRecurringTaskUpdateDelete:
    """Tests for updating and deleting recurring tasks."""

    async def test_update_merges_fields(self, storage, clock):
        """Test partial updates keep other fields and refresh updated_at."""
        service = RecurringTaskService(storage, clock)
        task = await service.create_task(
            TaskKind.WEEKLY,
            WeeklyTaskCreate(title="Swim", day_of_week=DayOfWeek.MONDAY, description="Pool"),
        )

        clock.set(datetime(2026, 10, 19, 10, 0))
        updated = await service.update_task(
            TaskKind.WEEKLY,
            task.id,
            WeeklyTaskUpdate(day_of_week=DayOfWeek.FRIDAY),
        )

        assert updated.day_of_week == DayOfWeek.FRIDAY
        assert updated.description == "Pool"
        assert updated.updated_at == datetime(2026, 10, 19, 10, 0)

    async def test_update_null_title_rejected(self, storage, clock):
        """Test an explicit null title is rejected like an empty one."""
        service = RecurringTaskService(storage, clock)
        task = await service.create_task(TaskKind.DAILY, DailyTaskCreate(title="Walk"))

        with pytest.raises(ValidationError, match="Title is required"):
            await service.update_task(TaskKind.DAILY, task.id, DailyTaskUpdate(title=None))

        assert (await service.get_task(TaskKind.DAILY, task.id)).title == "Walk"

    async def test_empty_reward_note_stored_as_none(self, storage, clock):
        """Test create and update both store an empty reward note as None."""
        service = RecurringTaskService(storage, clock)
        task = await service.create_task(
            TaskKind.DAILY, DailyTaskCreate(title="Walk", reward_note="")
        )
        assert task.reward_note is None

        task = await service.update_task(
            TaskKind.DAILY, task.id, DailyTaskUpdate(reward_note="Coffee")
        )
        assert task.reward_note == "Coffee"

        task = await service.update_task(
            TaskKind.DAILY, task.id, DailyTaskUpdate(reward_note="")
        )
        assert task.reward_note is None

    async def test_update_missing(self, storage, clock):
        """Test updating a missing task raises NotFoundError."""
        service = RecurringTaskService(storage, clock)

        with pytest.raises(NotFoundError):
            await service.update_task(TaskKind.DAILY, "missing", DailyTaskUpdate(title="x"))

    async def test_delete_keeps_order(self, storage, clock):
        """Test deleting does not renumber remaining tasks."""
        service = RecurringTaskService(storage, clock)
        first = await service.create_task(TaskKind.DAILY, DailyTaskCreate(title="One"))
        await service.create_task(TaskKind.DAILY, DailyTaskCreate(title="Two"))

        await service.delete_task(TaskKind.DAILY, first.id)

        tasks = await service.list_tasks(TaskKind.DAILY)
        assert [(t.title, t.order) for t in tasks] == [("Two", 1)]

    async def test_delete_missing(self, storage, clock):
        """Test deleting a missing task raises NotFoundError."""
        service = RecurringTaskService(storage, clock)

        with pytest.raises(NotFoundError):
            await service.delete_task(TaskKind.WEEKLY, "missing")


@pytest.mark.asyncio
class TestRecurringTaskReset:
    """Tests for the reset policy applied on list."""

    async def test_first_list_creates_configuration(self, storage, clock):
        """Test a configuration is stamped on first check without resetting."""
        service = RecurringTaskService(storage, clock)

        assert await service.get_configuration(TaskKind.DAILY) is None
        await service.list_tasks(TaskKind.DAILY)

        config = await service.get_configuration(TaskKind.DAILY)
        assert config.updated_at == clock()

    async def test_daily_reset_on_new_day(self, storage, clock):
        """Test completion clears after midnight and the config timestamp moves."""
        service = RecurringTaskService(storage, clock)
        task = await service.create_task(TaskKind.DAILY, DailyTaskCreate(title="Read"))
        await service.toggle_task(TaskKind.DAILY, task.id)

        clock.set(datetime(2026, 10, 19, 23, 0))
        tasks = await service.list_tasks(TaskKind.DAILY)
        assert tasks[0].completed is True

        clock.set(datetime(2026, 10, 20, 7, 0))
        tasks = await service.list_tasks(TaskKind.DAILY)

        assert tasks[0].completed is False
        assert tasks[0].streak == 1
        config = await service.get_configuration(TaskKind.DAILY)
        assert config.updated_at == datetime(2026, 10, 20, 7, 0)

        stored = await storage.get(DAILY_TASKS_KEY)
        assert stored[0]["completed"] is False

    async def test_weekly_reset_only_on_new_week(self, storage, clock):
        """Test weekly tasks survive day changes but reset on a new ISO week."""
        service = RecurringTaskService(storage, clock)
        task = await service.create_task(
            TaskKind.WEEKLY,
            WeeklyTaskCreate(title="Meal prep", day_of_week=DayOfWeek.MONDAY),
        )
        await service.toggle_task(TaskKind.WEEKLY, task.id)

        clock.set(datetime(2026, 10, 25, 20, 0))
        assert (await service.list_tasks(TaskKind.WEEKLY))[0].completed is True

        clock.set(datetime(2026, 10, 26, 8, 0))
        assert (await service.list_tasks(TaskKind.WEEKLY))[0].completed is False

    async def test_configurations_are_per_kind(self, storage, clock):
        """Test one configuration record per recurrence kind."""
        service = RecurringTaskService(storage, clock)

        await service.list_tasks(TaskKind.DAILY)
        await service.list_tasks(TaskKind.WEEKLY)
        clock.set(datetime(2026, 10, 20, 8, 0))
        await service.list_tasks(TaskKind.DAILY)

        configs = await storage.get(TASK_CONFIGURATIONS_KEY)
        assert sorted(c["type"] for c in configs) == ["daily", "weekly"]

    async def test_unreadable_configuration_still_resets(self, clock):
        """Test a failed configuration read falls back to task timestamps."""
        storage = FlakyConfigStorage()
        service = RecurringTaskService(storage, clock)
        task = await service.create_task(TaskKind.DAILY, DailyTaskCreate(title="Read"))
        await service.toggle_task(TaskKind.DAILY, task.id)

        clock.set(datetime(2026, 10, 20, 7, 0))
        storage.config_outages = 1
        tasks = await service.list_tasks(TaskKind.DAILY)

        assert tasks[0].completed is False
        assert (await service.list_tasks(TaskKind.DAILY))[0].completed is False
        config = await service.get_configuration(TaskKind.DAILY)
        assert config.updated_at == datetime(2026, 10, 20, 7, 0)

    async def test_unreadable_configuration_keeps_fresh_tasks(self, clock):
        """Test the fallback does not reset tasks completed in the current window."""
        storage = FlakyConfigStorage()
        service = RecurringTaskService(storage, clock)
        task = await service.create_task(TaskKind.DAILY, DailyTaskCreate(title="Read"))
        await service.toggle_task(TaskKind.DAILY, task.id)

        clock.set(datetime(2026, 10, 19, 21, 0))
        storage.config_outages = 1

        assert (await service.list_tasks(TaskKind.DAILY))[0].completed is True

    async def test_lost_configuration_of_other_kind_recovers(self, clock):
        """Test a weekly record dropped by a degraded write still resets next week."""
        storage = FlakyConfigStorage()
        service = RecurringTaskService(storage, clock)
        task = await service.create_task(
            TaskKind.WEEKLY,
            WeeklyTaskCreate(title="Meal prep", day_of_week=DayOfWeek.MONDAY),
        )
        await service.toggle_task(TaskKind.WEEKLY, task.id)
        await service.list_tasks(TaskKind.DAILY)

        clock.set(datetime(2026, 10, 20, 8, 0))
        storage.config_outages = 2
        await service.list_tasks(TaskKind.DAILY)
        assert await service.get_configuration(TaskKind.WEEKLY) is None

        clock.set(datetime(2026, 10, 21, 8, 0))
        assert (await service.list_tasks(TaskKind.WEEKLY))[0].completed is True

        clock.set(datetime(2026, 10, 26, 8, 0))
        assert (await service.list_tasks(TaskKind.WEEKLY))[0].completed is False


@pytest.mark.asyncio
class TestTodayWeekly:
    """Tests for today's weekly tasks."""

    async def test_monday_task_only_on_monday(self, storage, clock):
        """Test a Monday task is listed on Monday and not on Tuesday."""
        service = RecurringTaskService(storage, clock)
        await service.create_task(
            TaskKind.WEEKLY,
            WeeklyTaskCreate(title="Plan week", day_of_week=DayOfWeek.MONDAY),
        )
        await service.create_task(
            TaskKind.WEEKLY,
            WeeklyTaskCreate(title="Review week", day_of_week=DayOfWeek.SUNDAY),
        )

        today = await service.list_today_weekly()
        assert [t.title for t in today] == ["Plan week"]

        clock.set(datetime(2026, 10, 20, 9, 0))
        assert await service.list_today_weekly() == []
