"""Goal model definitions: goals, task blocks and subtasks."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from goal_tracker.models.base import CamelModel


class Priority(str, Enum):
    """Goal priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskBlockType(str, Enum):
    """Task block kinds."""

    SINGLE = "single"
    GROUPED = "grouped"


class Subtask(CamelModel):
    """Subtask owned by a grouped task block."""

    id: str
    title: str
    completed: bool = False
    is_reward_trigger: bool = False
    reward_note: Optional[str] = None
    locked: bool = False
    order: int


class TaskBlock(CamelModel):
    """Unit of work within a goal."""

    id: str
    title: str
    type: TaskBlockType = TaskBlockType.SINGLE
    completed: bool = False
    locked: bool = False
    is_reward_trigger: bool = False
    reward_note: Optional[str] = None
    subtasks: Optional[list[Subtask]] = None  # grouped blocks only
    order: int


class GoalBase(CamelModel):
    """Base goal fields."""

    title: str
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    priority: Priority = Priority.MEDIUM
    reward: Optional[str] = None
    step_by_step: bool = False


class GoalCreate(GoalBase):
    """Goal creation model."""

    pass


class GoalUpdate(CamelModel):
    """Goal update model - all fields optional."""

    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    priority: Optional[Priority] = None
    reward: Optional[str] = None
    step_by_step: Optional[bool] = None


class Goal(GoalBase):
    """Full goal model with derived fields."""

    id: str
    completed: bool = False
    progress: int = Field(default=0, ge=0, le=100)
    task_blocks: list[TaskBlock] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SubtaskCreate(CamelModel):
    """Subtask creation model."""

    title: str
    is_reward_trigger: bool = False
    reward_note: Optional[str] = None


class TaskBlockCreate(CamelModel):
    """Task block creation model; subtasks apply to grouped blocks only."""

    title: str
    type: TaskBlockType = TaskBlockType.SINGLE
    is_reward_trigger: bool = False
    reward_note: Optional[str] = None
    subtasks: list[SubtaskCreate] = Field(default_factory=list)


class TitleUpdate(CamelModel):
    """Rename model for task blocks and subtasks."""

    title: str
