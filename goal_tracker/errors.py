"""Domain errors raised by services and translated by routers."""


class GoalTrackerError(ValueError):
    """Base class for all goal tracker errors."""


class ValidationError(GoalTrackerError):
    """Input rejected: empty or over-length title, invalid date, bad shape."""


class NotFoundError(GoalTrackerError):
    """An operation referenced an id absent from its collection."""


class TaskLockedError(GoalTrackerError):
    """A locked task block or subtask was toggled in step-by-step mode."""


class StorageUnavailableError(GoalTrackerError):
    """The underlying store cannot be reached.

    Never propagates past the storage adapter: reads degrade to an empty
    collection and writes become logged no-ops.
    """
