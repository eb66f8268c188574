"""Clock helpers so day and week boundaries can be pinned in tests."""
from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def now() -> datetime:
    """Current local time (naive); recurrence windows follow the local calendar."""
    return datetime.now()


def get_clock() -> Clock:
    """Dependency returning the clock used by services."""
    return now
