"""Input validation utilities shared by the services."""
import re
from datetime import datetime
from typing import Optional

from goal_tracker.config import settings
from goal_tracker.errors import ValidationError

SCHEDULED_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def clean_title(title: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Strip and validate a title.

    Args:
        title: Raw title from the caller
        max_length: Maximum allowed length (defaults to settings)

    Returns:
        Stripped title

    Raises:
        ValidationError: If the title is empty or too long

    Examples:
        >>> clean_title("  Run a marathon ")
        'Run a marathon'
    """
    limit = max_length or settings.title_max_length
    cleaned = (title or "").strip()

    if not cleaned:
        raise ValidationError("Title is required")
    if len(cleaned) > limit:
        raise ValidationError(f"Title must be less than {limit} characters")

    return cleaned


def clean_description(description: Optional[str]) -> Optional[str]:
    """Validate description length; empty descriptions become None."""
    if description is None:
        return None
    if len(description) > settings.description_max_length:
        raise ValidationError(
            f"Description must be less than {settings.description_max_length} characters"
        )
    return description or None


def check_deadline(deadline: Optional[datetime], now: datetime) -> None:
    """
    Reject deadlines in the past.

    Timezone-aware deadlines are compared in local time.
    """
    if deadline is None:
        return
    if deadline.tzinfo is not None:
        deadline = deadline.astimezone().replace(tzinfo=None)
    if deadline < now:
        raise ValidationError("Deadline cannot be in the past")


def check_scheduled_time(scheduled_time: Optional[str]) -> None:
    """Scheduled times are 24h ``HH:MM`` strings."""
    if scheduled_time is not None and not SCHEDULED_TIME_PATTERN.match(scheduled_time):
        raise ValidationError("Scheduled time must be in HH:MM format")
