"""Deadline-driven priority scoring"""

import math
from datetime import datetime, timedelta

from app.utils.datetime_helper import ensure_utc

MIN_PRIORITY = 0.0
MAX_PRIORITY = 5.0

# One point of priority is lost for every week left until the deadline
DAYS_PER_PRIORITY_POINT = 7

DEPENDENCY_BONUS = 1.0


def compute_priority(deadline: datetime, dependency_count: int, now: datetime) -> float:
    """
    Score a task between 0 and 5 from its deadline and dependency count.

    The base score falls from 5 (deadline today or overdue) to 0
    (deadline 35 or more days away). Tasks with dependencies get one
    extra point, and the result is capped at 5.

    Args:
        deadline: When the task is due
        dependency_count: Number of tasks this task depends on
        now: Reference time, so the result is deterministic

    Returns:
        Priority score in [0, 5]
    """
    days_until_deadline = math.ceil(
        (ensure_utc(deadline) - ensure_utc(now)) / timedelta(days=1)
    )

    priority = MAX_PRIORITY - min(
        MAX_PRIORITY,
        max(MIN_PRIORITY, days_until_deadline / DAYS_PER_PRIORITY_POINT),
    )

    if dependency_count > 0:
        priority += DEPENDENCY_BONUS

    return min(MAX_PRIORITY, priority)
