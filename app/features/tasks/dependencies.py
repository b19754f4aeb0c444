"""Dependency completion gate"""

import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from app.features.tasks.domain import Task, TaskStatus

logger = logging.getLogger(__name__)

# Resolves dependency ids to the tasks that currently exist.
# Ids that do not resolve are left out of the result.
TaskLookup = Callable[[List[str]], Awaitable[List[Task]]]


class MissingDependencyPolicy(str, Enum):
    """How an unresolvable dependency id affects the completion gate"""
    PASS = "pass"
    BLOCK = "block"


# A missing dependency is simply absent from the resolved set, so a list of
# deleted dependencies lets the task complete.
DEFAULT_MISSING_DEPENDENCY_POLICY = MissingDependencyPolicy.PASS


async def are_dependencies_completed(
    task: Task,
    lookup: TaskLookup,
    policy: Optional[MissingDependencyPolicy] = None,
) -> bool:
    """
    Check whether every dependency of a task is completed.

    Args:
        task: The task about to be completed
        lookup: Async callable resolving ids to existing tasks
        policy: Handling of ids that do not resolve (defaults to PASS)

    Returns:
        True if the task has no dependencies or all resolved dependencies are completed
    """
    if not task.dependencies:
        return True

    policy = policy or DEFAULT_MISSING_DEPENDENCY_POLICY
    resolved = await lookup(list(task.dependencies))

    missing = set(task.dependencies) - {dependency.id for dependency in resolved}
    if missing:
        logger.warning(
            f"Task {task.id} has unresolvable dependencies {sorted(missing)} "
            f"(policy={policy.value})"
        )
        if policy == MissingDependencyPolicy.BLOCK:
            return False

    return all(dependency.status == TaskStatus.COMPLETED for dependency in resolved)
