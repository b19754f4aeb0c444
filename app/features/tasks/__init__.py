"""Tasks feature module"""

from app.features.tasks.api import router
from app.features.tasks.dependencies import MissingDependencyPolicy, are_dependencies_completed
from app.features.tasks.domain import Task, TaskCreate, TaskStatus, TaskUpdate
from app.features.tasks.priority import compute_priority
from app.features.tasks.repository import TaskRepository
from app.features.tasks.service import TaskService

__all__ = [
    "router",
    "MissingDependencyPolicy",
    "are_dependencies_completed",
    "Task",
    "TaskCreate",
    "TaskStatus",
    "TaskUpdate",
    "compute_priority",
    "TaskRepository",
    "TaskService",
]
