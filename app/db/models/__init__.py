"""SQLAlchemy ORM models"""

from app.db.models.task import Task
from app.db.models.task_log import TaskLog
from app.db.models.user import User

__all__ = ["Task", "TaskLog", "User"]
