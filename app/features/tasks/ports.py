"""
Storage ports used by the task service.

The service depends on these Protocols rather than on SQLAlchemy directly,
so it can run against the database repositories or in-memory fakes.
"""

from typing import List, Optional, Protocol, Tuple

from app.features.audit_logs.ports import LogSink
from app.features.tasks.domain import Task
from app.features.tasks.schemas import TaskListQuery


class TaskStore(Protocol):
    async def find_by_id(self, task_id: str) -> Optional[Task]: ...

    async def find_by_ids(self, task_ids: List[str]) -> List[Task]: ...

    async def find_dependents(self, task_id: str) -> List[Task]: ...

    async def find_page(self, query: TaskListQuery) -> Tuple[List[Task], int]: ...

    async def save(self, task: Task) -> Task: ...

    async def save_many(self, tasks: List[Task]) -> List[Task]: ...

    async def delete(self, task_id: str) -> None: ...


__all__ = ["TaskStore", "LogSink"]
