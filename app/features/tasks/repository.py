"""SQLAlchemy repository for Tasks"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import String, cast, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.errors import storage_errors
from app.db.models.task import Task as TaskORM
from app.features.tasks.domain import Task
from app.features.tasks.schemas import SortOrder, TaskListQuery

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for task operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: SQLAlchemy async database session
        """
        self.db = db

    async def find_by_id(self, task_id: str) -> Optional[Task]:
        """Find a single task by ID"""
        async with storage_errors(self.db, f"load task {task_id}"):
            orm_task = await self.db.get(TaskORM, task_id)

        if not orm_task:
            return None

        return self._to_domain_model(orm_task)

    async def find_by_ids(self, task_ids: List[str]) -> List[Task]:
        """Find the tasks that exist among the given IDs"""
        if not task_ids:
            return []

        async with storage_errors(self.db, "load tasks"):
            result = await self.db.execute(select(TaskORM).where(TaskORM.id.in_(task_ids)))
            orm_tasks = result.scalars().all()

        return [self._to_domain_model(orm_task) for orm_task in orm_tasks]

    async def find_dependents(self, task_id: str) -> List[Task]:
        """
        Find tasks that list the given task in their dependencies.

        The JSON array is matched as text first to narrow the scan,
        then checked exactly.
        """
        stmt = select(TaskORM).where(
            cast(TaskORM.dependencies, String).like(f'%"{task_id}"%'),
            TaskORM.id != task_id,
        )
        async with storage_errors(self.db, f"find dependents of task {task_id}"):
            result = await self.db.execute(stmt)
            candidates = result.scalars().all()

        return [
            self._to_domain_model(orm_task)
            for orm_task in candidates
            if task_id in (orm_task.dependencies or [])
        ]

    async def find_page(self, query: TaskListQuery) -> Tuple[List[Task], int]:
        """
        Find one page of tasks matching the query filters.

        Returns:
            Tuple of (tasks on the page, total matching tasks)
        """
        conditions = []
        if query.status:
            conditions.append(TaskORM.status == query.status.value)
        if query.priority is not None:
            conditions.append(TaskORM.priority == query.priority)
        if query.assigned_to:
            conditions.append(TaskORM.assigned_to == query.assigned_to)
        if query.search:
            pattern = f"%{query.search}%"
            conditions.append(
                or_(TaskORM.title.ilike(pattern), TaskORM.description.ilike(pattern))
            )

        sort_column = getattr(TaskORM, query.sort_by.value)
        order = sort_column.desc() if query.sort_order == SortOrder.DESC else sort_column.asc()

        stmt = (
            select(TaskORM)
            .where(*conditions)
            .order_by(order, TaskORM.id.asc())
            .offset(query.offset)
            .limit(query.limit)
        )
        count_stmt = select(func.count()).select_from(TaskORM).where(*conditions)

        async with storage_errors(self.db, "list tasks"):
            total = (await self.db.execute(count_stmt)).scalar_one()
            orm_tasks = (await self.db.execute(stmt)).scalars().all()

        return [self._to_domain_model(orm_task) for orm_task in orm_tasks], total

    async def save(self, task: Task) -> Task:
        """Insert or update a task"""
        async with storage_errors(self.db, f"save task {task.id}"):
            orm_task = await self.db.get(TaskORM, task.id)
            if orm_task is None:
                orm_task = TaskORM(id=task.id)
                self.db.add(orm_task)

            self._copy_to_orm(task, orm_task)
            await self.db.commit()

        return self._to_domain_model(orm_task)

    async def save_many(self, tasks: List[Task]) -> List[Task]:
        """Write a batch of tasks with a single commit"""
        if not tasks:
            return []

        async with storage_errors(self.db, f"save {len(tasks)} tasks"):
            result = await self.db.execute(
                select(TaskORM).where(TaskORM.id.in_([task.id for task in tasks]))
            )
            existing = {orm_task.id: orm_task for orm_task in result.scalars().all()}

            orm_tasks = []
            for task in tasks:
                orm_task = existing.get(task.id)
                if orm_task is None:
                    orm_task = TaskORM(id=task.id)
                    self.db.add(orm_task)
                    existing[task.id] = orm_task
                self._copy_to_orm(task, orm_task)
                orm_tasks.append(orm_task)

            await self.db.commit()

        return [self._to_domain_model(orm_task) for orm_task in orm_tasks]

    async def delete(self, task_id: str) -> None:
        """Delete a task by ID"""
        async with storage_errors(self.db, f"delete task {task_id}"):
            await self.db.execute(delete(TaskORM).where(TaskORM.id == task_id))
            await self.db.commit()

    @staticmethod
    def _copy_to_orm(task: Task, orm_task: TaskORM) -> None:
        orm_task.title = task.title
        orm_task.description = task.description
        orm_task.status = task.status.value
        orm_task.priority = task.priority
        orm_task.deadline = task.deadline
        orm_task.tags = list(task.tags)
        orm_task.dependencies = list(task.dependencies)
        orm_task.estimated_hours = task.estimated_hours
        orm_task.actual_hours = task.actual_hours
        orm_task.completion_percentage = task.completion_percentage
        orm_task.assigned_to = task.assigned_to
        orm_task.created_by = task.created_by
        orm_task.created_at = task.created_at
        orm_task.updated_at = task.updated_at

    @staticmethod
    def _to_domain_model(orm_task: TaskORM) -> Task:
        return Task(
            id=orm_task.id,
            title=orm_task.title,
            description=orm_task.description,
            status=orm_task.status,
            priority=orm_task.priority,
            deadline=orm_task.deadline,
            tags=orm_task.tags or [],
            dependencies=orm_task.dependencies or [],
            estimated_hours=orm_task.estimated_hours,
            actual_hours=orm_task.actual_hours or 0,
            completion_percentage=orm_task.completion_percentage or 0,
            assigned_to=orm_task.assigned_to,
            created_by=orm_task.created_by,
            created_at=orm_task.created_at,
            updated_at=orm_task.updated_at,
        )
