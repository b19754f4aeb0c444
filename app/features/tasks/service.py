"""
Task Service

Handles business logic for tasks including:
- CRUD and bulk-update operations
- Gating completion on dependency status
- Refusing to delete tasks other tasks depend on
- Recomputing the derived priority on every mutation
- Recording an audit log entry for every mutation

Each call is one unit of work: load, validate, mutate, persist, log.
Nothing locks across calls, so two concurrent updates of the same task
(or of tasks depending on each other) can interleave and the last write wins.
The task write and its log append are separate writes: if the append fails
the mutation stays persisted and the error is surfaced to the caller.
"""

import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.features.audit_logs.domain import LogEntry, LogEntryCreate
from app.features.audit_logs.recorder import ChangeLogRecorder
from app.features.tasks.dependencies import (
    DEFAULT_MISSING_DEPENDENCY_POLICY,
    MissingDependencyPolicy,
)
from app.features.tasks.domain import Task, TaskCreate, TaskStatus, TaskUpdate
from app.features.tasks.ports import LogSink, TaskStore
from app.features.tasks.schemas import TaskBulkUpdateItem, TaskListQuery, TaskPage
from app.models.user import Actor
from app.utils.datetime_helper import utc_now

logger = logging.getLogger(__name__)


def _describe_errors(error: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc']) or 'task'}: {detail['msg']}"
        for detail in error.errors()
    )


class TaskService:
    """Service for task mutations and their audit trail"""

    def __init__(
        self,
        tasks: TaskStore,
        logs: LogSink,
        clock: Callable[[], datetime] = utc_now,
        missing_dependency_policy: MissingDependencyPolicy = DEFAULT_MISSING_DEPENDENCY_POLICY,
    ):
        self.tasks = tasks
        self.clock = clock
        self.recorder = ChangeLogRecorder(logs, clock)
        self.missing_dependency_policy = missing_dependency_policy

    # ============================================================================
    # QUERIES
    # ============================================================================

    async def get_task(self, task_id: str) -> Task:
        """
        Get a task by ID or raise NotFoundError
        """
        task = await self.tasks.find_by_id(task_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    async def list_tasks(self, query: TaskListQuery) -> TaskPage:
        """
        List tasks matching the query filters, one page at a time.

        Args:
            query: Filters, sort order and pagination

        Returns:
            The requested page with total counts
        """
        items, total = await self.tasks.find_page(query)
        return TaskPage(
            items=items,
            total=total,
            page=query.page,
            limit=query.limit,
            pages=math.ceil(total / query.limit) if total else 0,
        )

    async def get_task_history(self, task_id: str, limit: Optional[int] = None) -> List[LogEntry]:
        """Audit trail of a task, newest first. Deleted tasks keep their history."""
        return await self.recorder.history(task_id, limit=limit)

    # ============================================================================
    # MUTATIONS
    # ============================================================================

    async def create_task(self, data: Union[TaskCreate, Dict[str, Any]], actor: Actor) -> Task:
        """
        Create a new task.

        The task starts pending with no hours logged; its priority is computed
        from the deadline and dependencies before it is saved.

        Args:
            data: Task fields
            actor: User performing the mutation

        Returns:
            The persisted task

        Raises:
            ValidationError: Required fields are missing or malformed
        """
        now = self.clock()
        try:
            fields = data if isinstance(data, TaskCreate) else TaskCreate.model_validate(data)
            task = Task(
                **fields.model_dump(),
                id=str(uuid4()),
                status=TaskStatus.PENDING,
                priority=0,
                created_by=actor.id,
                created_at=now,
                updated_at=now,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid task: {_describe_errors(e)}")

        task.calculate_priority(now)
        saved = await self.tasks.save(task)
        logger.info(f"Created task {saved.id} with priority {saved.priority:.2f}")

        await self.recorder.record(self.recorder.created(saved.snapshot(), actor))
        return saved

    async def update_task(
        self,
        task_id: str,
        changes: Union[TaskUpdate, Dict[str, Any]],
        actor: Actor,
    ) -> Task:
        """
        Update a task.

        Args:
            task_id: The task ID to update
            changes: Fields to change; unset fields are left alone
            actor: User performing the mutation

        Returns:
            The updated task

        Raises:
            NotFoundError: Task does not exist
            ConflictError: Status set to completed while dependencies are not completed
            ValidationError: Resulting task is invalid
        """
        fields = self._parse_update(changes).changed_fields()
        task = await self.get_task(task_id)

        await self._ensure_can_complete(task, fields)

        before = task.snapshot()
        updated = self._apply(task, fields)
        saved = await self.tasks.save(updated)
        logger.info(f"Updated task {task_id} (fields: {sorted(fields)})")

        await self.recorder.record(self.recorder.updated(before, saved.snapshot(), actor))
        return saved

    async def bulk_update_tasks(
        self,
        items: Sequence[Union[TaskBulkUpdateItem, Dict[str, Any]]],
        actor: Actor,
    ) -> List[Task]:
        """
        Update several tasks in one request.

        Every item is loaded, gated and validated in order before anything is
        written; the first failing item aborts the whole batch. The queued
        writes are then flushed as one batch and their log entries appended
        together. There is no rollback if the flush itself partly fails.

        Args:
            items: Ordered updates, each naming its task id
            actor: User performing the mutation

        Returns:
            The updated tasks, in request order

        Raises:
            NotFoundError: An item names a task that does not exist
            ConflictError: An item completes a task whose dependencies are not completed
            ValidationError: An item produces an invalid task
        """
        queued_tasks: List[Task] = []
        queued_logs: List[LogEntryCreate] = []

        for raw_item in items:
            item = self._parse_bulk_item(raw_item)
            task = await self.tasks.find_by_id(item.id)
            if not task:
                raise NotFoundError(f"Task {item.id} not found")

            fields = item.changed_fields()
            await self._ensure_can_complete(task, fields)

            before = task.snapshot()
            updated = self._apply(task, fields)
            queued_tasks.append(updated)
            queued_logs.append(
                self.recorder.updated(before, updated.snapshot(), actor, bulk_update=True)
            )

        saved = await self.tasks.save_many(queued_tasks)
        logger.info(f"Bulk updated {len(saved)} tasks")

        await self.recorder.record_many(queued_logs)
        return saved

    async def delete_task(self, task_id: str, actor: Actor) -> Task:
        """
        Delete a task that no other task depends on.

        Args:
            task_id: The task ID to delete
            actor: User performing the mutation

        Returns:
            The deleted task

        Raises:
            NotFoundError: Task does not exist
            ConflictError: Other tasks list this task as a dependency
        """
        task = await self.get_task(task_id)

        dependents = await self.tasks.find_dependents(task_id)
        if dependents:
            logger.warning(
                f"Refusing to delete task {task_id}: "
                f"depended on by {[dependent.id for dependent in dependents]}"
            )
            raise ConflictError(f"Cannot delete task {task_id}: other tasks depend on it")

        snapshot = task.snapshot()
        await self.tasks.delete(task_id)
        logger.info(f"Deleted task {task_id}")

        await self.recorder.record(self.recorder.deleted(snapshot, actor))
        return task

    # ============================================================================
    # HELPERS
    # ============================================================================

    async def _ensure_can_complete(self, task: Task, fields: Dict[str, Any]) -> None:
        if fields.get("status") != TaskStatus.COMPLETED:
            return

        completed = await task.are_dependencies_completed(
            self.tasks.find_by_ids,
            self.missing_dependency_policy,
        )
        if not completed:
            logger.warning(f"Blocked completion of task {task.id}: dependencies are not completed")
            raise ConflictError(f"Cannot complete task {task.id}: dependencies are not completed")

    def _apply(self, task: Task, fields: Dict[str, Any]) -> Task:
        """Build the updated task, refresh updated_at and recompute priority"""
        now = self.clock()
        try:
            updated = Task.model_validate({**task.model_dump(), **fields, "updated_at": now})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid update for task {task.id}: {_describe_errors(e)}")

        updated.calculate_priority(now)
        return updated

    @staticmethod
    def _parse_update(changes: Union[TaskUpdate, Dict[str, Any]]) -> TaskUpdate:
        if isinstance(changes, TaskUpdate):
            return changes
        try:
            return TaskUpdate.model_validate(changes)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid update: {_describe_errors(e)}")

    @staticmethod
    def _parse_bulk_item(item: Union[TaskBulkUpdateItem, Dict[str, Any]]) -> TaskBulkUpdateItem:
        if isinstance(item, TaskBulkUpdateItem):
            return item
        try:
            return TaskBulkUpdateItem.model_validate(item)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid bulk update item: {_describe_errors(e)}")
