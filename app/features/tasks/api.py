"""Tasks API endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app import config
from app.db import get_db
from app.exceptions import TaskWorkflowError
from app.features.audit_logs.repository import LogRepository
from app.features.tasks.dependencies import MissingDependencyPolicy
from app.features.tasks.domain import Task, TaskCreate, TaskStatus, TaskUpdate
from app.features.tasks.repository import TaskRepository
from app.features.tasks.schemas import (
    BulkUpdateRequest,
    BulkUpdateResponse,
    DeleteResponse,
    SortField,
    SortOrder,
    TaskListQuery,
    TaskPage,
)
from app.features.tasks.service import TaskService
from app.middleware.auth import get_current_actor, require_roles
from app.models.user import Actor, UserRole

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/tasks", tags=["tasks"])

can_edit = require_roles(UserRole.ADMIN, UserRole.MANAGER)
can_delete = require_roles(UserRole.ADMIN)

missing_dependency_policy = MissingDependencyPolicy(config.MISSING_DEPENDENCY_POLICY)


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    """Wire the task service to the request's database session"""
    return TaskService(
        TaskRepository(db),
        LogRepository(db),
        missing_dependency_policy=missing_dependency_policy,
    )


def to_http_exception(error: TaskWorkflowError) -> HTTPException:
    if error.status_code >= 500:
        logger.error(f"Task operation failed: {error.message}")
    return HTTPException(status_code=error.status_code, detail=error.message)


@router.post("", response_model=Task, status_code=201)
async def create_task(
    request: TaskCreate,
    actor: Actor = Depends(can_edit),
    service: TaskService = Depends(get_task_service)
):
    """Create a new task. Priority is computed from deadline and dependencies."""
    try:
        return await service.create_task(request, actor)
    except TaskWorkflowError as e:
        raise to_http_exception(e)


@router.get("", response_model=TaskPage)
async def list_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[TaskStatus] = None,
    priority: Optional[float] = Query(None, ge=0, le=5),
    assigned_to: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: SortField = SortField.PRIORITY,
    sort_order: SortOrder = SortOrder.DESC,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service)
):
    """List tasks with filtering, sorting and pagination"""
    query = TaskListQuery(
        page=page,
        limit=limit,
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    try:
        return await service.list_tasks(query)
    except TaskWorkflowError as e:
        raise to_http_exception(e)


@router.post("/bulk-update", response_model=BulkUpdateResponse)
async def bulk_update_tasks(
    request: BulkUpdateRequest,
    actor: Actor = Depends(can_edit),
    service: TaskService = Depends(get_task_service)
):
    """
    Update several tasks at once.

    Every item is validated before anything is written. If any item names an
    unknown task or completes a task with unfinished dependencies, nothing is
    saved and the error names the offending task.
    """
    try:
        tasks = await service.bulk_update_tasks(request.tasks, actor)
    except TaskWorkflowError as e:
        raise to_http_exception(e)

    return {"message": "Tasks updated successfully", "tasks": tasks}


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service)
):
    """Get a single task by ID"""
    try:
        return await service.get_task(task_id)
    except TaskWorkflowError as e:
        raise to_http_exception(e)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    request: TaskUpdate,
    actor: Actor = Depends(can_edit),
    service: TaskService = Depends(get_task_service)
):
    """
    Update an existing task.

    Setting status to "completed" is refused (409) while any dependency is
    not completed.
    """
    try:
        return await service.update_task(task_id, request, actor)
    except TaskWorkflowError as e:
        raise to_http_exception(e)


@router.delete("/{task_id}", response_model=DeleteResponse)
async def delete_task(
    task_id: str,
    actor: Actor = Depends(can_delete),
    service: TaskService = Depends(get_task_service)
):
    """Delete a task. Refused (409) while other tasks depend on it."""
    try:
        await service.delete_task(task_id, actor)
    except TaskWorkflowError as e:
        raise to_http_exception(e)

    return {"success": True, "message": "Task deleted successfully"}
