"""Audit log API endpoints"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.exceptions import StorageError
from app.features.audit_logs.domain import LogEntry
from app.features.audit_logs.recorder import ChangeLogRecorder
from app.features.audit_logs.repository import LogRepository
from app.middleware.auth import require_roles
from app.models.user import Actor, UserRole

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/tasks", tags=["audit-logs"])


def get_change_log_recorder(db: AsyncSession = Depends(get_db)) -> ChangeLogRecorder:
    return ChangeLogRecorder(LogRepository(db))


@router.get("/{task_id}/logs", response_model=List[LogEntry])
async def get_task_logs(
    task_id: str,
    limit: int = Query(50, ge=1, le=500),
    actor: Actor = Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER)),
    recorder: ChangeLogRecorder = Depends(get_change_log_recorder)
):
    """
    Get the audit trail of a task, newest first.

    History outlives the task: entries of deleted tasks are still returned.
    """
    try:
        return await recorder.history(task_id, limit=limit)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=e.message)
