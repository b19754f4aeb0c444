"""SQLAlchemy repository for task audit logs"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.errors import storage_errors
from app.db.models.task_log import TaskLog as TaskLogORM
from app.features.audit_logs.domain import LogEntry, LogEntryCreate

logger = logging.getLogger(__name__)


class LogRepository:
    """Append-only repository for log entries"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, entry: LogEntryCreate) -> LogEntry:
        """Insert one log entry"""
        orm_entry = self._to_orm(entry)
        async with storage_errors(self.db, f"append {entry.action.value} log for task {entry.task_id}"):
            self.db.add(orm_entry)
            await self.db.commit()

        return self._to_domain_model(orm_entry)

    async def append_many(self, entries: List[LogEntryCreate]) -> List[LogEntry]:
        """Insert several log entries with a single commit"""
        if not entries:
            return []

        orm_entries = [self._to_orm(entry) for entry in entries]
        async with storage_errors(self.db, f"append {len(entries)} log entries"):
            self.db.add_all(orm_entries)
            await self.db.commit()

        return [self._to_domain_model(orm_entry) for orm_entry in orm_entries]

    async def find_by_task(self, task_id: str, limit: Optional[int] = None) -> List[LogEntry]:
        """Log entries of a task, newest first"""
        stmt = (
            select(TaskLogORM)
            .where(TaskLogORM.task_id == task_id)
            .order_by(TaskLogORM.timestamp.desc(), TaskLogORM.id.desc())
        )
        if limit:
            stmt = stmt.limit(limit)

        async with storage_errors(self.db, f"load logs for task {task_id}"):
            result = await self.db.execute(stmt)
            orm_entries = result.scalars().all()

        return [self._to_domain_model(orm_entry) for orm_entry in orm_entries]

    @staticmethod
    def _to_orm(entry: LogEntryCreate) -> TaskLogORM:
        return TaskLogORM(
            action=entry.action.value,
            task_id=entry.task_id,
            user_id=entry.user_id,
            changes=entry.changes,
            timestamp=entry.timestamp,
            metadata_=dict(entry.metadata),
        )

    @staticmethod
    def _to_domain_model(orm_entry: TaskLogORM) -> LogEntry:
        return LogEntry(
            id=orm_entry.id,
            action=orm_entry.action,
            task_id=orm_entry.task_id,
            user_id=orm_entry.user_id,
            changes=orm_entry.changes,
            timestamp=orm_entry.timestamp,
            metadata=orm_entry.metadata_ or {},
        )
