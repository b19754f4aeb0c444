"""Change log recorder: builds audit entries for task mutations"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from app.features.audit_logs.domain import LogAction, LogEntry, LogEntryCreate
from app.features.audit_logs.ports import LogSink
from app.models.user import Actor
from app.utils.datetime_helper import utc_now

logger = logging.getLogger(__name__)


class ChangeLogRecorder:
    """
    Captures before/after state of task mutations together with actor metadata.

    Entries are built in memory first so a caller can queue several of them
    (bulk updates) and append them in one go.
    """

    def __init__(self, sink: LogSink, clock: Callable[[], datetime] = utc_now):
        self.sink = sink
        self.clock = clock

    def build(
        self,
        action: LogAction,
        task_id: str,
        actor: Actor,
        changes: Dict[str, Any],
        **metadata: Any,
    ) -> LogEntryCreate:
        return LogEntryCreate(
            action=action,
            task_id=task_id,
            user_id=actor.id,
            changes=changes,
            timestamp=self.clock(),
            metadata={"user_role": actor.role.value, **metadata},
        )

    def created(self, snapshot: Dict[str, Any], actor: Actor) -> LogEntryCreate:
        return self.build(LogAction.CREATE, snapshot["id"], actor, snapshot)

    def updated(
        self,
        before: Dict[str, Any],
        after: Dict[str, Any],
        actor: Actor,
        bulk_update: bool = False,
    ) -> LogEntryCreate:
        metadata = {"bulk_update": True} if bulk_update else {}
        return self.build(
            LogAction.UPDATE,
            after["id"],
            actor,
            {"before": before, "after": after},
            **metadata,
        )

    def deleted(self, snapshot: Dict[str, Any], actor: Actor) -> LogEntryCreate:
        return self.build(LogAction.DELETE, snapshot["id"], actor, snapshot)

    async def record(self, entry: LogEntryCreate) -> LogEntry:
        stored = await self.sink.append(entry)
        logger.info(f"Recorded {entry.action.value} log for task {entry.task_id}")
        return stored

    async def record_many(self, entries: List[LogEntryCreate]) -> List[LogEntry]:
        if not entries:
            return []
        stored = await self.sink.append_many(entries)
        logger.info(f"Recorded {len(entries)} log entries")
        return stored

    async def history(self, task_id: str, limit: Optional[int] = None) -> List[LogEntry]:
        """Audit trail of a task, newest first"""
        return await self.sink.find_by_task(task_id, limit=limit)
