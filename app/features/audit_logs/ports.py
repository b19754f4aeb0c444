"""Log sink port used by the change log recorder"""

from typing import List, Optional, Protocol

from app.features.audit_logs.domain import LogEntry, LogEntryCreate


class LogSink(Protocol):
    """Append-only store for log entries. Appends are at-least-once."""

    async def append(self, entry: LogEntryCreate) -> LogEntry: ...

    async def append_many(self, entries: List[LogEntryCreate]) -> List[LogEntry]: ...

    async def find_by_task(self, task_id: str, limit: Optional[int] = None) -> List[LogEntry]: ...
