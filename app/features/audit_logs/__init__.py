"""Audit Logs feature module"""

from app.features.audit_logs.api import router
from app.features.audit_logs.domain import LogAction, LogEntry, LogEntryCreate
from app.features.audit_logs.recorder import ChangeLogRecorder
from app.features.audit_logs.repository import LogRepository

__all__ = [
    "router",
    "LogAction",
    "LogEntry",
    "LogEntryCreate",
    "ChangeLogRecorder",
    "LogRepository",
]
