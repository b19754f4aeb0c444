"""Domain models for Audit Logs feature"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from app.utils.datetime_helper import ensure_utc


class LogAction(str, Enum):
    """Kind of mutation a log entry describes"""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS_CHANGE = "status_change"
    DEPENDENCY_UPDATE = "dependency_update"


class LogEntryCreate(BaseModel):
    """Log entry ready to be appended"""
    action: LogAction
    task_id: str
    user_id: str
    changes: Dict[str, Any]
    timestamp: datetime
    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        frozen = True

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class LogEntry(LogEntryCreate):
    """Stored log entry. Entries are never updated or deleted."""
    id: int

    class Config:
        from_attributes = True
        frozen = True
