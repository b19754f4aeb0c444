"""Domain models for Tasks feature"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator, model_validator

from app.features.tasks.priority import compute_priority
from app.utils.datetime_helper import ensure_utc, utc_now

if TYPE_CHECKING:
    from app.features.tasks.dependencies import MissingDependencyPolicy, TaskLookup


class TaskStatus(str, Enum):
    """Task status enum"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


def _clean_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


def _unique_ids(values: List[str]) -> List[str]:
    seen = set()
    unique = []
    for value in values:
        if value not in seen:
            seen.add(value)
            unique.append(value)
    return unique


class TaskBase(BaseModel):
    """Base task fields for creation"""
    title: str
    description: str
    assigned_to: str
    deadline: datetime
    dependencies: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: float = Field(0, ge=0)
    completion_percentage: float = Field(0, ge=0, le=100)

    @field_validator("title", "description", "assigned_to")
    @classmethod
    def validate_text(cls, value: str) -> str:
        return _clean_text(value)

    @field_validator("deadline")
    @classmethod
    def validate_deadline(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("dependencies")
    @classmethod
    def validate_dependencies(cls, value: List[str]) -> List[str]:
        return _unique_ids(value)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, value: List[str]) -> List[str]:
        return [tag.strip() for tag in value if tag.strip()]


class TaskCreate(TaskBase):
    """Task creation model. Status, priority and ownership are set by the service."""
    pass


class TaskUpdate(BaseModel):
    """Task update model - all fields optional, priority is always derived"""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    assigned_to: Optional[str] = None
    deadline: Optional[datetime] = None
    dependencies: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    completion_percentage: Optional[float] = Field(None, ge=0, le=100)

    def changed_fields(self) -> Dict[str, Any]:
        """Fields explicitly provided by the caller"""
        return self.model_dump(exclude_unset=True)


class Task(TaskBase):
    """Complete task domain model"""
    id: str
    status: TaskStatus = TaskStatus.PENDING
    priority: float = Field(0, ge=0, le=5)
    created_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timestamps(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def validate_no_self_dependency(self) -> "Task":
        if self.id in self.dependencies:
            raise ValueError("a task cannot depend on itself")
        return self

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def calculate_priority(self, now: Optional[datetime] = None) -> float:
        """Recompute and store the derived priority"""
        self.priority = compute_priority(
            self.deadline,
            len(self.dependencies),
            now or utc_now(),
        )
        return self.priority

    async def are_dependencies_completed(
        self,
        lookup: "TaskLookup",
        policy: Optional["MissingDependencyPolicy"] = None,
    ) -> bool:
        from app.features.tasks.dependencies import are_dependencies_completed

        return await are_dependencies_completed(self, lookup, policy)

    def snapshot(self) -> Dict[str, Any]:
        """JSON-safe copy of the task, used for audit log entries"""
        return self.model_dump(mode="json")
