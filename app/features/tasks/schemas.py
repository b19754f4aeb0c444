"""Request/response schemas for Tasks feature"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.features.tasks.domain import Task, TaskStatus, TaskUpdate


class SortField(str, Enum):
    PRIORITY = "priority"
    DEADLINE = "deadline"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    TITLE = "title"
    STATUS = "status"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TaskListQuery(BaseModel):
    """Filters, sorting and pagination for listing tasks"""
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    status: Optional[TaskStatus] = None
    priority: Optional[float] = Field(None, ge=0, le=5)
    assigned_to: Optional[str] = None
    search: Optional[str] = None
    sort_by: SortField = SortField.PRIORITY
    sort_order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class TaskPage(BaseModel):
    items: List[Task]
    total: int
    page: int
    limit: int
    pages: int


class TaskBulkUpdateItem(TaskUpdate):
    """One entry of a bulk update: the target id plus the fields to change"""
    id: str

    def changed_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"id"})


class BulkUpdateRequest(BaseModel):
    tasks: List[TaskBulkUpdateItem] = Field(..., min_length=1)


class BulkUpdateResponse(BaseModel):
    message: str
    tasks: List[Task]


class DeleteResponse(BaseModel):
    success: bool
    message: str
