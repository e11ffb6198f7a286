from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import Field, field_validator

from ..models.task import TaskPriority, TaskStatus
from .base import CamelModel, naive_utc, strip_or_none

TITLE_MAX_LENGTH = 255


class TaskSortField(str, Enum):
    """Attributes a task listing may be ordered by."""
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    DUE_DATE = "dueDate"
    TITLE = "title"
    PRIORITY = "priority"
    STATUS = "status"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _clean_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Title is required")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")
    return value


class TaskBase(CamelModel):
    """Fields a client may set on a task."""
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def clean_title(cls, value: str) -> str:
        return _clean_title(value)

    @field_validator("description")
    @classmethod
    def clean_description(cls, value: Optional[str]) -> Optional[str]:
        return strip_or_none(value)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class TaskCreate(TaskBase):
    """Schema for creating new tasks. Any client-supplied owner is ignored."""
    pass


class TaskUpdate(CamelModel):
    """Schema for updating existing tasks; only supplied fields change."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def clean_title(cls, value: Optional[str]) -> Optional[str]:
        return _clean_title(value)

    @field_validator("description")
    @classmethod
    def clean_description(cls, value: Optional[str]) -> Optional[str]:
        return strip_or_none(value)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


class TaskRead(TaskBase):
    """Task as returned by the API."""
    id: str
    owner_id: str = Field(validation_alias="owner_id", serialization_alias="owner")
    created_at: datetime
    updated_at: datetime


class TaskQuery(CamelModel):
    """Filter and ordering options for listing a user's tasks."""
    search: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    sort: TaskSortField = TaskSortField.CREATED_AT
    order: SortOrder = SortOrder.DESC

    @field_validator("status", "priority", mode="before")
    @classmethod
    def blank_filter_is_none(cls, value):
        # An empty query value (e.g. an "All" option) means no filter.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, value: Optional[str]) -> Optional[str]:
        # Whitespace-only means "no text filter"; otherwise match the term as given.
        if value is None or not value.strip():
            return None
        return value


class TaskStats(CamelModel):
    total: int
    by_status: Dict[TaskStatus, int]
    by_priority: Dict[TaskPriority, int]
    overdue: int


class MessageResponse(CamelModel):
    message: str
