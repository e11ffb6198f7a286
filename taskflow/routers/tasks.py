from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError
from sqlmodel import Session

from ..database import get_db
from ..errors import ValidationFailed
from ..models import User
from ..schemas.task import (
    MessageResponse,
    SortOrder,
    TaskCreate,
    TaskQuery,
    TaskRead,
    TaskSortField,
    TaskStats,
    TaskStatusUpdate,
    TaskUpdate,
)
from ..services import tasks as task_service
from .auth import get_current_user

router = APIRouter()


@router.get("", response_model=List[TaskRead])
def list_tasks(
    search: Optional[str] = None,
    status: Optional[str] = Query(None, description="pending, in-progress or completed; empty means all"),
    priority: Optional[str] = Query(None, description="low, medium or high; empty means all"),
    sort: TaskSortField = TaskSortField.CREATED_AT,
    order: SortOrder = SortOrder.DESC,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the caller's tasks with optional search, filtering and sorting.

    Empty ``status`` or ``priority`` means no filter. Unknown ``status``,
    ``priority``, ``sort`` or ``order`` values are rejected with 422 before
    any query runs.
    """
    try:
        query = TaskQuery(search=search, status=status, priority=priority, sort=sort, order=order)
    except ValidationError as exc:
        raise ValidationFailed.from_pydantic(exc, "Invalid request", location="query") from exc
    return task_service.list_tasks(db, current_user.id, query)


@router.get("/stats", response_model=TaskStats)
def task_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Task counts by status and priority for the caller."""
    return task_service.summarize_tasks(db, current_user.id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new task owned by the caller."""
    return task_service.create_task(db, current_user.id, task)


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a specific task by ID."""
    return task_service.get_task(db, current_user.id, task_id)


@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update a specific task; omitted fields keep their current values."""
    return task_service.update_task(db, current_user.id, task_id, task_update)


@router.patch("/{task_id}/status", response_model=TaskRead)
def set_task_status(
    task_id: str,
    payload: TaskStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Move a task to another status."""
    return task_service.set_task_status(db, current_user.id, task_id, payload.status)


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a specific task."""
    task_service.delete_task(db, current_user.id, task_id)
    return {"message": "Task deleted successfully"}
