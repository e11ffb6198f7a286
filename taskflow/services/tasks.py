"""Owner-scoped task queries and mutations.

Every function takes the session explicitly plus the caller's user id; a
task belonging to someone else is indistinguishable from a missing one.
"""

from datetime import datetime
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import case, func, or_
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, col, select

from ..errors import NotFoundError, ValidationFailed
from ..models import Task, TaskPriority, TaskStatus
from ..schemas.task import SortOrder, TaskCreate, TaskQuery, TaskSortField, TaskUpdate

logger = logging.getLogger(__name__)

PRIORITY_RANK = {
    TaskPriority.LOW.value: 0,
    TaskPriority.MEDIUM.value: 1,
    TaskPriority.HIGH.value: 2,
}

STATUS_RANK = {
    TaskStatus.PENDING.value: 0,
    TaskStatus.IN_PROGRESS.value: 1,
    TaskStatus.COMPLETED.value: 2,
}

# Each sort token resolves to the expression the rows are compared on.
SORT_KEYS: Dict[TaskSortField, Callable[[], ColumnElement]] = {
    TaskSortField.CREATED_AT: lambda: col(Task.created_at),
    TaskSortField.UPDATED_AT: lambda: col(Task.updated_at),
    TaskSortField.DUE_DATE: lambda: col(Task.due_date),
    TaskSortField.TITLE: lambda: func.lower(col(Task.title)),
    TaskSortField.PRIORITY: lambda: case(PRIORITY_RANK, value=col(Task.priority), else_=-1),
    TaskSortField.STATUS: lambda: case(STATUS_RANK, value=col(Task.status), else_=-1),
}


def _order_by(query: TaskQuery) -> List[ColumnElement]:
    key = SORT_KEYS[query.sort]()
    clauses = []
    if query.sort is TaskSortField.DUE_DATE:
        # Undated tasks go last in both directions.
        clauses.append(case((col(Task.due_date).is_(None), 1), else_=0))
    clauses.append(key.asc() if query.order is SortOrder.ASC else key.desc())
    clauses.extend([col(Task.created_at).asc(), col(Task.id).asc()])
    return clauses


def build_task_filter(owner_id: str, query: TaskQuery) -> List[ColumnElement]:
    """Conjuncts selecting the caller's tasks that match ``query``."""
    conditions = [col(Task.owner_id) == owner_id]

    if query.status is not None:
        conditions.append(col(Task.status) == query.status.value)

    if query.priority is not None:
        conditions.append(col(Task.priority) == query.priority.value)

    if query.search:
        conditions.append(
            or_(
                col(Task.title).icontains(query.search, autoescape=True),
                col(Task.description).icontains(query.search, autoescape=True),
            )
        )

    return conditions


def list_tasks(db: Session, owner_id: str, query: Optional[TaskQuery] = None) -> List[Task]:
    query = query or TaskQuery()
    statement = select(Task).where(*build_task_filter(owner_id, query)).order_by(*_order_by(query))
    return list(db.exec(statement).all())


def get_task(db: Session, owner_id: str, task_id: str) -> Task:
    task = db.exec(select(Task).where(Task.id == task_id, Task.owner_id == owner_id)).first()
    if task is None:
        raise NotFoundError("Task not found")
    return task


def create_task(db: Session, owner_id: str, data: TaskCreate) -> Task:
    task = Task(
        owner_id=owner_id,
        title=data.title,
        description=data.description,
        status=data.status.value,
        priority=data.priority.value,
        due_date=data.due_date,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Created task %s for user %s", task.id, owner_id)
    return task


def _merge_and_validate(task: Task, changes: Dict[str, Any]) -> TaskCreate:
    current = {
        "title": task.title,
        "description": task.description,
        "status": task.status,
        "priority": task.priority,
        "due_date": task.due_date,
    }
    current.update(changes)
    try:
        return TaskCreate.model_validate(current)
    except ValidationError as exc:
        raise ValidationFailed.from_pydantic(exc, "Invalid task") from exc


def update_task(db: Session, owner_id: str, task_id: str, changes: TaskUpdate) -> Task:
    task = get_task(db, owner_id, task_id)
    merged = _merge_and_validate(task, changes.model_dump(exclude_unset=True))

    task.title = merged.title
    task.description = merged.description
    task.status = merged.status.value
    task.priority = merged.priority.value
    task.due_date = merged.due_date
    task.updated_at = datetime.utcnow()

    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Updated task %s for user %s", task.id, owner_id)
    return task


def set_task_status(db: Session, owner_id: str, task_id: str, status: TaskStatus) -> Task:
    """Move a task to ``status``; any status may follow any other."""
    return update_task(db, owner_id, task_id, TaskUpdate(status=status))


def delete_task(db: Session, owner_id: str, task_id: str) -> None:
    task = get_task(db, owner_id, task_id)
    db.delete(task)
    db.commit()
    logger.info("Deleted task %s for user %s", task_id, owner_id)


def summarize_tasks(db: Session, owner_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Counts of the caller's tasks by status and priority, plus overdue ones."""
    now = now or datetime.utcnow()
    owned = col(Task.owner_id) == owner_id

    by_status = {status: 0 for status in TaskStatus}
    for value, count in db.exec(
        select(Task.status, func.count()).where(owned).group_by(Task.status)
    ).all():
        by_status[TaskStatus(value)] = count

    by_priority = {priority: 0 for priority in TaskPriority}
    for value, count in db.exec(
        select(Task.priority, func.count()).where(owned).group_by(Task.priority)
    ).all():
        by_priority[TaskPriority(value)] = count

    overdue = db.exec(
        select(func.count()).select_from(Task).where(
            owned,
            col(Task.due_date).is_not(None),
            col(Task.due_date) < now,
            col(Task.status) != TaskStatus.COMPLETED.value,
        )
    ).one()

    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_priority": by_priority,
        "overdue": overdue,
    }
