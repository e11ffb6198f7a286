"""Reset the database to a demo user with a handful of sample tasks."""
from datetime import datetime

from sqlalchemy import delete

from taskflow.database import get_session, create_tables
from taskflow.models import Task, TaskPriority, TaskStatus, User
from taskflow.routers.auth import get_password_hash

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo123"

SAMPLE_TASKS = [
    ("Complete assignment", "Finish the task manager project", TaskStatus.IN_PROGRESS, TaskPriority.HIGH, datetime(2024, 12, 15)),
    ("Buy groceries", "Milk, eggs, bread, fruits", TaskStatus.PENDING, TaskPriority.MEDIUM, datetime(2024, 12, 10)),
    ("Schedule meeting", "Team sync for Q4 planning", TaskStatus.COMPLETED, TaskPriority.LOW, datetime(2024, 12, 5)),
    ("Update documentation", "Add new API endpoints to docs", TaskStatus.PENDING, TaskPriority.MEDIUM, datetime(2024, 12, 20)),
    ("Fix login bug", "Investigate authentication issue", TaskStatus.IN_PROGRESS, TaskPriority.HIGH, datetime(2024, 12, 12)),
]

# Create tables if not exist
create_tables()

with get_session() as db:
    db.execute(delete(Task))
    db.execute(delete(User))

    user = User(email=DEMO_EMAIL, name="Demo User", hashed_password=get_password_hash(DEMO_PASSWORD))
    db.add(user)
    db.flush()

    for title, description, status, priority, due_date in SAMPLE_TASKS:
        db.add(Task(
            owner_id=user.id,
            title=title,
            description=description,
            status=status.value,
            priority=priority.value,
            due_date=due_date,
        ))
    db.commit()

print(f"Seeded {len(SAMPLE_TASKS)} tasks for {DEMO_EMAIL} / {DEMO_PASSWORD}")
