"""
Pytest configuration and shared fixtures.

Each test gets its own in-memory SQLite database; the app's ``get_db``
dependency is overridden to hand out sessions bound to it.
"""

import os

# Keep the module-level engine off the filesystem during tests.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime, timedelta
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from taskflow.database import build_engine, build_sessionmaker, get_db
from taskflow.main import app
from taskflow.models import Task, User

DEFAULT_PASSWORD = "secret123"


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def signup(client: TestClient, email: str, name: str = "Test User", password: str = DEFAULT_PASSWORD) -> Dict:
    response = client.post(
        "/api/v1/auth/signup",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def alice(client):
    data = signup(client, "alice@tasks.io", name="Alice")
    return {"id": data["user"]["id"], "headers": auth_headers(data["token"])}


@pytest.fixture()
def bob(client):
    data = signup(client, "bob@tasks.io", name="Bob")
    return {"id": data["user"]["id"], "headers": auth_headers(data["token"])}


@pytest.fixture()
def make_user(db):
    """Insert a user row directly (no password hashing round-trip)."""
    def _make(email: str) -> User:
        user = User(email=email, name=email.split("@")[0], hashed_password="x")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture()
def make_task(db):
    """Insert a task row directly with a controllable creation time."""
    base = datetime(2024, 1, 1, 9, 0, 0)
    counter = {"n": 0}

    def _make(owner: User, title: str, description: Optional[str] = None, status: str = "pending",
              priority: str = "medium", due_date: Optional[datetime] = None,
              created_at: Optional[datetime] = None,
              updated_at: Optional[datetime] = None) -> Task:
        counter["n"] += 1
        task = Task(
            owner_id=owner.id,
            title=title,
            description=description,
            status=status,
            priority=priority,
            due_date=due_date,
            created_at=created_at or base + timedelta(minutes=counter["n"]),
            updated_at=updated_at or base + timedelta(minutes=counter["n"]),
        )
        db.add(task)
        db.commit()
        db.refresh(task)
        return task
    return _make
