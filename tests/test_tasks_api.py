"""HTTP tests for the /api/v1/tasks endpoints."""

from fastapi.testclient import TestClient

from taskflow.main import app
from taskflow.services import tasks as task_service

TASKS_URL = "/api/v1/tasks"


def create(client, user, **body):
    body.setdefault("title", "Untitled")
    response = client.post(TASKS_URL, json=body, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()


def test_requires_authentication(client):
    response = client.get(TASKS_URL)

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unauthorized"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_rejects_garbage_token(client):
    response = client.get(TASKS_URL, headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid token"


def test_create_applies_defaults_and_camel_case(client, alice):
    task = create(client, alice, title="Plan sprint", dueDate="2024-12-15T00:00:00")

    assert task["title"] == "Plan sprint"
    assert task["status"] == "pending"
    assert task["priority"] == "medium"
    assert task["dueDate"] == "2024-12-15T00:00:00"
    assert task["owner"] == alice["id"]
    assert {"id", "createdAt", "updatedAt"} <= set(task)


def test_create_ignores_client_supplied_owner(client, alice, bob):
    task = create(client, alice, title="Mine", owner=bob["id"], ownerId=bob["id"])

    assert task["owner"] == alice["id"]
    assert client.get(f"{TASKS_URL}/{task['id']}", headers=bob["headers"]).status_code == 404


def test_create_rejects_blank_title_without_persisting(client, alice):
    response = client.post(TASKS_URL, json={"title": "   "}, headers=alice["headers"])

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"
    assert client.get(TASKS_URL, headers=alice["headers"]).json() == []


def test_create_rejects_overlong_title(client, alice):
    response = client.post(TASKS_URL, json={"title": "x" * 256}, headers=alice["headers"])

    assert response.status_code == 422


def test_create_accepts_title_at_length_limit(client, alice):
    task = create(client, alice, title="x" * 255)

    assert len(task["title"]) == 255


def test_create_rejects_unknown_status(client, alice):
    response = client.post(TASKS_URL, json={"title": "Odd", "status": "blocked"}, headers=alice["headers"])

    assert response.status_code == 422


def test_round_trip_create_then_fetch(client, alice):
    created = create(
        client,
        alice,
        title="Write report",
        description="  Quarterly numbers  ",
        status="in-progress",
        priority="high",
        dueDate="2024-12-20T10:30:00",
    )

    fetched = client.get(f"{TASKS_URL}/{created['id']}", headers=alice["headers"]).json()

    assert fetched == created
    assert fetched["description"] == "Quarterly numbers"


def test_list_filters_search_and_status(client, alice):
    create(client, alice, title="Update documentation", status="pending")
    create(client, alice, title="Buy groceries", description="Milk, eggs")
    create(client, alice, title="Ship release", status="completed")
    create(client, alice, title="Fix login bug", status="in-progress")

    found = client.get(TASKS_URL, params={"search": "doc"}, headers=alice["headers"]).json()
    assert [task["title"] for task in found] == ["Update documentation"]

    done = client.get(TASKS_URL, params={"status": "completed"}, headers=alice["headers"]).json()
    assert [task["title"] for task in done] == ["Ship release"]


def test_list_sorts_by_due_date(client, alice):
    create(client, alice, title="Undated")
    create(client, alice, title="Later", dueDate="2024-12-20T00:00:00")
    create(client, alice, title="Sooner", dueDate="2024-12-05T00:00:00")

    response = client.get(TASKS_URL, params={"sort": "dueDate", "order": "asc"}, headers=alice["headers"])

    assert [task["title"] for task in response.json()] == ["Sooner", "Later", "Undated"]


def test_list_treats_empty_filters_as_absent(client, alice):
    create(client, alice, title="Open", status="pending", priority="low")
    create(client, alice, title="Closed", status="completed", priority="high")

    response = client.get(TASKS_URL, params={"status": "", "priority": ""}, headers=alice["headers"])

    assert response.status_code == 200
    assert sorted(task["title"] for task in response.json()) == ["Closed", "Open"]


def test_list_rejects_unknown_status(client, alice):
    response = client.get(TASKS_URL, params={"status": "blocked"}, headers=alice["headers"])

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "validation_error"
    assert [detail["field"] for detail in error["details"]] == ["query.status"]


def test_list_rejects_unknown_sort_field(client, alice):
    response = client.get(TASKS_URL, params={"sort": "hashed_password"}, headers=alice["headers"])

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


def test_list_rejects_unknown_order_and_priority(client, alice):
    assert client.get(TASKS_URL, params={"order": "sideways"}, headers=alice["headers"]).status_code == 422
    assert client.get(TASKS_URL, params={"priority": "urgent"}, headers=alice["headers"]).status_code == 422


def test_list_never_shows_other_users_tasks(client, alice, bob):
    create(client, alice, title="Alice task")
    create(client, bob, title="Bob task")

    response = client.get(TASKS_URL, headers=bob["headers"])

    assert [task["owner"] for task in response.json()] == [bob["id"]]


def test_update_changes_only_supplied_fields(client, alice):
    task = create(client, alice, title="Draft", priority="low")

    response = client.put(f"{TASKS_URL}/{task['id']}", json={"status": "completed"}, headers=alice["headers"])

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["priority"] == "low"
    assert body["title"] == "Draft"


def test_update_with_null_title_is_rejected(client, alice):
    task = create(client, alice, title="Keep")

    response = client.put(f"{TASKS_URL}/{task['id']}", json={"title": None}, headers=alice["headers"])

    assert response.status_code == 422
    assert client.get(f"{TASKS_URL}/{task['id']}", headers=alice["headers"]).json()["title"] == "Keep"


def test_update_by_non_owner_is_not_found(client, alice, bob):
    task = create(client, alice, title="Alice only")

    response = client.put(f"{TASKS_URL}/{task['id']}", json={"title": "Bob was here"}, headers=bob["headers"])

    assert response.status_code == 404
    assert response.json() == {"error": {"code": "not_found", "message": "Task not found"}}
    assert client.get(f"{TASKS_URL}/{task['id']}", headers=alice["headers"]).json()["title"] == "Alice only"


def test_patch_status(client, alice):
    task = create(client, alice, title="Toggle", status="completed")

    response = client.patch(f"{TASKS_URL}/{task['id']}/status", json={"status": "pending"}, headers=alice["headers"])

    assert response.status_code == 200
    assert response.json()["status"] == "pending"


def test_delete_task(client, alice):
    task = create(client, alice, title="Remove me")

    response = client.delete(f"{TASKS_URL}/{task['id']}", headers=alice["headers"])

    assert response.status_code == 200
    assert response.json() == {"message": "Task deleted successfully"}
    assert client.get(f"{TASKS_URL}/{task['id']}", headers=alice["headers"]).status_code == 404


def test_delete_nonexistent_is_not_found(client, alice):
    create(client, alice, title="Survivor")

    response = client.delete(f"{TASKS_URL}/missing-id", headers=alice["headers"])

    assert response.status_code == 404
    assert len(client.get(TASKS_URL, headers=alice["headers"]).json()) == 1


def test_stats(client, alice):
    create(client, alice, title="A", status="completed", priority="high")
    create(client, alice, title="B", status="pending", dueDate="2000-01-01T00:00:00")

    response = client.get(f"{TASKS_URL}/stats", headers=alice["headers"])

    assert response.status_code == 200
    assert response.json() == {
        "total": 2,
        "byStatus": {"pending": 1, "in-progress": 0, "completed": 1},
        "byPriority": {"low": 0, "medium": 1, "high": 1},
        "overdue": 1,
    }


def test_unexpected_failure_is_structured(client, alice, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(task_service, "list_tasks", broken)
    quiet_client = TestClient(app, raise_server_exceptions=False)

    response = quiet_client.get(TASKS_URL, headers=alice["headers"])

    assert response.status_code == 500
    assert response.json() == {"error": {"code": "server_error", "message": "Server error"}}


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"


def test_unknown_route_is_structured(client):
    response = client.get("/api/v1/nowhere")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "http_error"
