"""
Task API: owner-scoped CRUD, filtering, status derivation and ordering.
"""

import uuid

from fastapi.testclient import TestClient

from .helpers import auth, create_task, register


def test_create_and_list_round_trip(client: TestClient, alice_token: str):
    created = create_task(
        client,
        alice_token,
        title="Buy milk",
        priority="high",
        category="Personal",
        dueDate="2030-01-15T00:00:00Z",
        tags=["shopping"],
        subtasks=[{"title": "Check fridge"}],
    )

    assert created["title"] == "Buy milk"
    assert created["status"] == "todo"
    assert created["completed"] is False
    assert created["completedAt"] is None
    assert created["version"] == 1
    assert created["tags"] == ["shopping"]
    assert created["subtasks"] == [{"title": "Check fridge", "completed": False}]
    assert created["dueDate"].startswith("2030-01-15T00:00:00")
    assert created["createdAt"]

    listed = client.get("/api/tasks", headers=auth(alice_token)).json()["tasks"]
    assert listed == [created]


def test_create_defaults(client: TestClient, alice_token: str):
    task = create_task(client, alice_token, title="Plain")
    assert task["priority"] == "medium"
    assert task["description"] is None
    assert task["category"] is None
    assert task["tags"] == []
    assert task["subtasks"] == []


def test_create_requires_title(client: TestClient, alice_token: str):
    for body in ({}, {"title": ""}, {"title": "   "}, {"description": "no title"}):
        response = client.post("/api/tasks", json=body, headers=auth(alice_token))
        assert response.status_code == 400
        assert response.json() == {"error": "Title is required"}

    tasks = client.get("/api/tasks", headers=auth(alice_token)).json()["tasks"]
    assert tasks == []


def test_create_ignores_client_supplied_owner(
    client: TestClient, alice_token: str, bob_token: str
):
    bob_id = client.get("/api/auth/me", headers=auth(bob_token)).json()["user"]["id"]
    alice_id = client.get("/api/auth/me", headers=auth(alice_token)).json()["user"]["id"]

    task = create_task(client, alice_token, title="Mine", userId=bob_id, version=99)

    assert task["userId"] == alice_id
    assert task["version"] == 1
    assert client.get("/api/tasks", headers=auth(bob_token)).json()["tasks"] == []


def test_tasks_are_isolated_between_owners(
    client: TestClient, alice_token: str, bob_token: str
):
    alice_task = create_task(client, alice_token, title="Alice only")
    create_task(client, bob_token, title="Bob only")

    bob_tasks = client.get("/api/tasks", headers=auth(bob_token)).json()["tasks"]
    assert [t["title"] for t in bob_tasks] == ["Bob only"]

    # Another owner's task looks exactly like a missing one
    response = client.put(
        f"/api/tasks/{alice_task['id']}",
        json={"title": "Hijacked"},
        headers=auth(bob_token),
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Task not found"}

    response = client.delete(f"/api/tasks/{alice_task['id']}", headers=auth(bob_token))
    assert response.status_code == 200

    alice_tasks = client.get("/api/tasks", headers=auth(alice_token)).json()["tasks"]
    assert [t["title"] for t in alice_tasks] == ["Alice only"]


def test_list_is_newest_first(client: TestClient, alice_token: str):
    for title in ("first", "second", "third"):
        create_task(client, alice_token, title=title)

    tasks = client.get("/api/tasks", headers=auth(alice_token)).json()["tasks"]
    assert [t["title"] for t in tasks] == ["third", "second", "first"]


def test_filters_compose(client: TestClient, alice_token: str):
    create_task(client, alice_token, title="Write report", priority="high", category="Work")
    create_task(client, alice_token, title="Read report", priority="low", category="Work")
    create_task(client, alice_token, title="Gym", priority="high", category="Health")
    done = create_task(client, alice_token, title="Old report", priority="high", category="Work")
    client.put(
        f"/api/tasks/{done['id']}", json={"status": "completed"}, headers=auth(alice_token)
    )

    def titles(**params):
        response = client.get("/api/tasks", params=params, headers=auth(alice_token))
        assert response.status_code == 200
        return sorted(t["title"] for t in response.json()["tasks"])

    assert titles(priority="high") == ["Gym", "Old report", "Write report"]
    assert titles(category="Work") == ["Old report", "Read report", "Write report"]
    assert titles(status="completed") == ["Old report"]
    assert titles(priority="high", category="Work", status="todo") == ["Write report"]
    assert titles(search="REPORT", priority="low") == ["Read report"]
    assert titles(priority="nonexistent") == []


def test_search_is_case_insensitive_substring(client: TestClient, alice_token: str):
    create_task(client, alice_token, title="Buy Milk")
    create_task(client, alice_token, title="Almond milkshake")
    create_task(client, alice_token, title="Bread")

    response = client.get(
        "/api/tasks", params={"search": "milk"}, headers=auth(alice_token)
    )
    assert sorted(t["title"] for t in response.json()["tasks"]) == [
        "Almond milkshake",
        "Buy Milk",
    ]


def test_search_treats_wildcards_literally(client: TestClient, alice_token: str):
    create_task(client, alice_token, title="100% done")
    create_task(client, alice_token, title="1000 things")

    response = client.get("/api/tasks", params={"search": "0%"}, headers=auth(alice_token))
    assert [t["title"] for t in response.json()["tasks"]] == ["100% done"]


def test_partial_update_keeps_other_fields(client: TestClient, alice_token: str):
    task = create_task(
        client, alice_token, title="Draft", description="keep me", tags=["a", "b"]
    )

    response = client.put(
        f"/api/tasks/{task['id']}",
        json={"priority": "urgent"},
        headers=auth(alice_token),
    )
    assert response.status_code == 200
    updated = response.json()["task"]
    assert updated["priority"] == "urgent"
    assert updated["title"] == "Draft"
    assert updated["description"] == "keep me"
    assert updated["tags"] == ["a", "b"]
    assert updated["version"] == task["version"] + 1
    assert updated["createdAt"] == task["createdAt"]


def test_update_rejects_blank_title(client: TestClient, alice_token: str):
    task = create_task(client, alice_token, title="Keep")
    response = client.put(
        f"/api/tasks/{task['id']}", json={"title": "  "}, headers=auth(alice_token)
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Title is required"}


def test_update_unknown_or_malformed_id(client: TestClient, alice_token: str):
    for task_id in (str(uuid.uuid4()), "not-an-id"):
        response = client.put(
            f"/api/tasks/{task_id}", json={"title": "x"}, headers=auth(alice_token)
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}


def test_status_drives_completion_fields(client: TestClient, alice_token: str):
    task = create_task(client, alice_token, title="Ship it")

    def put(body):
        response = client.put(
            f"/api/tasks/{task['id']}", json=body, headers=auth(alice_token)
        )
        assert response.status_code == 200
        return response.json()["task"]

    in_progress = put({"status": "in-progress"})
    assert in_progress["completed"] is False
    assert in_progress["completedAt"] is None

    done = put({"status": "completed"})
    assert done["completed"] is True
    assert done["completedAt"] is not None

    # Re-sending completed keeps the original completion time
    again = put({"status": "completed", "description": "notes"})
    assert again["completedAt"] == done["completedAt"]

    reopened = put({"status": "todo"})
    assert reopened["completed"] is False
    assert reopened["completedAt"] is None
    assert reopened["version"] == 5


def test_completed_flag_maps_onto_status(client: TestClient, alice_token: str):
    task = create_task(client, alice_token, title="Toggle me")

    def put(body):
        return client.put(
            f"/api/tasks/{task['id']}", json=body, headers=auth(alice_token)
        ).json()["task"]

    done = put({"completed": True})
    assert done["status"] == "completed"
    assert done["completedAt"] is not None

    undone = put({"completed": False})
    assert undone["status"] == "todo"
    assert undone["completedAt"] is None

    # An explicit status wins over a contradictory flag
    started = put({"status": "in-progress", "completed": True})
    assert started["status"] == "in-progress"
    assert started["completed"] is False


def test_create_completed_task(client: TestClient, alice_token: str):
    task = create_task(client, alice_token, title="Already done", status="completed")
    assert task["completed"] is True
    assert task["completedAt"] is not None


def test_delete_is_idempotent(client: TestClient, alice_token: str):
    task = create_task(client, alice_token, title="Disposable")

    for _ in range(2):
        response = client.delete(f"/api/tasks/{task['id']}", headers=auth(alice_token))
        assert response.status_code == 200
        assert response.json() == {"message": "Task deleted"}

    response = client.delete("/api/tasks/not-an-id", headers=auth(alice_token))
    assert response.status_code == 200

    assert client.get("/api/tasks", headers=auth(alice_token)).json()["tasks"] == []


def test_buy_milk_walkthrough(client: TestClient):
    alice_token = register(client, "Alice", "alice@x.com", "pw123")
    task = create_task(client, alice_token, title="Buy milk", priority="low")

    tasks = client.get("/api/tasks", headers=auth(alice_token)).json()["tasks"]
    assert len(tasks) == 1
    assert tasks[0]["title"] == "Buy milk"

    analytics = client.get("/api/analytics", headers=auth(alice_token)).json()["analytics"]
    assert analytics["total"] == 1
    assert analytics["completed"] == 0
    assert analytics["pending"] == 1
    assert analytics["byPriority"] == {"low": 1, "urgent": 0, "high": 0, "medium": 0}

    client.put(
        f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=auth(alice_token)
    )
    analytics = client.get("/api/analytics", headers=auth(alice_token)).json()["analytics"]
    assert analytics["completed"] == 1
    assert analytics["pending"] == 0
    assert analytics["completionRate"] == 100

    client.delete(f"/api/tasks/{task['id']}", headers=auth(alice_token))
    analytics = client.get("/api/analytics", headers=auth(alice_token)).json()["analytics"]
    assert analytics["total"] == 0
    assert analytics["completionRate"] == 0


def test_create_rejects_values_longer_than_their_columns(
    client: TestClient, alice_token: str
):
    assert create_task(client, alice_token, title="t" * 500)["title"] == "t" * 500

    for body in (
        {"title": "t" * 501},
        {"title": "ok", "priority": "p" * 31},
        {"title": "ok", "status": "s" * 31},
        {"title": "ok", "category": "c" * 101},
    ):
        response = client.post("/api/tasks", json=body, headers=auth(alice_token))
        assert response.status_code == 400, body
        assert "error" in response.json()

    tasks = client.get("/api/tasks", headers=auth(alice_token)).json()["tasks"]
    assert len(tasks) == 1


def test_update_rejects_values_longer_than_their_columns(
    client: TestClient, alice_token: str
):
    task = create_task(client, alice_token, title="Bounded")

    for body in (
        {"title": "t" * 501},
        {"priority": "p" * 31},
        {"status": "s" * 31},
        {"category": "c" * 101},
    ):
        response = client.put(
            f"/api/tasks/{task['id']}", json=body, headers=auth(alice_token)
        )
        assert response.status_code == 400, body
        assert "error" in response.json()

    tasks = client.get("/api/tasks", headers=auth(alice_token)).json()["tasks"]
    assert tasks[0]["version"] == 1
