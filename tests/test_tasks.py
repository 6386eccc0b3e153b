"""Tests for the task service and /tasks endpoints.

Tests cover:
- Title/description validation boundaries
- Create/get/list round trips and ordering
- Partial update semantics
- Delete and its idempotence
- Malformed ids and store failures
"""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from app.models.task import Task, TaskCreate, TaskUpdate
from app.models.user import User
from app.services.tasks import (
    InvalidTaskIdError,
    TaskNotFoundError,
    create_task,
    delete_task,
    get_task_by_id,
    get_user_tasks,
    parse_task_id,
    update_task,
)


# ============================================================================
# Service layer
# ============================================================================

class TestTaskService:
    """Tests for app.services.tasks."""

    def test_create_and_get(self, db_session: Session, test_user: User):
        """A created task is owned by the creator and defaults to not completed."""
        task = create_task(db_session, test_user.id, TaskCreate(title="Buy milk", description="2%"))

        fetched = get_task_by_id(db_session, test_user.id, str(task.id))

        assert fetched.user_id == test_user.id
        assert fetched.title == "Buy milk"
        assert fetched.description == "2%"
        assert fetched.completed is False

    def test_list_newest_first(self, db_session: Session, test_user: User):
        """Tasks are listed by creation time, newest first."""
        base = datetime(2026, 1, 1, 12, 0, 0)
        for offset, title in enumerate(["first", "second", "third"]):
            db_session.add(Task(user_id=test_user.id, title=title, created_at=base + timedelta(minutes=offset)))
        db_session.commit()

        titles = [t.title for t in get_user_tasks(db_session, test_user.id)]

        assert titles == ["third", "second", "first"]

    def test_list_completed_filter(self, db_session: Session, test_user: User):
        """The completed filter narrows the user's own tasks."""
        db_session.add_all([
            Task(user_id=test_user.id, title="done", completed=True),
            Task(user_id=test_user.id, title="open"),
        ])
        db_session.commit()

        assert [t.title for t in get_user_tasks(db_session, test_user.id, completed=True)] == ["done"]
        assert [t.title for t in get_user_tasks(db_session, test_user.id, completed=False)] == ["open"]

    def test_parse_task_id(self):
        """Only UUID strings are accepted as task ids."""
        task_id = uuid4()
        assert parse_task_id(str(task_id)) == task_id
        with pytest.raises(InvalidTaskIdError):
            parse_task_id("123")

    def test_update_only_applies_sent_fields(self, db_session: Session, test_user: User):
        """Omitted fields are left untouched."""
        task = create_task(db_session, test_user.id, TaskCreate(title="Buy milk", description="2%"))

        updated = update_task(db_session, test_user.id, str(task.id), TaskUpdate(completed=True))

        assert updated.completed is True
        assert updated.title == "Buy milk"
        assert updated.description == "2%"
        assert updated.updated_at >= updated.created_at

    def test_delete_returns_snapshot(self, db_session: Session, test_user: User):
        """delete_task returns the task as it was and removes it."""
        task = create_task(db_session, test_user.id, TaskCreate(title="Gone"))
        task_id = str(task.id)

        deleted = delete_task(db_session, test_user.id, task_id)

        assert deleted.title == "Gone"
        with pytest.raises(TaskNotFoundError):
            get_task_by_id(db_session, test_user.id, task_id)


class TestTaskSchemas:
    """Tests for request schema validation."""

    def test_title_is_trimmed(self):
        """Leading and trailing whitespace is removed."""
        assert TaskCreate(title="  Buy milk  ").title == "Buy milk"

    def test_description_defaults_to_empty(self):
        """A missing or null description becomes an empty string."""
        assert TaskCreate(title="A").description == ""
        assert TaskCreate(title="A", description=None).description == ""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            (0, False),
            (1, True),
            ("false", False),
            ("true", True),
            (None, False),
            ("done", True),
            (" FALSE ", False),
        ],
    )
    def test_completed_coercion(self, value, expected):
        """completed is coerced to a boolean."""
        assert TaskUpdate(completed=value).completed is expected

    def test_update_tracks_sent_fields(self):
        """Only keys present in the input are reported as set."""
        assert TaskUpdate(title="New").model_dump(exclude_unset=True) == {"title": "New"}

    def test_update_rejects_present_null_title(self):
        """A title key sent as null fails validation; an omitted one does not."""
        with pytest.raises(ValidationError):
            TaskUpdate(title=None)
        assert TaskUpdate(completed=True).model_dump(exclude_unset=True) == {"completed": True}


# ============================================================================
# HTTP layer
# ============================================================================

class TestTaskEndpoints:
    """Tests for /tasks routes."""

    def test_round_trip(self, client, auth_headers):
        """Creating then fetching returns the same fields plus server-assigned ones."""
        created = client.post(
            "/tasks", json={"title": "Buy milk", "description": "2%"}, headers=auth_headers
        )
        assert created.status_code == 201
        task_id = created.json()["id"]

        fetched = client.get(f"/tasks/{task_id}", headers=auth_headers)

        assert fetched.status_code == 200
        body = fetched.json()
        assert {k: body[k] for k in ("title", "description", "completed")} == {
            "title": "Buy milk",
            "description": "2%",
            "completed": False,
        }
        assert set(body) == {"id", "title", "description", "completed", "createdAt", "updatedAt"}

    def test_title_boundaries(self, client, auth_headers):
        """40 characters is accepted, 41 is rejected."""
        ok = client.post("/tasks", json={"title": "x" * 40}, headers=auth_headers)
        too_long = client.post("/tasks", json={"title": "x" * 41}, headers=auth_headers)

        assert ok.status_code == 201
        assert too_long.status_code == 400
        assert too_long.json()["detail"].startswith("title")

    @pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}, {"title": None}, {"title": 5}])
    def test_title_required(self, client, auth_headers, payload):
        """Missing, empty, whitespace-only and non-string titles are rejected."""
        response = client.post("/tasks", json=payload, headers=auth_headers)
        assert response.status_code == 400

    def test_description_boundaries(self, client, auth_headers):
        """500 characters is accepted, 501 is rejected."""
        ok = client.post("/tasks", json={"title": "A", "description": "d" * 500}, headers=auth_headers)
        too_long = client.post("/tasks", json={"title": "A", "description": "d" * 501}, headers=auth_headers)

        assert ok.status_code == 201
        assert too_long.status_code == 400

    def test_rejected_create_writes_nothing(self, client, auth_headers):
        """A failed validation leaves the list empty."""
        client.post("/tasks", json={"title": "x" * 41}, headers=auth_headers)

        assert client.get("/tasks", headers=auth_headers).json() == []

    def test_list_with_filter(self, client, auth_headers):
        """GET /tasks?completed= filters the caller's tasks."""
        first = client.post("/tasks", json={"title": "A"}, headers=auth_headers).json()
        client.post("/tasks", json={"title": "B"}, headers=auth_headers)
        client.put(f"/tasks/{first['id']}", json={"completed": True}, headers=auth_headers)

        done = client.get("/tasks", params={"completed": "true"}, headers=auth_headers).json()

        assert [t["title"] for t in done] == ["A"]
        assert len(client.get("/tasks", headers=auth_headers).json()) == 2

    def test_partial_update(self, client, auth_headers):
        """PUT only changes the fields it carries."""
        task = client.post(
            "/tasks", json={"title": "Buy milk", "description": "2%"}, headers=auth_headers
        ).json()

        response = client.put(f"/tasks/{task['id']}", json={"title": " Buy oat milk "}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Buy oat milk"
        assert body["description"] == "2%"
        assert body["completed"] is False

    def test_update_null_title_is_rejected(self, client, auth_headers):
        """An explicit null title is a 400 and nothing is written."""
        task = client.post("/tasks", json={"title": "Keep"}, headers=auth_headers).json()

        response = client.put(
            f"/tasks/{task['id']}", json={"title": None, "completed": True}, headers=auth_headers
        )

        assert response.status_code == 400
        assert "Title cannot be empty" in response.json()["detail"]
        unchanged = client.get(f"/tasks/{task['id']}", headers=auth_headers).json()
        assert unchanged["title"] == "Keep"
        assert unchanged["completed"] is False

    @pytest.mark.parametrize("sent,expected", [(None, False), ("done", True), ("", False), (0, False), ([], False)])
    def test_update_coerces_completed(self, client, auth_headers, sent, expected):
        """A present completed value is always applied, coerced to a boolean."""
        task = client.post("/tasks", json={"title": "Keep"}, headers=auth_headers).json()
        client.put(f"/tasks/{task['id']}", json={"completed": not expected}, headers=auth_headers)

        response = client.put(f"/tasks/{task['id']}", json={"completed": sent}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["completed"] is expected
        assert response.json()["title"] == "Keep"

    def test_update_null_description_clears_it(self, client, auth_headers):
        """A null description is stored as an empty string."""
        task = client.post("/tasks", json={"title": "Keep", "description": "old"}, headers=auth_headers).json()

        response = client.put(f"/tasks/{task['id']}", json={"description": None}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["description"] == ""

    def test_update_rejects_empty_title(self, client, auth_headers):
        """Blank titles are rejected on update as well."""
        task = client.post("/tasks", json={"title": "Keep"}, headers=auth_headers).json()

        response = client.put(f"/tasks/{task['id']}", json={"title": "  "}, headers=auth_headers)

        assert response.status_code == 400
        assert client.get(f"/tasks/{task['id']}", headers=auth_headers).json()["title"] == "Keep"

    def test_delete_then_delete_again(self, client, auth_headers):
        """Deleting succeeds once and returns 404 on every later call."""
        task = client.post("/tasks", json={"title": "Gone"}, headers=auth_headers).json()

        first = client.delete(f"/tasks/{task['id']}", headers=auth_headers)
        second = client.delete(f"/tasks/{task['id']}", headers=auth_headers)
        third = client.delete(f"/tasks/{task['id']}", headers=auth_headers)

        assert first.status_code == 200
        assert first.json()["message"] == "Task deleted successfully"
        assert first.json()["deletedTask"]["id"] == task["id"]
        assert second.status_code == third.status_code == 404
        assert second.json() == {"detail": "Task not found"}

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_invalid_id(self, client, auth_headers, method):
        """Malformed ids are a 400, distinct from not found."""
        kwargs = {"json": {"title": "A"}} if method == "put" else {}
        response = client.request(method.upper(), "/tasks/not-an-id", headers=auth_headers, **kwargs)

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid task ID"}

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_unknown_id(self, client, auth_headers, method):
        """A well-formed id with no task is a 404."""
        kwargs = {"json": {"title": "A"}} if method == "put" else {}
        response = client.request(method.upper(), f"/tasks/{uuid4()}", headers=auth_headers, **kwargs)

        assert response.status_code == 404

    def test_store_failure_is_generic_500(self, client, auth_headers, monkeypatch):
        """Store errors become a 500 without internal detail."""

        def broken(*args, **kwargs):
            raise OperationalError("SELECT * FROM tasks", {}, Exception("disk on fire"))

        monkeypatch.setattr("app.api.tasks.get_user_tasks", broken)

        response = client.get("/tasks", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}

    def test_health(self, client):
        """Health endpoint needs no auth."""
        assert client.get("/health").json() == {"status": "healthy"}
