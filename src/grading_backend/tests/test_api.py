"""
HTTP boundary tests: token extraction, error mapping and collaborator routes.
"""

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from grading_backend.api.auth import get_session_manager
from grading_backend.api.exceptions import ERROR_KIND_TO_EXCEPTION, to_http_exception
from grading_backend.database import get_db
from grading_backend.errors import (
    ErrorKind,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    SessionExpiredError,
    SessionNotFoundError,
    SessionUserNotFoundError,
    StorageError,
)
from grading_backend.model.auth import Session as SessionModel
from grading_backend.model.types import UserRole
from grading_backend.server import app


@pytest.fixture
def client(db, manager):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(db, manager):
    def factory(user) -> dict:
        token = manager.create(db, user.id).token
        db.commit()
        return {"Session": token}

    return factory


class TestErrorMapping:
    @pytest.mark.parametrize("error, status_code", [
        (SessionNotFoundError(), 401),
        (SessionExpiredError(), 401),
        (SessionUserNotFoundError(), 401),
        (ForbiddenError(), 403),
        (NotFoundError(), 404),
        (InvalidRequestError(), 400),
        (StorageError(), 500),
    ])
    def test_status_codes(self, error, status_code):
        exception = to_http_exception(error)

        assert exception.status_code == status_code
        assert exception.detail == {"code": error.code, "message": error.message}

    def test_mapping_is_exhaustive(self):
        assert set(ERROR_KIND_TO_EXCEPTION) == set(ErrorKind)


class TestSessionRoutes:
    def test_missing_token(self, client):
        response = client.get("/auth/session")

        assert response.status_code == 401
        assert response.json() == {"code": "ERR_SESSION_NOT_FOUND", "message": "Session not found"}

    def test_session_header(self, client, make_user, login):
        user = make_user(role=UserRole.TEACHER)
        response = client.get("/auth/session", headers=login(user))

        assert response.status_code == 200
        body = response.json()
        assert body["principal"]["user_id"] == user.id
        assert body["principal"]["role"] == "teacher"
        assert body["session"]["valid"] is True

    def test_bearer_token(self, client, make_user, login):
        user = make_user()
        token = login(user)["Session"]

        response = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["principal"]["user_id"] == user.id

    def test_unknown_token(self, client):
        response = client.get("/auth/session", headers={"Session": "never-issued"})
        assert response.json()["code"] == "ERR_SESSION_NOT_FOUND"

    def test_expired_session(self, client, db, clock, make_user, login):
        headers = login(make_user())
        clock.advance(hours=24)

        response = client.get("/auth/session", headers=headers)

        assert response.status_code == 401
        assert response.json()["code"] == "ERR_SESSION_EXPIRED"
        stored = db.query(SessionModel).filter(SessionModel.token == headers["Session"]).populate_existing().one()
        assert stored.valid is False

    def test_deleted_user(self, client, db, make_user, login):
        user = make_user()
        headers = login(user)
        db.delete(user)
        db.commit()

        response = client.get("/auth/session", headers=headers)

        assert response.status_code == 401
        assert response.json()["code"] == "ERR_SESSION_USER_NOT_FOUND"

    def test_logout(self, client, make_user, login):
        headers = login(make_user())

        assert client.post("/auth/logout", headers=headers).status_code == 204
        assert client.post("/auth/logout", headers=headers).status_code == 204

        response = client.get("/auth/session", headers=headers)
        assert response.status_code == 401
        assert response.json()["code"] == "ERR_SESSION_NOT_FOUND"

    def test_logout_unknown_token(self, client):
        response = client.post("/auth/logout", headers={"Session": "never-issued"})
        assert response.status_code == 401

    def test_storage_failure(self, manager):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))

        def override_get_db():
            yield db

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_session_manager] = lambda: manager
        try:
            response = TestClient(app).get("/auth/session", headers={"Session": "token"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["code"] == "ERR_DATABASE_CONNECTION"


class TestCollaboratorRoutes:
    def test_crud(self, client, make_user, make_task, login):
        owner, user = make_user(role=UserRole.TEACHER), make_user()
        task = make_task(owner.id)
        headers = login(owner)
        path = f"/tasks/{task.id}/collaborators"

        response = client.get(path, headers=headers)
        assert response.status_code == 200
        assert [c["user_id"] for c in response.json()] == [owner.id]

        response = client.post(path, json={"user_id": user.id, "permission": "view"}, headers=headers)
        assert response.status_code == 201
        assert response.json()["permission"] == "view"

        response = client.put(f"{path}/{user.id}", json={"permission": "edit"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["permission"] == "edit"

        response = client.get(path, headers=headers)
        assert [(c["user_id"], c["permission"]) for c in response.json()] == [(owner.id, "manage"), (user.id, "edit")]

        assert client.delete(f"{path}/{user.id}", headers=headers).status_code == 204
        assert len(client.get(path, headers=headers).json()) == 1

    def test_creator_cannot_be_removed(self, client, make_user, make_task, login):
        owner, admin = make_user(role=UserRole.TEACHER), make_user(role=UserRole.ADMIN)
        task = make_task(owner.id)

        response = client.delete(f"/tasks/{task.id}/collaborators/{owner.id}", headers=login(admin))

        assert response.status_code == 403
        assert response.json()["code"] == "ERR_FORBIDDEN"

    def test_missing_task(self, client, make_user, login):
        response = client.get("/tasks/404/collaborators", headers=login(make_user(role=UserRole.ADMIN)))

        assert response.status_code == 404
        assert response.json()["code"] == "ERR_NOT_FOUND"

    def test_requires_session(self, client, make_user, make_task):
        task = make_task(make_user(role=UserRole.TEACHER).id)
        assert client.get(f"/tasks/{task.id}/collaborators").status_code == 401

    def test_group_routes(self, client, make_user, make_group, login):
        owner, user, outsider = make_user(role=UserRole.TEACHER), make_user(role=UserRole.TEACHER), make_user()
        group = make_group(owner.id)
        path = f"/groups/{group.id}/collaborators"

        response = client.post(path, json={"user_id": user.id, "permission": "manage"}, headers=login(owner))
        assert response.status_code == 201

        assert client.get(path, headers=login(user)).status_code == 200
        assert client.get(path, headers=login(outsider)).status_code == 403
