import uuid
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import taskboard.config as _cfg
from taskboard.models.user import User
from taskboard.utils import auth

PASSWORD = "SecurePass123"


def _register(client: TestClient, prefix="user", password=PASSWORD):
    email = f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"
    r = client.post("/auth/register", json={"email": email, "password": password})
    assert r.status_code == 201
    return email, r.json()["id"]


def _login(client: TestClient, email, password=PASSWORD):
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


class TestE2E:
    def test_complete_user_journey(self, client: TestClient, sender):
        # 1. Registration
        r = client.post("/auth/register", json={"password": PASSWORD})
        assert r.status_code == 422

        email_a, id_a = _register(client, "a")
        assert sender.sent[0][:2] == ("welcome", email_a)

        r = client.post("/auth/register", json={"email": email_a, "password": PASSWORD})
        assert r.status_code == 409

        r = client.post("/auth/register", json={"email": "weak@example.com", "password": "weakpass"})
        assert r.status_code == 400
        assert "uppercase" in r.json()["detail"]

        # 2. Login and token handling
        r = client.post("/auth/login", json={"email": email_a, "password": "WrongPass123"})
        assert r.status_code == 401
        wrong_detail = r.json()["detail"]
        r = client.post("/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
        assert r.status_code == 401
        assert r.json()["detail"] == wrong_detail

        headers_a = _login(client, email_a)
        r = client.get("/auth/me", headers=headers_a)
        assert r.status_code == 200
        assert r.json()["id"] == id_a

        # 3. Workspace, member, project, task
        r = client.post("/workspaces/", json={"name": "Acme"}, headers=headers_a)
        assert r.status_code == 201
        ws_id = r.json()["id"]

        email_b, id_b = _register(client, "b")
        headers_b = _login(client, email_b)
        r = client.post(f"/workspaces/{ws_id}/members", json={"email": email_b}, headers=headers_a)
        assert r.status_code == 201
        assert r.json()["role"] == "MEMBER"
        assert sender.sent[-1][0] == "invite"

        r = client.get(f"/workspaces/{ws_id}/members", headers=headers_b)
        assert {m["user_id"]: m["role"] for m in r.json()} == {id_a: "OWNER", id_b: "MEMBER"}

        r = client.put(f"/workspaces/{ws_id}", json={"name": "Mine"}, headers=headers_b)
        assert r.status_code == 403

        r = client.post(f"/workspaces/{ws_id}/projects/", json={"name": "Roadmap"}, headers=headers_b)
        assert r.status_code == 201
        project_id = r.json()["id"]
        tasks_url = f"/workspaces/{ws_id}/projects/{project_id}/tasks/"

        r = client.post(tasks_url, json={"title": "Spec", "assigned_to": "stranger"}, headers=headers_a)
        assert r.status_code == 400
        assert "not a member" in r.json()["detail"]

        r = client.post(tasks_url, json={"title": "Spec", "due_date": "2030-05-01T00:00:00", "assigned_to": id_b},
                        headers=headers_a)
        assert r.status_code == 201
        task = r.json()
        assert task["status"] == "TODO" and task["priority"] == "MEDIUM"

        r = client.get(tasks_url + task["id"], headers=headers_b)
        assert r.status_code == 200
        assert r.json()["title"] == "Spec"
        assert client.get(tasks_url + "missing", headers=headers_b).status_code == 404

        r = client.put(tasks_url + task["id"], json={"status": "IN_PROGRESS", "assigned_to": None},
                       headers=headers_b)
        assert r.status_code == 200
        assert r.json()["status"] == "IN_PROGRESS"
        assert r.json()["assigned_to"] is None
        assert r.json()["due_date"].startswith("2030-05-01")

        r = client.get(tasks_url, params={"status": "IN_PROGRESS"}, headers=headers_b)
        assert [t["id"] for t in r.json()] == [task["id"]]

        # 4. Comments
        r = client.post(f"/workspaces/tasks/{task['id']}/comments", json={"content": "on it"}, headers=headers_b)
        assert r.status_code == 201
        comment_id = r.json()["id"]
        r = client.put(f"/workspaces/comments/{comment_id}", json={"content": "edited"}, headers=headers_a)
        assert r.status_code == 403
        r = client.get(f"/workspaces/tasks/{task['id']}/comments", headers=headers_a)
        assert [c["content"] for c in r.json()] == ["on it"]

        # 5. Permissions: B cannot delete A's task until promoted
        r = client.delete(tasks_url + task["id"], headers=headers_b)
        assert r.status_code == 403
        r = client.put(f"/workspaces/{ws_id}/members/{id_b}/role", json={"role": "ADMIN"}, headers=headers_a)
        assert r.status_code == 200
        r = client.delete(tasks_url + task["id"], headers=headers_b)
        assert r.status_code == 200

        r = client.delete(f"/workspaces/{ws_id}", headers=headers_b)
        assert r.status_code == 403
        r = client.delete(f"/workspaces/{ws_id}", headers=headers_a)
        assert r.status_code == 200
        r = client.get("/workspaces/", headers=headers_a)
        assert r.json() == []

    def test_remove_member_twice_is_not_found(self, client: TestClient):
        email_a, _ = _register(client, "a")
        email_b, id_b = _register(client, "b")
        headers_a = _login(client, email_a)
        ws_id = client.post("/workspaces/", json={"name": "Acme"}, headers=headers_a).json()["id"]
        client.post(f"/workspaces/{ws_id}/members", json={"email": email_b}, headers=headers_a)

        assert client.delete(f"/workspaces/{ws_id}/members/{id_b}", headers=headers_a).status_code == 200
        r = client.delete(f"/workspaces/{ws_id}/members/{id_b}", headers=headers_a)
        assert r.status_code == 404

    def test_refresh_and_token_errors(self, client: TestClient):
        email, _ = _register(client)
        tokens = client.post("/auth/login", json={"email": email, "password": PASSWORD}).json()

        r = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert r.status_code == 200
        assert client.get("/auth/me", headers={"Authorization": f"Bearer {r.json()['access_token']}"}).status_code == 200

        # a refresh token is not accepted as an access token
        r = client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
        assert r.status_code == 401
        assert client.get("/workspaces/").status_code == 401
        assert client.get("/workspaces/", headers={"Authorization": "Token abc"}).status_code == 401

        expired = auth.sign_token({"userId": "x"}, _cfg.SECRET_KEY, timedelta(seconds=-1), auth.ACCESS)
        r = client.get("/workspaces/", headers={"Authorization": f"Bearer {expired}"})
        assert r.status_code == 401
        assert "expired" in r.json()["detail"].lower()

    def test_password_reset_flow(self, client: TestClient, sender, db: Session):
        email, user_id = _register(client)
        r1 = client.post("/auth/forgot-password", json={"email": email})
        r2 = client.post("/auth/forgot-password", json={"email": "ghost@example.com"})
        assert r1.status_code == r2.status_code == 200
        assert r1.json() == r2.json()

        token = db.get(User, user_id).reset_token
        assert sender.sent[-1] == ("reset", email, token)

        r = client.post("/auth/reset-password", json={"token": token, "new_password": "BrandNew123"})
        assert r.status_code == 200
        r = client.post("/auth/reset-password", json={"token": token, "new_password": "Another123"})
        assert r.status_code == 401
        _login(client, email, "BrandNew123")

    def test_mixed_case_email_can_log_in_and_reset(self, client: TestClient, sender, db: Session):
        email = "Carol.Case@Example.com"
        r = client.post("/auth/register", json={"email": email, "password": PASSWORD})
        assert r.status_code == 201
        assert r.json()["email"] == "carol.case@example.com"

        _login(client, email)
        _login(client, email.upper())

        assert client.post("/auth/forgot-password", json={"email": email}).status_code == 200
        token = db.get(User, r.json()["id"]).reset_token
        assert token is not None
        assert sender.sent[-1] == ("reset", "carol.case@example.com", token)

    def test_change_password(self, client: TestClient):
        email, _ = _register(client)
        headers = _login(client, email)
        r = client.post("/auth/change-password",
                        json={"current_password": PASSWORD, "new_password": PASSWORD}, headers=headers)
        assert r.status_code == 400
        r = client.post("/auth/change-password",
                        json={"current_password": PASSWORD, "new_password": "BrandNew123"}, headers=headers)
        assert r.status_code == 200
        _login(client, email, "BrandNew123")

    def test_strict_comment_membership(self, client: TestClient, monkeypatch):
        email_a, _ = _register(client, "a")
        email_c, _ = _register(client, "c")
        headers_a, headers_c = _login(client, email_a), _login(client, email_c)
        ws_id = client.post("/workspaces/", json={"name": "Acme"}, headers=headers_a).json()["id"]
        project_id = client.post(f"/workspaces/{ws_id}/projects/", json={"name": "P"},
                                 headers=headers_a).json()["id"]
        task_id = client.post(f"/workspaces/{ws_id}/projects/{project_id}/tasks/", json={"title": "T"},
                              headers=headers_a).json()["id"]

        url = f"/workspaces/tasks/{task_id}/comments"
        assert client.post(url, json={"content": "hi"}, headers=headers_c).status_code == 201
        monkeypatch.setattr(_cfg, "STRICT_COMMENT_MEMBERSHIP", True)
        assert client.post(url, json={"content": "hi"}, headers=headers_c).status_code == 403
        assert client.post(url, json={"content": "hi"}, headers=headers_a).status_code == 201

    def test_health(self, client: TestClient):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


@pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}, {"title": "x", "status": "BLOCKED"}])
def test_task_payload_validation(client: TestClient, payload):
    email, _ = _register(client)
    headers = _login(client, email)
    ws_id = client.post("/workspaces/", json={"name": "Acme"}, headers=headers).json()["id"]
    project_id = client.post(f"/workspaces/{ws_id}/projects/", json={"name": "P"}, headers=headers).json()["id"]
    r = client.post(f"/workspaces/{ws_id}/projects/{project_id}/tasks/", json=payload, headers=headers)
    assert r.status_code == 422
