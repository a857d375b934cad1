"""
Auth endpoint tests — login, refresh, me.
"""

from conftest import create_user, login_headers
from cotizador import models


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_login_returns_tokens_and_user(client):
    create_user("login@taller.com")
    response = client.post("/api/auth/login", json={
        "email": "Login@Taller.com", "password": "strongpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["user"]["email"] == "login@taller.com"
    assert data["user"]["role"] == "user"
    assert "password_hash" not in data["user"]


def test_login_wrong_password(client):
    create_user("login@taller.com")
    response = client.post("/api/auth/login", json={
        "email": "login@taller.com", "password": "incorrecta",
    })
    assert response.status_code == 401


def test_login_unknown_email(client):
    response = client.post("/api/auth/login", json={
        "email": "nadie@taller.com", "password": "strongpassword123",
    })
    assert response.status_code == 401


def test_no_self_registration(client):
    response = client.post("/api/auth/register", json={
        "email": "nuevo@taller.com", "password": "strongpassword123",
    })
    assert response.status_code in (404, 405)


def test_me_without_role_record_is_user(client, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["role"] == "user"
    assert response.json()["is_admin"] is False


def test_me_admin(client, admin_headers):
    response = client.get("/api/auth/me", headers=admin_headers)
    assert response.json()["is_admin"] is True


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401


def test_me_rejects_garbage_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_refresh_issues_new_access_token(client):
    create_user("refresh@taller.com")
    login = client.post("/api/auth/login", json={
        "email": "refresh@taller.com", "password": "strongpassword123",
    }).json()

    response = client.post("/api/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert response.status_code == 200

    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
    assert client.get("/api/auth/me", headers=headers).json()["email"] == "refresh@taller.com"


def test_refresh_rejects_access_token(client):
    create_user("refresh@taller.com")
    login = client.post("/api/auth/login", json={
        "email": "refresh@taller.com", "password": "strongpassword123",
    }).json()

    response = client.post("/api/auth/refresh", json={"refresh_token": login["access_token"]})
    assert response.status_code == 401


def test_role_change_seen_on_next_request(client, db):
    """Role is resolved per request, not baked into the token."""
    user_id = create_user("promovido@taller.com")
    headers = login_headers(client, "promovido@taller.com")
    assert client.get("/api/auth/me", headers=headers).json()["role"] == "user"

    db.add(models.UserRole(user_id=user_id, role=models.RoleName.ADMIN))
    db.commit()

    assert client.get("/api/auth/me", headers=headers).json()["role"] == "admin"
