"""
Admin-only user management.
"""

from conftest import login_headers


def test_non_admin_forbidden(client, auth_headers):
    assert client.get("/api/users/", headers=auth_headers).status_code == 403
    response = client.post("/api/users/", json={
        "email": "x@taller.com", "password": "secreto123",
    }, headers=auth_headers)
    assert response.status_code == 403


def test_admin_creates_user_who_can_log_in(client, admin_headers):
    response = client.post("/api/users/", json={
        "email": "Nuevo@Taller.com", "password": "secreto123",
    }, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["email"] == "nuevo@taller.com"
    assert response.json()["role"] == "user"

    headers = login_headers(client, "nuevo@taller.com", "secreto123")
    assert client.get("/api/auth/me", headers=headers).status_code == 200


def test_duplicate_email_conflicts(client, admin_headers):
    body = {"email": "dup@taller.com", "password": "secreto123"}
    assert client.post("/api/users/", json=body, headers=admin_headers).status_code == 201
    assert client.post("/api/users/", json=body, headers=admin_headers).status_code == 409


def test_short_password_rejected(client, admin_headers):
    response = client.post("/api/users/", json={
        "email": "corto@taller.com", "password": "123",
    }, headers=admin_headers)
    assert response.status_code == 422


def test_list_users_with_roles(client, admin_headers, auth_headers):
    users = client.get("/api/users/", headers=admin_headers).json()
    roles = {u["email"]: u["role"] for u in users}
    assert roles == {"admin@taller.com": "admin", "test@taller.com": "user"}


def test_promote_user(client, admin_headers, auth_headers):
    me = client.get("/api/auth/me", headers=auth_headers).json()

    response = client.put(f"/api/users/{me['id']}/role", json={"role": "admin"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_admin"] is True
    assert client.get("/api/users/", headers=auth_headers).status_code == 200


def test_admin_cannot_demote_self(client, admin_headers):
    me = client.get("/api/auth/me", headers=admin_headers).json()
    response = client.put(f"/api/users/{me['id']}/role", json={"role": "user"}, headers=admin_headers)
    assert response.status_code == 400


def test_role_for_missing_user_404(client, admin_headers):
    response = client.put("/api/users/9999/role", json={"role": "admin"}, headers=admin_headers)
    assert response.status_code == 404
