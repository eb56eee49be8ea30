# tests/test_auth_api.py
"""Tests de autenticación, roles y administración de usuarios."""

from belleza_pos.models.enums import UserRole
from belleza_pos.core.security import create_refresh_token

API = "/api/v1"
TEST_PASSWORD = "secret123"  # la de los usuarios creados en conftest


def login(client, username, password=TEST_PASSWORD):
    return client.post(f"{API}/auth/login", json={"username": username, "password": password})


# -------------------------------------------------------------------
# Login / refresh / me
# -------------------------------------------------------------------

def test_login_returns_tokens_and_records_last_login(client, users, db_session):
    response = login(client, "admin")

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["role"] == "ADMIN"
    assert body["access_token"] and body["refresh_token"]

    db_session.refresh(users[UserRole.ADMIN])
    assert users[UserRole.ADMIN].last_login is not None


def test_login_with_wrong_password_is_unauthorized(client, users):
    assert login(client, "admin", "wrong-password").status_code == 401


def test_login_inactive_user_is_forbidden(client, users, db_session):
    users[UserRole.SELLER].is_active = False
    db_session.commit()

    assert login(client, "seller").status_code == 403


def test_refresh_rotates_tokens(client, users):
    refresh_token = login(client, "cashier").json()["refresh_token"]

    response = client.post(f"{API}/auth/refresh", headers={"Authorization": f"Bearer {refresh_token}"})

    assert response.status_code == 200
    assert response.json()["username"] == "cashier"


def test_refresh_rejects_access_token(client, auth_headers):
    response = client.post(f"{API}/auth/refresh", headers=auth_headers(UserRole.CASHIER))
    assert response.status_code == 401


def test_refresh_token_cannot_be_used_as_access_token(client, users):
    token = create_refresh_token(subject=str(users[UserRole.ADMIN].id))
    response = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_me_returns_current_user(client, auth_headers):
    response = client.get(f"{API}/auth/me", headers=auth_headers(UserRole.MANAGER))

    assert response.status_code == 200
    assert response.json()["username"] == "manager"
    assert response.json()["role_description"] == "Gerente"


def test_protected_endpoint_without_token(client):
    assert client.get(f"{API}/auth/me").status_code == 401


def test_roles_are_a_closed_list(client, auth_headers):
    response = client.get(f"{API}/roles/", headers=auth_headers(UserRole.CASHIER))

    assert response.status_code == 200
    names = [role["name"] for role in response.json()["roles"]]
    assert names == ["ADMIN", "MANAGER", "SELLER", "CASHIER"]


# -------------------------------------------------------------------
# Usuarios
# -------------------------------------------------------------------

def new_user_payload(**overrides):
    payload = {
        "username": "nuevo",
        "password": "clave123",
        "first_name": "Nueva",
        "last_name": "Vendedora",
        "email": "nueva@belleza.test",
        "role": "seller",
    }
    payload.update(overrides)
    return payload


def test_admin_creates_user(client, admin_headers):
    response = client.post(f"{API}/users/", json=new_user_payload(), headers=admin_headers)

    assert response.status_code == 201
    assert response.json()["role"] == "SELLER"
    assert "password_hash" not in response.json()
    assert login(client, "nuevo", "clave123").status_code == 200


def test_create_user_with_unknown_role_is_rejected(client, admin_headers):
    response = client.post(f"{API}/users/", json=new_user_payload(role="SUPERUSER"), headers=admin_headers)

    assert response.status_code == 400
    assert "Rol inválido" in response.json()["detail"]
    assert response.json()["error"] == "Bad Request"


def test_create_user_with_duplicate_username_is_rejected(client, admin_headers):
    response = client.post(f"{API}/users/", json=new_user_payload(username="cashier"), headers=admin_headers)
    assert response.status_code == 400


def test_manager_cannot_create_admin(client, auth_headers):
    response = client.post(f"{API}/users/", json=new_user_payload(role="ADMIN"), headers=auth_headers(UserRole.MANAGER))
    assert response.status_code == 403


def test_cashier_cannot_list_users(client, auth_headers):
    assert client.get(f"{API}/users/", headers=auth_headers(UserRole.CASHIER)).status_code == 403


def test_seller_reads_own_profile_but_not_others(client, users, auth_headers):
    headers = auth_headers(UserRole.SELLER)

    own = client.get(f"{API}/users/{users[UserRole.SELLER].id}", headers=headers)
    other = client.get(f"{API}/users/{users[UserRole.ADMIN].id}", headers=headers)

    assert own.status_code == 200
    assert other.status_code == 403


def test_unknown_user_is_not_found(client, admin_headers):
    response = client.get(f"{API}/users/00000000-0000-0000-0000-000000000000", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["path"].startswith("/api/v1/users/")


def test_users_by_role(client, admin_headers):
    response = client.get(f"{API}/users/by-role/cashier", headers=admin_headers)

    assert response.status_code == 200
    assert [user["username"] for user in response.json()] == ["cashier"]


def test_change_password(client, users, auth_headers):
    user_id = users[UserRole.CASHIER].id
    headers = auth_headers(UserRole.CASHIER)
    url = f"{API}/users/{user_id}/password"

    wrong = client.patch(url, json={
        "current_password": "nope", "new_password": "nueva123", "confirm_password": "nueva123",
    }, headers=headers)
    mismatch = client.patch(url, json={
        "current_password": TEST_PASSWORD, "new_password": "nueva123", "confirm_password": "otra123",
    }, headers=headers)
    ok = client.patch(url, json={
        "current_password": TEST_PASSWORD, "new_password": "nueva123", "confirm_password": "nueva123",
    }, headers=headers)

    assert wrong.status_code == 400
    assert wrong.json()["detail"] == "La contraseña actual es incorrecta"
    assert mismatch.status_code == 400
    assert mismatch.json()["detail"] == "Las contraseñas no coinciden"
    assert ok.status_code == 200
    assert login(client, "cashier", "nueva123").status_code == 200


def test_cannot_change_someone_elses_password(client, users, auth_headers):
    response = client.patch(
        f"{API}/users/{users[UserRole.ADMIN].id}/password",
        json={"current_password": TEST_PASSWORD, "new_password": "nueva123", "confirm_password": "nueva123"},
        headers=auth_headers(UserRole.MANAGER),
    )
    assert response.status_code == 403


def test_deactivated_user_loses_access(client, users, auth_headers, admin_headers):
    seller_headers = auth_headers(UserRole.SELLER)

    response = client.patch(f"{API}/users/{users[UserRole.SELLER].id}/deactivate", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get(f"{API}/auth/me", headers=seller_headers).status_code == 403
