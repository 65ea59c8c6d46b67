"""
Authentication and staff endpoint tests.
"""

import pytest
from httpx import AsyncClient


PASSWORD = "testpassword123"


@pytest.mark.asyncio
async def test_register_creates_salesperson(client: AsyncClient):
    response = await client.post(
        "/api/v1/auth/register",
        json={
            "email": "newuser@example.com",
            "password": "password123",
            "full_name": "New User",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "newuser@example.com"
    assert data["role"] == "salesperson"
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, users):
    response = await client.post(
        "/api/v1/auth/register",
        json={
            "email": users.sales.email,
            "password": "password123",
            "full_name": "Another User",
        },
    )

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "CONFLICT"
    assert "existe déjà" in body["detail"]


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, users):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": users.sales.email, "password": PASSWORD},
    )

    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert "refresh_token" in data
    assert data["token_type"] == "bearer"
    assert data["expires_at"]
    assert data["user"]["email"] == users.sales.email
    assert data["user"]["role"] == "salesperson"
    assert "hashed_password" not in data["user"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, users):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": users.sales.email, "password": "wrongpassword"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_current_user(client: AsyncClient, users, supervisor_headers):
    response = await client.get("/api/v1/auth/me", headers=supervisor_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == users.supervisor.email
    assert data["role"] == "supervisor"


@pytest.mark.asyncio
async def test_login_carries_role_permissions(client: AsyncClient, users):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": users.sales.email, "password": PASSWORD},
    )
    assert response.json()["permissions"] == {
        "change_status": False,
        "grant_benefits": False,
        "edit_observations": False,
        "see_all_quotations": False,
        "manage_catalog": False,
    }

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": users.admin.email, "password": PASSWORD},
    )
    permissions = response.json()["permissions"]
    assert all(permissions.values())


@pytest.mark.asyncio
async def test_profile_permissions_follow_role(
    client: AsyncClient, sales_headers, supervisor_headers
):
    response = await client.get("/api/v1/auth/me", headers=sales_headers)
    assert response.status_code == 200
    permissions = response.json()["permissions"]
    assert not permissions["change_status"]
    assert not permissions["grant_benefits"]

    response = await client.get("/api/v1/auth/me", headers=supervisor_headers)
    permissions = response.json()["permissions"]
    assert permissions["change_status"]
    assert permissions["grant_benefits"]
    assert permissions["edit_observations"]
    assert permissions["see_all_quotations"]
    # Catalog maintenance stays with administrators
    assert not permissions["manage_catalog"]


@pytest.mark.asyncio
async def test_unauthorized_access(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token(client: AsyncClient, users):
    login = await client.post(
        "/api/v1/auth/login",
        json={"email": users.sales.email, "password": PASSWORD},
    )
    refresh = login.json()["refresh_token"]

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})
    assert response.status_code == 200
    assert "access_token" in response.json()
    assert response.json()["user"]["id"] == users.sales.id

    # An access token is not accepted as a refresh token
    response = await client.post(
        "/api/v1/auth/refresh",
        json={"refresh_token": login.json()["access_token"]},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_creates_staff_with_role(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/users",
        json={
            "email": "newsuper@example.com",
            "password": "password123",
            "full_name": "New Supervisor",
            "role": "supervisor",
        },
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert response.json()["role"] == "supervisor"


@pytest.mark.asyncio
async def test_salesperson_cannot_create_staff(client: AsyncClient, sales_headers):
    response = await client.post(
        "/api/v1/users",
        json={
            "email": "sneaky@example.com",
            "password": "password123",
            "full_name": "Sneaky Admin",
            "role": "admin",
        },
        headers=sales_headers,
    )

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_list_staff_by_role(client: AsyncClient, supervisor_headers):
    response = await client.get(
        "/api/v1/users",
        params={"role": "salesperson"},
        headers=supervisor_headers,
    )

    assert response.status_code == 200
    emails = {u["email"] for u in response.json()}
    assert emails == {"sales@example.com", "other@example.com"}


@pytest.mark.asyncio
async def test_change_password(client: AsyncClient, users, sales_headers):
    response = await client.post(
        "/api/v1/users/me/change-password",
        json={"current_password": "not-the-password", "new_password": "brandnew123"},
        headers=sales_headers,
    )
    assert response.status_code == 400

    response = await client.post(
        "/api/v1/users/me/change-password",
        json={"current_password": PASSWORD, "new_password": "brandnew123"},
        headers=sales_headers,
    )
    assert response.status_code == 200

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": users.sales.email, "password": "brandnew123"},
    )
    assert response.status_code == 200
