"""
Client endpoint tests.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_client(client: AsyncClient, sales_headers, users):
    response = await client.post(
        "/api/v1/clients",
        json={
            "company_name": "Globex",
            "contact_name": "Hank Scorpio",
            "tax_document": "US-998877",
            "company_email": "hello@globex-corp.com",
        },
        headers=sales_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["owner_id"] == users.sales.id
    assert data["company_email"] == "hello@globex-corp.com"


@pytest.mark.asyncio
async def test_create_client_invalid_email(client: AsyncClient, sales_headers):
    response = await client.post(
        "/api/v1/clients",
        json={"company_name": "Globex", "contact_name": "Hank", "company_email": "not-an-email"},
        headers=sales_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_clients_are_scoped(
    client: AsyncClient,
    client_record,
    sales_headers,
    other_sales_headers,
    supervisor_headers,
):
    response = await client.get("/api/v1/clients", headers=sales_headers)
    assert response.json()["total"] == 1

    response = await client.get("/api/v1/clients", headers=other_sales_headers)
    assert response.json()["total"] == 0

    response = await client.get(f"/api/v1/clients/{client_record}", headers=other_sales_headers)
    assert response.status_code == 404

    response = await client.get("/api/v1/clients", headers=supervisor_headers)
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_search_clients(client: AsyncClient, client_record, sales_headers):
    response = await client.get(
        "/api/v1/clients",
        params={"search": "FR1234"},
        headers=sales_headers,
    )
    assert [c["id"] for c in response.json()["items"]] == [client_record]

    response = await client.get(
        "/api/v1/clients",
        params={"search": "dupont"},
        headers=sales_headers,
    )
    assert response.json()["total"] == 1

    response = await client.get(
        "/api/v1/clients",
        params={"search": "inconnu"},
        headers=sales_headers,
    )
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_update_client(client: AsyncClient, client_record, sales_headers, other_sales_headers):
    response = await client.patch(
        f"/api/v1/clients/{client_record}",
        json={"company_phone": "+33 1 23 45 67 89"},
        headers=sales_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["company_phone"] == "+33 1 23 45 67 89"
    assert data["company_name"] == "Acme SARL"

    response = await client.patch(
        f"/api/v1/clients/{client_record}",
        json={"notes": "pas à moi"},
        headers=other_sales_headers,
    )
    assert response.status_code == 404
