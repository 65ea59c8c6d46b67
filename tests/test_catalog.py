"""
Catalog tests: administration endpoints and service lookup fallbacks.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.core.exceptions import ConfigurationError, NotFoundError
from app.models.catalog import Category, Service, UnitOfMeasure, UnitType
from app.services.catalog import CatalogService


@pytest.mark.asyncio
async def test_admin_builds_catalog(client: AsyncClient, admin_headers):
    unit = await client.post(
        "/api/v1/catalog/units",
        json={"name": "Heure", "abbreviation": "h", "unit_type": "time"},
        headers=admin_headers,
    )
    assert unit.status_code == 201
    assert unit.json()["unit_type"] == "time"

    category = await client.post(
        "/api/v1/catalog/categories",
        json={"name": "Support", "unit_of_measure_id": unit.json()["id"]},
        headers=admin_headers,
    )
    assert category.status_code == 201

    service = await client.post(
        "/api/v1/catalog/services",
        json={
            "name": "Support premium",
            "category_id": category.json()["id"],
            "minimum_price": "40.00",
            "recommended_price": "55.00",
        },
        headers=admin_headers,
    )
    assert service.status_code == 201
    assert service.json()["category_id"] == category.json()["id"]
    assert Decimal(service.json()["minimum_price"]) == Decimal("40.00")


@pytest.mark.asyncio
async def test_salesperson_reads_but_cannot_write(client: AsyncClient, sales_headers, catalog):
    response = await client.get("/api/v1/catalog/services", headers=sales_headers)
    assert response.status_code == 200
    assert len(response.json()) == 3

    response = await client.post(
        "/api/v1/catalog/units",
        json={"name": "Heure", "abbreviation": "h"},
        headers=sales_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_recommended_price_below_minimum_is_rejected(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/catalog/services",
        json={"name": "Incohérent", "minimum_price": "50.00", "recommended_price": "40.00"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_category_with_unknown_unit(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/catalog/categories",
        json={"name": "Orpheline", "unit_of_measure_id": 999},
        headers=admin_headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_services_filters(client: AsyncClient, sales_headers, catalog):
    response = await client.get(
        "/api/v1/catalog/services",
        params={"search": "sauve"},
        headers=sales_headers,
    )
    assert [s["id"] for s in response.json()] == [catalog.backup]

    response = await client.get(
        "/api/v1/catalog/services",
        params={"category_id": catalog.licenses_cat},
        headers=sales_headers,
    )
    assert [s["id"] for s in response.json()] == [catalog.licenses]


@pytest.mark.asyncio
async def test_lookup_uses_service_category_and_its_unit(db_session, catalog):
    entry = await CatalogService(db_session).lookup(catalog.backup)

    assert entry.category_id == catalog.storage_cat
    assert entry.unit_of_measure_id == catalog.gigabytes_unit
    assert entry.unit_type is UnitType.CAPACITY
    assert entry.reference_price == Decimal("5.00")


@pytest.mark.asyncio
async def test_lookup_explicit_category_wins(db_session, catalog):
    entry = await CatalogService(db_session).lookup(catalog.hosting, catalog.storage_cat)

    assert entry.category_id == catalog.storage_cat
    assert entry.unit_type is UnitType.CAPACITY


@pytest.mark.asyncio
async def test_lookup_falls_back_to_first_active_category(db_session, catalog):
    loose = Service(name="Divers", minimum_price=Decimal("1.00"), recommended_price=Decimal("1.00"))
    db_session.add(loose)
    await db_session.commit()

    entry = await CatalogService(db_session).lookup(loose.id)

    assert entry.category_id == catalog.servers_cat
    assert entry.unit_of_measure_id == catalog.servers_unit


@pytest.mark.asyncio
async def test_lookup_falls_back_to_first_active_unit(db_session, catalog):
    bare = Category(name="Sans unité")
    db_session.add(bare)
    await db_session.flush()
    loose = Service(
        name="Conseil",
        category_id=bare.id,
        minimum_price=Decimal("80.00"),
        recommended_price=Decimal("90.00"),
    )
    db_session.add(loose)
    await db_session.commit()

    entry = await CatalogService(db_session).lookup(loose.id)

    assert entry.category_id == bare.id
    assert entry.unit_of_measure_id == catalog.servers_unit


@pytest.mark.asyncio
async def test_lookup_unknown_service(db_session, catalog):
    with pytest.raises(NotFoundError):
        await CatalogService(db_session).lookup(9999)


@pytest.mark.asyncio
async def test_lookup_without_any_category_is_a_configuration_error(db_session):
    db_session.add(UnitOfMeasure(name="Serveur", abbreviation="srv", unit_type=UnitType.COUNT))
    loose = Service(name="Divers", minimum_price=Decimal("1.00"), recommended_price=Decimal("1.00"))
    db_session.add(loose)
    await db_session.commit()

    with pytest.raises(ConfigurationError):
        await CatalogService(db_session).lookup(loose.id)


@pytest.mark.asyncio
async def test_quote_on_unconfigured_catalog_fails_cleanly(
    client: AsyncClient,
    db_session,
    sales_headers,
    client_record,
):
    loose = Service(name="Divers", minimum_price=Decimal("1.00"), recommended_price=Decimal("1.00"))
    db_session.add(loose)
    await db_session.commit()
    service_id = loose.id

    response = await client.post(
        "/api/v1/quotes",
        json={
            "client_id": client_record,
            "contract_months": 12,
            "services": [{"service_id": service_id, "final_price": "10.00", "servers_count": 1}],
        },
        headers=sales_headers,
    )

    assert response.status_code == 500
    assert response.json()["code"] == "CONFIGURATION_ERROR"

    listing = await client.get("/api/v1/quotes", headers=sales_headers)
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_update_service_prices(client: AsyncClient, admin_headers, catalog):
    response = await client.put(
        f"/api/v1/catalog/services/{catalog.hosting}",
        json={"minimum_price": "110.00"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert Decimal(response.json()["minimum_price"]) == Decimal("110.00")
    assert Decimal(response.json()["recommended_price"]) == Decimal("150.00")
    assert response.json()["name"] == "Hébergement"


@pytest.mark.asyncio
async def test_update_checks_resulting_price_pair(client: AsyncClient, admin_headers, catalog):
    # recommended stays at 150
    response = await client.put(
        f"/api/v1/catalog/services/{catalog.hosting}",
        json={"minimum_price": "200.00"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    listing = await client.get("/api/v1/catalog/services", params={"search": "héberg"}, headers=admin_headers)
    assert Decimal(listing.json()[0]["minimum_price"]) == Decimal("100.00")


@pytest.mark.asyncio
async def test_update_category_and_unit(client: AsyncClient, admin_headers, catalog):
    response = await client.put(
        f"/api/v1/catalog/categories/{catalog.storage_cat}",
        json={"name": "Stockage objet", "unit_of_measure_id": catalog.servers_unit},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["unit_of_measure_id"] == catalog.servers_unit

    response = await client.put(
        f"/api/v1/catalog/categories/{catalog.storage_cat}",
        json={"unit_of_measure_id": 999},
        headers=admin_headers,
    )
    assert response.status_code == 404

    response = await client.put(
        f"/api/v1/catalog/units/{catalog.gigabytes_unit}",
        json={"abbreviation": "Go"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["abbreviation"] == "Go"
    assert response.json()["unit_type"] == "capacity"


@pytest.mark.asyncio
async def test_catalog_writes_are_admin_only(client: AsyncClient, supervisor_headers, catalog):
    responses = [
        await client.put(
            f"/api/v1/catalog/services/{catalog.hosting}",
            json={"name": "Piraté"},
            headers=supervisor_headers,
        ),
        await client.delete(f"/api/v1/catalog/services/{catalog.hosting}", headers=supervisor_headers),
        await client.patch(f"/api/v1/catalog/units/{catalog.servers_unit}/restore", headers=supervisor_headers),
    ]

    assert [r.status_code for r in responses] == [403, 403, 403]


@pytest.mark.asyncio
async def test_deactivate_unknown_entry(client: AsyncClient, admin_headers):
    response = await client.delete("/api/v1/catalog/categories/999", headers=admin_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_deactivated_service_cannot_be_quoted(
    client: AsyncClient,
    admin_headers,
    sales_headers,
    quote_payload,
    catalog,
):
    response = await client.delete(f"/api/v1/catalog/services/{catalog.hosting}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    listing = await client.get("/api/v1/catalog/services", headers=sales_headers)
    assert catalog.hosting not in [s["id"] for s in listing.json()]
    listing = await client.get(
        "/api/v1/catalog/services",
        params={"include_inactive": True},
        headers=admin_headers,
    )
    assert catalog.hosting in [s["id"] for s in listing.json()]

    response = await client.post("/api/v1/quotes", json=quote_payload(), headers=sales_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"

    response = await client.patch(f"/api/v1/catalog/services/{catalog.hosting}/restore", headers=admin_headers)
    assert response.json()["is_active"] is True

    response = await client.post("/api/v1/quotes", json=quote_payload(), headers=sales_headers)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_fallback_skips_deactivated_category(db_session, catalog):
    loose = Service(name="Divers", minimum_price=Decimal("1.00"), recommended_price=Decimal("1.00"))
    db_session.add(loose)
    await db_session.commit()
    catalog_service = CatalogService(db_session)

    await catalog_service.set_active(Category, catalog.servers_cat, active=False)
    entry = await catalog_service.lookup(loose.id)

    assert entry.category_id == catalog.storage_cat
    assert entry.unit_type is UnitType.CAPACITY


@pytest.mark.asyncio
async def test_fallback_skips_deactivated_unit(db_session, catalog):
    bare = Category(name="Sans unité")
    db_session.add(bare)
    await db_session.flush()
    loose = Service(
        name="Conseil",
        category_id=bare.id,
        minimum_price=Decimal("80.00"),
        recommended_price=Decimal("90.00"),
    )
    db_session.add(loose)
    await db_session.commit()
    catalog_service = CatalogService(db_session)

    await catalog_service.set_active(UnitOfMeasure, catalog.servers_unit, active=False)
    entry = await catalog_service.lookup(loose.id)

    assert entry.unit_of_measure_id == catalog.gigabytes_unit
