"""
Pytest configuration and fixtures.
"""

import os
import tempfile

# Settings are read once at import time
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("PDF_STORAGE_PATH", tempfile.mkdtemp(prefix="servquote-pdf-"))

from decimal import Decimal
from types import SimpleNamespace
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import get_password_hash
from app.main import app
from app.models.catalog import Category, Service, UnitOfMeasure, UnitType
from app.models.client import Client
from app.models.user import User, UserRole


TEST_DATABASE_URL = "sqlite+aiosqlite://"
PASSWORD = "testpassword123"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose requests commit or roll back like get_db does."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def users(db_session: AsyncSession) -> SimpleNamespace:
    """
    One staff member per role, plus a second salesperson.

    Plain values, not ORM instances: a rolled-back request expires
    everything in the shared session.
    """
    staff = {
        "admin": User(email="admin@example.com", full_name="Alice Admin", role=UserRole.ADMIN),
        "supervisor": User(email="super@example.com", full_name="Sam Supervisor", role=UserRole.SUPERVISOR),
        "sales": User(email="sales@example.com", full_name="Paul Vendeur", role=UserRole.SALESPERSON),
        "other_sales": User(email="other@example.com", full_name="Lea Vendeuse", role=UserRole.SALESPERSON),
    }
    for user in staff.values():
        user.hashed_password = PASSWORD_HASH
        user.is_active = True
        db_session.add(user)
    await db_session.commit()

    return SimpleNamespace(**{
        key: SimpleNamespace(id=user.id, email=user.email, full_name=user.full_name)
        for key, user in staff.items()
    })


async def _login(client: AsyncClient, email: str) -> dict:
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
async def admin_headers(client: AsyncClient, users) -> dict:
    return await _login(client, users.admin.email)


@pytest.fixture
async def supervisor_headers(client: AsyncClient, users) -> dict:
    return await _login(client, users.supervisor.email)


@pytest.fixture
async def sales_headers(client: AsyncClient, users) -> dict:
    return await _login(client, users.sales.email)


@pytest.fixture
async def other_sales_headers(client: AsyncClient, users) -> dict:
    return await _login(client, users.other_sales.email)


@pytest.fixture
async def catalog(db_session: AsyncSession) -> SimpleNamespace:
    """
    Small catalog:
        hosting  (servers, count)    min 100, recommended 150
        backup   (storage, capacity) min 2,   recommended 5
        licenses (licenses, users)   min 10,  recommended 12
    """
    servers = UnitOfMeasure(name="Serveur", abbreviation="srv", unit_type=UnitType.COUNT)
    gigabytes = UnitOfMeasure(name="Gigaoctet", abbreviation="GB", unit_type=UnitType.CAPACITY)
    seats = UnitOfMeasure(name="Utilisateur", abbreviation="usr", unit_type=UnitType.USERS)
    db_session.add_all([servers, gigabytes, seats])
    await db_session.flush()

    servers_cat = Category(name="Serveurs", unit_of_measure_id=servers.id)
    storage_cat = Category(name="Stockage", unit_of_measure_id=gigabytes.id)
    licenses_cat = Category(name="Licences", unit_of_measure_id=seats.id)
    db_session.add_all([servers_cat, storage_cat, licenses_cat])
    await db_session.flush()

    hosting = Service(
        name="Hébergement",
        category_id=servers_cat.id,
        minimum_price=Decimal("100.00"),
        recommended_price=Decimal("150.00"),
    )
    backup = Service(
        name="Sauvegarde",
        category_id=storage_cat.id,
        minimum_price=Decimal("2.00"),
        recommended_price=Decimal("5.00"),
    )
    licenses = Service(
        name="Suite bureautique",
        category_id=licenses_cat.id,
        minimum_price=Decimal("10.00"),
        recommended_price=Decimal("12.00"),
    )
    db_session.add_all([hosting, backup, licenses])
    await db_session.commit()

    return SimpleNamespace(
        servers_unit=servers.id,
        gigabytes_unit=gigabytes.id,
        seats_unit=seats.id,
        servers_cat=servers_cat.id,
        storage_cat=storage_cat.id,
        licenses_cat=licenses_cat.id,
        hosting=hosting.id,
        backup=backup.id,
        licenses=licenses.id,
    )


@pytest.fixture
async def client_record(db_session: AsyncSession, users) -> int:
    """A client owned by the main salesperson."""
    record = Client(
        owner_id=users.sales.id,
        company_name="Acme SARL",
        contact_name="Jean Dupont",
        tax_document="FR123456789",
        company_email="contact@acme-sarl.com",
    )
    db_session.add(record)
    await db_session.commit()
    return record.id


@pytest.fixture
def quote_payload(catalog, client_record):
    """Build a creation payload; defaults to one hosting server at 100/month for 12 months."""

    def build(final_price="100.00", quantity=1, contract_months=12, **extra):
        payload = {
            "client_id": client_record,
            "contract_months": contract_months,
            "services": [
                {
                    "service_id": catalog.hosting,
                    "final_price": final_price,
                    "categories": [
                        {"category_id": catalog.servers_cat, "quantity": quantity},
                    ],
                }
            ],
        }
        payload.update(extra)
        return payload

    return build


@pytest.fixture
def create_quote(client: AsyncClient, sales_headers, quote_payload):
    """POST a quotation as the main salesperson and return the quote body."""

    async def create(**kwargs) -> dict:
        response = await client.post(
            "/api/v1/quotes",
            json=quote_payload(**kwargs),
            headers=sales_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["quote"]

    return create
