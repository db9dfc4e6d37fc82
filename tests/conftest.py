import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from expense_tracker.core.config import Settings
from expense_tracker.core.database import Database
from expense_tracker.main import create_app

API = "/api/v1"
PASSWORD = "correct-horse-battery-staple"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite://",
        SECRET_KEY="tests-only-secret-key-0123456789abcdef",
        MAX_PAGE_SIZE=200,
    )


@pytest_asyncio.fixture
async def database(settings):
    # One shared in-memory connection for the whole test
    db = Database(settings.DATABASE_URL, timeout=settings.DB_TIMEOUT_SECONDS, poolclass=StaticPool)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
def app(settings, database):
    return create_app(settings, database=database)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def register_and_login(client, email, password=PASSWORD):
    response = await client.post(f"{API}/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    response = await client.post(f"{API}/auth/jwt/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def auth_headers(client):
    return await register_and_login(client, "alice@example.com")


@pytest_asyncio.fixture
async def other_headers(client):
    return await register_and_login(client, "bob@example.com")


async def create_category(client, headers, name, type="expense", description=None):
    response = await client.post(
        f"{API}/categories",
        json={"name": name, "type": type, "description": description},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_transaction(client, headers, amount, date="2025-03-01", type="expense", **extra):
    response = await client.post(
        f"{API}/transactions",
        json={"amount": amount, "date": date, "type": type, **extra},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
