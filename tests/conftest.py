"""Pytest configuration and fixtures."""

import os

# Set test environment variables BEFORE importing anything that loads settings
os.environ["DEBUG"] = "true"
os.environ["JWT_SECRET"] = "test-jwt-secret-with-enough-length-for-hs256"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
os.environ["STRIPE_BASIC_PRICE_ID"] = "price_basic"
os.environ["STRIPE_PRO_PRICE_ID"] = "price_pro"
os.environ["STRIPE_ENTERPRISE_PRICE_ID"] = "price_enterprise"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from saasboard.app import create_app
from saasboard.config import get_settings
from saasboard.constants import COOKIE_NAME
from saasboard.db.session import Database

get_settings.cache_clear()

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost so tests that hash passwords stay quick."""
    monkeypatch.setattr("saasboard.security.passwords.BCRYPT_ROUNDS", 4)


@pytest_asyncio.fixture(scope="function")
async def database():
    """Fresh in-memory database with all tables, per test."""
    db = Database("sqlite:///:memory:")
    await db.connect()
    await db.create_all()
    yield db
    await db.disconnect()


@pytest_asyncio.fixture(scope="function")
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(database):
    app = create_app(database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def token_from(response) -> str:
    """Pull the session token out of the Set-Cookie header."""
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name.strip() == COOKIE_NAME:
            return rest.split(";", 1)[0]
    raise AssertionError("No session cookie in response")


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register_user(client: AsyncClient, email: str, password: str = DEFAULT_PASSWORD, name: str | None = None) -> str:
    """Register through the API and return the session token."""
    payload = {"email": email, "password": password}
    if name is not None:
        payload["name"] = name
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    # Authenticate explicitly per request instead of through the cookie jar
    client.cookies.clear()
    return token_from(response)


@pytest.fixture
def register():
    return register_user
