from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from starlette.testclient import TestClient

from employee_records.core.dependencies import get_current_user
from employee_records.main import app
from employee_records.models.auth import UserInfo
from employee_records.services.employee_service import EmployeeService
from employee_records.stores.inmemory import InMemoryEmployeeStore

TEST_JWT_SECRET = "test-secret-do-not-use"


@pytest.fixture(autouse=True)
def _app_settings():
    from employee_records.core.config import settings

    original_secret = settings.JWT_SECRET
    original_backend = settings.STORE_BACKEND
    settings.JWT_SECRET = TEST_JWT_SECRET
    settings.STORE_BACKEND = "memory"
    yield
    settings.JWT_SECRET = original_secret
    settings.STORE_BACKEND = original_backend


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_token():
    def _make_token(
        *,
        sub: str | None = "user-123",
        email: str = "hr@example.com",
        expired: bool = False,
        secret: str = TEST_JWT_SECRET,
        extra: dict | None = None,
    ) -> str:
        now = int(time.time())
        claims: dict = {
            "email": email,
            "iat": now - 60,
            "exp": now - 3600 if expired else now + 3600,
        }
        if sub is not None:
            claims["sub"] = sub
        claims.update(extra or {})
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make_token


@pytest.fixture
def mock_user_admin():
    return UserInfo(id="admin-1", email="admin@example.com")


@pytest.fixture
def authenticated_client(mock_user_admin):
    app.dependency_overrides[get_current_user] = lambda: mock_user_admin
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TickingClock:
    """Returns a strictly increasing UTC time, one minute per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
async def store():
    memory_store = InMemoryEmployeeStore()
    await memory_store.connect()
    yield memory_store
    await memory_store.close()


@pytest.fixture
def service(store, clock):
    return EmployeeService(store, clock=clock)


@pytest.fixture
def employee_payload():
    return {
        "name": "Alice",
        "email": "a@x.com",
        "address": "12 Main Street, Springfield",
        "experience": 5,
        "lastWorkCompany": "Initech",
        "dateOfResignation": "2023-12-31",
        "joiningDate": "2024-01-15",
    }
