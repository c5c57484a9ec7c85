from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
import sys

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

SERVICE_ROOT = Path(__file__).resolve().parents[1]
if str(SERVICE_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICE_ROOT))

from biodata_service.config import get_settings
from biodata_service.db import close_mongo_connection, connect_to_mongo, get_db
from biodata_service.integrations.identity import VerifiedIdentity, get_identity_verifier
from biodata_service.main import app
from biodata_service.models.user import Role, UserDocument
from biodata_service.repositories.user import UserRepository
from biodata_service.services.exceptions import UnauthorizedError

TOKEN_PREFIX = "test-token:"


class StubIdentityVerifier:
    """Accepts ``test-token:<email>`` bearer tokens and nothing else."""

    async def verify_token(self, token: str) -> VerifiedIdentity:
        if not token.startswith(TOKEN_PREFIX):
            raise UnauthorizedError()
        email = token[len(TOKEN_PREFIX) :].strip().lower()
        if not email:
            raise UnauthorizedError()
        return VerifiedIdentity(uid=f"uid-{email}", email=email)


def auth_headers(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {TOKEN_PREFIX}{email}"}


@pytest.fixture(autouse=True)
def _env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONGO_URI", "mongodb://localhost:27017/test")
    monkeypatch.setenv("MONGO_DB_NAME", "matrimonyBD-test")
    monkeypatch.setenv("FIREBASE_PROJECT_ID", "biodata-test")
    monkeypatch.setenv("PAYMENT_GATEWAY_KEY", "sk_test_123")
    monkeypatch.delenv("ACCESS_ROLE_POLICY", raising=False)
    monkeypatch.delenv("VERIFY_CONTACT_PAYMENTS", raising=False)
    get_settings.cache_clear()  # type: ignore[attr-defined]
    get_identity_verifier.cache_clear()  # type: ignore[attr-defined]


@pytest_asyncio.fixture
async def mongo_client(monkeypatch: pytest.MonkeyPatch) -> AsyncIterator[AsyncMongoMockClient]:
    client = AsyncMongoMockClient()

    def _client_factory(*_args, **_kwargs) -> AsyncMongoMockClient:
        return client

    monkeypatch.setattr("biodata_service.db.AsyncIOMotorClient", _client_factory)
    yield client
    client.close()


@pytest_asyncio.fixture
async def db(mongo_client: AsyncMongoMockClient):
    await connect_to_mongo()
    yield get_db()
    await close_mongo_connection()


@pytest_asyncio.fixture
async def api_client(db) -> AsyncIterator[AsyncClient]:
    app.dependency_overrides[get_identity_verifier] = StubIdentityVerifier
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def seed_user(db) -> Callable[..., Awaitable[UserDocument]]:
    repo = UserRepository(db)

    async def _seed(email: str, role: Role = Role.BASIC, name: str | None = None) -> UserDocument:
        return await repo.create_user(email=email, name=name or email.split("@")[0], role=role)

    return _seed


@pytest.fixture
def create_profile(api_client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Publish a biodata through the API as ``email`` and return the response body."""

    async def _create(email: str, **fields) -> dict:
        body = {
            "biodataType": "Male",
            "name": email.split("@")[0].title(),
            "age": "28",
            "mobileNumber": "01700000000",
            **fields,
        }
        response = await api_client.post("/profile", json=body, headers=auth_headers(email))
        assert response.status_code == 201, response.text
        return response.json()

    return _create
