import json
import os
from types import SimpleNamespace

# Settings are read once at import time, so the environment is fixed before
# anything from credably is imported.
os.environ["AUTH_SECRET"] = "test-secret"
os.environ["OPENAI_API_KEY"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FILE"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import httpx
import jwt
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import credably.models  # noqa: F401
from credably.database import Base, get_db
from credably.main import app
from credably.models.user import User, ConnectedAccount
from credably.services import openai_client
from credably.services.social.client import get_provider_http_client

AUTH_SECRET = "test-secret"


def make_token(user_id: str = "user-1", **claims) -> str:
    return jwt.encode({"sub": user_id, **claims}, AUTH_SECRET, algorithm="HS256")


def auth_headers(user_id: str = "user-1") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed(session_factory):
    """Commit rows in a short-lived session so request sessions see them."""
    async def _seed(*rows):
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()
            return rows
    return _seed


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def provider_api():
    """Route provider HTTP calls through a MockTransport handler.

    Usage:
        async def test_x(client, provider_api):
            mock = provider_api(handler)
    """
    opened = []

    def _install(handler):
        mock = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        opened.append(mock)
        app.dependency_overrides[get_provider_http_client] = lambda: mock
        return mock

    yield _install
    for mock in opened:
        await mock.aclose()


@pytest.fixture(autouse=True)
def reset_openai_client(monkeypatch):
    monkeypatch.setattr(openai_client, "_client", None)


class FakeCompletions:
    def __init__(self, payloads):
        self.payloads = list(payloads)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.payloads:
            raise RuntimeError("no fake completion queued")
        payload = self.payloads.pop(0)
        if isinstance(payload, Exception):
            raise payload
        content = payload if isinstance(payload, str) else json.dumps(payload)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeOpenAI:
    def __init__(self, payloads):
        self.completions = FakeCompletions(payloads)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def fake_openai(monkeypatch):
    """Queue JSON responses for the next OpenAI calls."""
    def _install(*payloads):
        fake = FakeOpenAI(payloads)
        monkeypatch.setattr(openai_client, "_client", fake)
        return fake.completions
    return _install


@pytest.fixture
async def user(seed):
    (row,) = await seed(User(id="user-1", email="ada@example.com", name="Ada"))
    return row


@pytest.fixture
def connect(seed):
    async def _connect(provider: str, token: str = "provider-token", user_id: str = "user-1"):
        await seed(ConnectedAccount(
            user_id=user_id,
            provider=provider,
            provider_account_id=f"{provider}-{user_id}",
            access_token=token,
        ))
    return _connect
