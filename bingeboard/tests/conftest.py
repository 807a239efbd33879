# bingeboard/tests/conftest.py
import os

# Must be set before bingeboard.core.settings is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTH_SECRET"] = "test-secret"
os.environ["TMDB_API_KEY"] = "test-key"
os.environ["TMDB_BASE_URL"] = "https://api.themoviedb.org/3"
os.environ.pop("TMDB_BEARER_TOKEN", None)

import fakeredis.aioredis
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bingeboard.db.models import Base
from bingeboard.db.session import get_async_db
from bingeboard.main import app



@pytest.fixture(autouse=True)
async def fake_app_cache(monkeypatch):
    """
    Ensure bingeboard.infra.cache uses a FakeRedis client in tests,
    both for the module-level handle and for a lazy cache.init().
    """
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)

    import bingeboard.infra.cache as app_cache
    monkeypatch.setattr(app_cache, "_redis", fake, raising=True)

    import redis.asyncio as redis_asyncio
    monkeypatch.setattr(redis_asyncio, "from_url", lambda *a, **k: fake, raising=True)

    try:
        yield fake
    finally:
        await fake.aclose()


@pytest.fixture
async def session_factory():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _override_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = _override_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def register(client: AsyncClient):
    """
    Sign up and log in a user; returns bearer headers for that user.
    The login cookie is dropped so each call picks its user explicitly.
    """

    async def _register(username: str, password: str = "secret123") -> dict:
        email = f"{username.lower()}@example.com"
        r = await client.post(
            "/api/signup", json={"username": username, "email": email, "password": password}
        )
        assert r.status_code == 201, r.text
        r = await client.post("/api/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        client.cookies.clear()
        body = r.json()
        return {"Authorization": f"Bearer {body['access_token']}"}

    return _register


@pytest.fixture
def breaking_bad() -> dict:
    return {
        "id": 1396,
        "name": "Breaking Bad",
        "overview": "A dying chemist turns to cooking meth.",
        "poster_path": "/ggFHVNu6YYI5L9pCfOacjizRGt.jpg",
        "backdrop_path": "/tsRy63Mu5cu8etL1X7ZLyf7UP1M.jpg",
        "first_air_date": "2008-01-20",
        "vote_average": 8.9,
        "number_of_seasons": 5,
        "number_of_episodes": 62,
        "genres": [{"id": 18, "name": "Drama"}],
        "seasons": [
            {"season_number": 1, "name": "Season 1", "episode_count": 7, "poster_path": "/s1.jpg"},
        ],
    }
