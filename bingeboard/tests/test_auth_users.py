# bingeboard/tests/test_auth_users.py
import pytest
from httpx import AsyncClient

from bingeboard.core.settings import settings


@pytest.mark.asyncio
async def test_signup_login_and_user_info(client: AsyncClient):
    r = await client.post(
        "/api/signup", json={"username": "alice", "email": "Alice@Example.com", "password": "secret123"}
    )
    assert r.status_code == 201
    assert r.json()["user"]["email"] == "alice@example.com"

    r = await client.post("/api/login", json={"email": "alice@example.com", "password": "secret123"})
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert settings.auth_cookie_name in r.cookies

    # the cookie alone is enough
    r = await client.get("/api/getUserInfo")
    assert r.status_code == 200
    assert r.json()["username"] == "alice"
    assert r.json()["watchlist"] == []

    r = await client.get("/api/check-auth")
    assert r.json() == {"authenticated": True}

    await client.post("/api/logout")
    r = await client.get("/api/check-auth")
    assert r.json() == {"authenticated": False}


@pytest.mark.asyncio
async def test_duplicate_username_conflicts(client: AsyncClient, register):
    await register("alice")
    r = await client.post(
        "/api/signup", json={"username": "alice", "email": "other@example.com", "password": "secret123"}
    )
    assert r.status_code == 409
    assert r.json()["message"] == "Username or email already exists"


@pytest.mark.asyncio
async def test_signup_validation(client: AsyncClient):
    r = await client.post("/api/signup", json={"username": "a!", "email": "a@example.com", "password": "secret123"})
    assert r.status_code == 422
    r = await client.post("/api/signup", json={"username": "alice", "email": "nope", "password": "secret123"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_login_failures(client: AsyncClient, register):
    await register("alice")
    r = await client.post("/api/login", json={"email": "ghost@example.com", "password": "secret123"})
    assert r.status_code == 401
    assert r.json()["message"] == "User not found"

    r = await client.post("/api/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert r.status_code == 401
    assert r.json()["message"] == "Incorrect password"


@pytest.mark.asyncio
async def test_login_is_logged(client: AsyncClient, register):
    headers = await register("alice")
    r = await client.get("/api/activities", params={"filter": "login"}, headers=headers)
    assert [a["action"] for a in r.json()] == ["login"]
    assert r.json()[0]["username"] == "alice"


@pytest.mark.asyncio
async def test_bad_token_is_anonymous(client: AsyncClient):
    r = await client.get("/api/getUserInfo", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["message"] == "Not logged in"


@pytest.mark.asyncio
async def test_profile_envelope_own_vs_public(client: AsyncClient, register):
    alice = await register("alice")
    bob = await register("bob")

    r = await client.get("/api/users/alice", headers=alice)
    assert r.json()["kind"] == "own"
    assert r.json()["user"]["email"] == "alice@example.com"

    r = await client.get("/api/users/alice", headers=bob)
    assert r.json()["kind"] == "public"
    assert "email" not in r.json()["user"]

    r = await client.get("/api/users/nobody")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_update_profile(client: AsyncClient, register):
    headers = await register("alice")
    r = await client.patch("/api/user", json={"bio": "I like dramas", "fullName": "Alice A"}, headers=headers)
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["bio"] == "I like dramas"
    assert user["fullName"] == "Alice A"

    r = await client.get("/api/activities", params={"filter": "account"}, headers=headers)
    acts = r.json()
    assert len(acts) == 1
    assert sorted(acts[0]["details"]["fields"]) == ["bio", "fullName"]


@pytest.mark.asyncio
async def test_user_search(client: AsyncClient, register):
    await register("alice")
    await register("alicia")
    await register("bob")

    r = await client.get("/api/users", params={"search": "alice"})
    body = r.json()
    assert [u["username"] for u in body["exactMatches"]] == ["alice"]
    assert [u["username"] for u in body["similarMatches"]] == []

    r = await client.get("/api/users", params={"search": "ali"})
    assert sorted(u["username"] for u in r.json()["similarMatches"]) == ["alice", "alicia"]

    r = await client.get("/api/users")
    assert r.status_code == 400

    r = await client.get("/api/active-users")
    assert r.json() == {"success": True, "activeUsers": 3}
