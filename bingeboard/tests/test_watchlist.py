# bingeboard/tests/test_watchlist.py
import httpx
import pytest
import respx
from httpx import AsyncClient

TMDB = "https://api.themoviedb.org/3"


@pytest.mark.asyncio
async def test_add_is_idempotent(client: AsyncClient, register):
    headers = await register("alice")

    r = await client.post("/api/watchlist/add", json={"showId": "1396"}, headers=headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "watchlist": ["1396"], "changed": True}

    r = await client.post("/api/watchlist/add", json={"showId": "1396"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["watchlist"] == ["1396"]
    assert r.json()["changed"] is False


@pytest.mark.asyncio
async def test_watchlist_keeps_insertion_order(client: AsyncClient, register):
    headers = await register("alice")
    for show_id in ("1396", "1399", "60059"):
        await client.post("/api/watchlist/add", json={"showId": show_id}, headers=headers)

    r = await client.get("/api/watchlist", headers=headers)
    assert r.json()["watchlist"] == ["1396", "1399", "60059"]


@pytest.mark.asyncio
async def test_remove_present_and_absent(client: AsyncClient, register):
    headers = await register("alice")
    await client.post("/api/watchlist/add", json={"showId": "1396"}, headers=headers)
    await client.post("/api/watchlist/add", json={"showId": "1399"}, headers=headers)

    r = await client.post("/api/watchlist/remove", json={"showId": "1396"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["watchlist"] == ["1399"]
    assert r.json()["changed"] is True

    r = await client.post("/api/watchlist/remove", json={"showId": "1396"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["watchlist"] == ["1399"]
    assert r.json()["changed"] is False


@pytest.mark.asyncio
async def test_watchlist_changes_are_logged_once(client: AsyncClient, register):
    headers = await register("alice")
    await client.post("/api/watchlist/add", json={"showId": "1396"}, headers=headers)
    await client.post("/api/watchlist/add", json={"showId": "1396"}, headers=headers)
    await client.post("/api/watchlist/remove", json={"showId": "1396"}, headers=headers)
    await client.post("/api/watchlist/remove", json={"showId": "1396"}, headers=headers)

    r = await client.get("/api/activities", params={"filter": "watchlist"}, headers=headers)
    actions = [a["action"] for a in r.json()]
    assert actions == ["watchlist_remove", "watchlist_add"]


@pytest.mark.asyncio
async def test_watchlist_requires_login(client: AsyncClient):
    r = await client.post("/api/watchlist/add", json={"showId": "1396"})
    assert r.status_code == 401
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_blank_show_id_rejected(client: AsyncClient, register):
    headers = await register("alice")
    r = await client.post("/api/watchlist/add", json={"showId": "   "}, headers=headers)
    assert r.status_code == 400


@respx.mock
@pytest.mark.asyncio
async def test_hydrated_watchlist_omits_failed_shows(client: AsyncClient, register, breaking_bad):
    headers = await register("alice")
    await client.post("/api/watchlist/add", json={"showId": "1396"}, headers=headers)
    await client.post("/api/watchlist/add", json={"showId": "999999"}, headers=headers)

    respx.get(f"{TMDB}/tv/1396").mock(return_value=httpx.Response(200, json=breaking_bad))
    respx.get(f"{TMDB}/tv/999999").mock(
        return_value=httpx.Response(404, json={"status_message": "The resource you requested could not be found."})
    )

    r = await client.get("/api/watchlist/shows", headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert [s["id"] for s in body["shows"]] == ["1396"]
    assert body["shows"][0]["title"] == "Breaking Bad"
    assert body["empty_message"] is None


@respx.mock
@pytest.mark.asyncio
async def test_hydrated_watchlist_all_failed_shows_empty_state(client: AsyncClient, register):
    headers = await register("alice")
    await client.post("/api/watchlist/add", json={"showId": "1396"}, headers=headers)
    respx.get(f"{TMDB}/tv/1396").mock(side_effect=httpx.ConnectError("boom"))

    r = await client.get("/api/watchlist/shows", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"shows": [], "empty_message": "No shows in your watchlist yet."}
