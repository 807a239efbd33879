# bingeboard/tests/test_client_state.py
from unittest.mock import AsyncMock

import httpx
import pytest
import respx
from httpx import ASGITransport

from bingeboard.client.api import ApiError, BingeBoardClient
from bingeboard.client.navigation import guard, resolve
from bingeboard.client.state import (
    EpisodeSelection,
    ModalState,
    MutationStatus,
    ReviewModal,
    WatchlistCarousel,
    WatchlistStore,
)
from bingeboard.main import app

TMDB = "https://api.themoviedb.org/3"


@pytest.fixture
async def api(client):
    # `client` installs the test database override
    async with BingeBoardClient("http://testserver", transport=ASGITransport(app=app)) as c:
        yield c


@pytest.fixture
async def alice(api):
    await api.signup("alice", "alice@example.com", "secret123")
    await api.login("alice@example.com", "secret123")
    return api


# ── carousel ────────────────────────────────────────────────────────────────

@respx.mock
@pytest.mark.asyncio
async def test_carousel_renders_one_card(alice, breaking_bad):
    await alice.add_to_watchlist("1396")
    respx.get(f"{TMDB}/tv/1396").mock(return_value=httpx.Response(200, json=breaking_bad))

    carousel = WatchlistCarousel(alice)
    cards = await carousel.load()

    assert [c["title"] for c in cards] == ["Breaking Bad"]
    assert carousel.empty_message is None


@respx.mock
@pytest.mark.asyncio
async def test_carousel_gateway_failure_shows_empty_state(alice):
    await alice.add_to_watchlist("1396")
    respx.get(f"{TMDB}/tv/1396").mock(return_value=httpx.Response(500, json={}))

    carousel = WatchlistCarousel(alice)
    cards = await carousel.load()

    assert cards == []
    assert carousel.empty_message == "No shows in your watchlist yet."


@pytest.mark.asyncio
async def test_carousel_contains_user_info_failure():
    api = AsyncMock()
    api.get_user_info.side_effect = ApiError(401, "Not logged in")

    carousel = WatchlistCarousel(api)
    cards = await carousel.load()

    assert cards == []
    assert carousel.error == "Not logged in"
    assert carousel.empty_message == "No shows in your watchlist yet."
    api.get_show.assert_not_called()


# ── episode selection ───────────────────────────────────────────────────────

EPISODES = [{"id": 62084 + n, "number": n, "title": f"Episode {n}"} for n in (1, 2, 3)]


@pytest.mark.asyncio
async def test_batched_mark_watched(alice):
    selection = EpisodeSelection(show_id="1396", show_name="Breaking Bad", season_number=1)
    assert not selection.can_submit

    for ep in EPISODES:
        assert selection.toggle(ep) is True
    assert selection.can_submit

    res = await selection.submit(alice)

    assert res["count"] == 3
    assert selection.selected == {}
    assert selection.toast == "3 episode(s) from Breaking Bad marked as watched!"
    watched = await alice.activities("watched")
    assert len(watched) == 1
    assert watched[0]["details"]["count"] == 3


def test_toggle_and_season_change_clear_selection():
    selection = EpisodeSelection(show_id="1396", show_name="Breaking Bad", season_number=1)
    selection.toggle(EPISODES[0])
    selection.toggle(EPISODES[1])
    assert selection.toggle(EPISODES[0]) is False
    assert not selection.is_selected(EPISODES[0]["id"])

    selection.change_season(2)
    assert selection.selected == {}
    assert selection.season_number == 2


@pytest.mark.asyncio
async def test_submit_blocked_while_in_flight():
    api = AsyncMock()
    selection = EpisodeSelection(show_id="1396", show_name="Breaking Bad", season_number=1)
    selection.toggle(EPISODES[0])
    selection.in_flight = True

    assert await selection.submit(api) is None
    api.mark_watched.assert_not_called()


@pytest.mark.asyncio
async def test_failed_submission_keeps_selection():
    api = AsyncMock()
    api.mark_watched.side_effect = ApiError(502, "TMDB: down")
    selection = EpisodeSelection(show_id="1396", show_name="Breaking Bad", season_number=1)
    selection.toggle(EPISODES[0])

    assert await selection.submit(api) is None
    assert selection.is_selected(EPISODES[0]["id"])
    assert selection.error == "TMDB: down"
    assert not selection.in_flight


# ── watchlist store ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_optimistic_remove_commits(alice):
    await alice.add_to_watchlist("1396")
    await alice.add_to_watchlist("1399")
    store = WatchlistStore(alice)
    await store.load()

    mutation = await store.remove("1396")

    assert mutation.status is MutationStatus.COMMITTED
    assert store.items == ["1399"]
    assert store.confirmed == ["1399"]


@pytest.mark.asyncio
async def test_failed_remove_reverts_to_confirmed_list():
    api = AsyncMock()
    api.get_watchlist.return_value = ["1396", "1399"]
    store = WatchlistStore(api)
    await store.load()

    seen_during_request = []

    async def failing_remove(show_id):
        seen_during_request.append(list(store.items))
        raise httpx.ConnectError("offline")

    api.remove_from_watchlist.side_effect = failing_remove
    mutation = await store.remove("1396")

    assert seen_during_request == [["1399"]]
    assert mutation.status is MutationStatus.FAILED
    assert store.items == ["1396", "1399"]
    assert store.notification == "Could not remove show from watchlist."
    api.remove_from_watchlist.assert_awaited_once()


# ── review modal ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_review_modal_flow(alice):
    modal = ReviewModal(show_id="1396")
    modal.open()
    assert modal.state is ModalState.IDLE

    modal.content = "Loved it"
    assert await modal.submit(alice) is False
    assert modal.error == "Please select a rating"

    modal.rating = 4.5
    assert await modal.submit(alice) is True
    assert modal.state is ModalState.SUCCESS
    assert modal.review["rating"] == 4.5

    # success notice still showing
    assert modal.close() is False
    modal.acknowledge_success()
    assert modal.state is ModalState.CLOSED
    assert modal.content == ""


@pytest.mark.asyncio
async def test_review_modal_requires_login_and_text():
    api = AsyncMock()
    api.authenticated = False
    modal = ReviewModal(show_id="1396", rating=3, content="ok")
    modal.open()
    assert await modal.submit(api) is False
    assert modal.error == "You must be logged in to submit a review."

    api.authenticated = True
    modal.content = "  "
    assert await modal.submit(api) is False
    assert modal.error == "Review text is required"
    api.create_review.assert_not_called()


@pytest.mark.asyncio
async def test_review_modal_error_returns_to_idle():
    api = AsyncMock()
    api.authenticated = True
    api.create_review.side_effect = ApiError(400, "Review text must be at most 2000 characters")
    modal = ReviewModal(show_id="1396", rating=3, content="ok")
    modal.open()

    assert await modal.submit(api) is False
    assert modal.state is ModalState.IDLE
    assert modal.error == "Review text must be at most 2000 characters"
    assert modal.close() is True


def test_modal_cannot_close_while_submitting():
    modal = ReviewModal(show_id="1396", state=ModalState.SUBMITTING)
    assert modal.close() is False
    assert modal.state is ModalState.SUBMITTING


# ── navigation ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("path", ["/log", "/profile", "/activity", "/friends/requests", "/home"])
def test_protected_paths_redirect(path):
    assert resolve(path, authenticated=False) == "/login"
    assert resolve(path, authenticated=True) == path


def test_public_paths_render():
    assert resolve("/", authenticated=False) == "/"
    assert resolve("/login", authenticated=False) == "/login"
    assert resolve("/logbook", authenticated=False) == "/logbook"


@pytest.mark.asyncio
async def test_guard_redirects_anonymous_visitor(api):
    assert await guard(api, "/log") == "/login"


@pytest.mark.asyncio
async def test_guard_lets_logged_in_user_through(alice):
    assert await guard(alice, "/log") is None
    await alice.logout()
    assert await guard(alice, "/log") == "/login"
