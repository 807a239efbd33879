# bingeboard/client/api.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx answer from the BingeBoard API."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text or f"HTTP {r.status_code}"
    if isinstance(body, dict):
        msg = body.get("message") or body.get("detail")
        if isinstance(msg, str):
            return msg
        if msg is not None:
            return str(msg)
    return f"HTTP {r.status_code}"


class BingeBoardClient:
    """
    Async wrapper over the /api endpoints.

    The access token returned by `login` is kept on the instance and sent as
    a bearer header on every later call.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        token: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "BingeBoardClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {}) or {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        r = await self._http.request(method, f"/api{path}", headers=headers, **kwargs)
        if r.status_code >= 400:
            message = _error_message(r)
            logger.debug("%s %s -> %s %s", method, path, r.status_code, message)
            raise ApiError(r.status_code, message)
        if not r.content:
            return None
        return r.json()

    # ── auth ───────────────────────────────────────────────────────────────
    async def signup(self, username: str, email: str, password: str) -> Dict[str, Any]:
        return await self._request(
            "POST", "/signup", json={"username": username, "email": email, "password": password}
        )

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._request("POST", "/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        return data

    async def logout(self) -> None:
        await self._request("POST", "/logout")
        self.token = None

    async def check_auth(self) -> bool:
        data = await self._request("GET", "/check-auth")
        return bool(data.get("authenticated"))

    async def get_user_info(self) -> Dict[str, Any]:
        return await self._request("GET", "/getUserInfo")

    # ── users ──────────────────────────────────────────────────────────────
    async def get_profile(self, username: Optional[str] = None) -> Dict[str, Any]:
        return await self._request("GET", f"/users/{username}" if username else "/user")

    async def update_profile(self, **fields: Any) -> Dict[str, Any]:
        return await self._request("PATCH", "/user", json=fields)

    async def search_users(self, term: str) -> Dict[str, Any]:
        return await self._request("GET", "/users", params={"search": term})

    # ── watchlist ──────────────────────────────────────────────────────────
    async def get_watchlist(self) -> List[str]:
        return (await self._request("GET", "/watchlist"))["watchlist"]

    async def add_to_watchlist(self, show_id: str) -> Dict[str, Any]:
        return await self._request("POST", "/watchlist/add", json={"showId": str(show_id)})

    async def remove_from_watchlist(self, show_id: str) -> Dict[str, Any]:
        return await self._request("POST", "/watchlist/remove", json={"showId": str(show_id)})

    # ── watched episodes ───────────────────────────────────────────────────
    async def mark_watched(
        self,
        *,
        show_id: str,
        show_name: str,
        season_number: int,
        episodes: List[Dict[str, Any]],
        poster_path: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {
            "showId": str(show_id),
            "showName": show_name,
            "posterPath": poster_path,
            "seasonNumber": season_number,
            "episodes": episodes,
        }
        return await self._request("POST", "/users/mark-watched", json=payload)

    async def recently_watched(self, username: Optional[str] = None) -> List[Dict[str, Any]]:
        path = f"/users/{username}/recently-watched" if username else "/users/recently-watched"
        return await self._request("GET", path)

    # ── reviews ────────────────────────────────────────────────────────────
    async def create_review(
        self, show_id: str, rating: float, content: str, contains_spoiler: bool = False
    ) -> Dict[str, Any]:
        payload = {
            "showId": str(show_id),
            "rating": rating,
            "content": content,
            "containsSpoiler": contains_spoiler,
        }
        return await self._request("POST", "/reviews", json=payload)

    async def vote_review(self, review_id: int, action: str) -> Dict[str, Any]:
        return await self._request("PUT", f"/reviews/{review_id}", json={"action": action})

    async def show_reviews(self, show_id: str) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/reviews/show/{show_id}")

    async def average_rating(self, show_id: str) -> Dict[str, Any]:
        return await self._request("GET", "/average-rating", params={"showId": str(show_id)})

    # ── friends / activity ─────────────────────────────────────────────────
    async def send_friend_request(self, user_id: int) -> Dict[str, Any]:
        return await self._request("POST", f"/friends/request/{user_id}")

    async def accept_friend_request(self, user_id: int) -> Dict[str, Any]:
        return await self._request("POST", f"/friends/accept/{user_id}")

    async def decline_friend_request(self, user_id: int) -> Dict[str, Any]:
        return await self._request("POST", f"/friends/decline/{user_id}")

    async def friend_requests(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/friends/requests")

    async def activities(self, filter_name: str = "all") -> List[Dict[str, Any]]:
        return await self._request("GET", "/activities", params={"filter": filter_name})

    async def friends_activities(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/activities/friends")

    # ── shows (metadata gateway proxy) ─────────────────────────────────────
    async def get_show(self, show_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/shows/{show_id}")

    async def get_season(self, show_id: str, season_number: int) -> Dict[str, Any]:
        return await self._request("GET", f"/shows/{show_id}/season/{season_number}")

    async def search_shows(self, query: str) -> Dict[str, Any]:
        return await self._request("GET", "/shows/search", params={"query": query})

    async def trending(self, window: str = "week") -> List[Dict[str, Any]]:
        return await self._request("GET", "/shows/trending", params={"window": window})
