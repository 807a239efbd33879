import logging
from typing import Any, Dict, List, Optional

import httpx

from bingeboard.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from bingeboard.core.settings import settings

logger = logging.getLogger(__name__)

TRENDING_WINDOWS = ("day", "week")


def image_url(path: Optional[str], size: str = "w500") -> Optional[str]:
    if not path:
        return None
    if path.startswith("http://") or path.startswith("https://"):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return f"{settings.tmdb_image_base}/{size}{path}"


def map_episode(ep: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": ep.get("id"),
        "number": ep.get("episode_number"),
        "title": ep.get("name"),
        "rating": ep.get("vote_average"),
        "duration": f"{ep.get('runtime') or 24}m",
        "overview": ep.get("overview"),
        "air_date": ep.get("air_date"),
        "still_url": image_url(ep.get("still_path"), "w300"),
    }


class TMDBClient:
    """Read-only client for the TMDb TV catalogue."""

    def __init__(
        self,
        api_key: Optional[str],
        bearer: Optional[str] = None,
        base: str = "https://api.themoviedb.org/3",
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.bearer = bearer
        self.base = base.rstrip("/")
        self.timeout = timeout

    def _auth(self) -> tuple[Dict[str, str], Dict[str, Any]]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        params: Dict[str, Any] = {"language": "en-US"}
        if self.bearer:
            headers["Authorization"] = f"Bearer {self.bearer}"
        elif self.api_key:
            params["api_key"] = self.api_key
        return headers, params

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers, base_params = self._auth()
        if params:
            base_params.update(params)
        url = f"{self.base}/{path.lstrip('/')}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.get(url, params=base_params, headers=headers)
        except httpx.HTTPError as e:
            logger.error("TMDB request failed for %s: %r", path, e)
            raise ExternalServiceError("TMDB", str(e) or type(e).__name__)

        if r.status_code != 200:
            message = f"HTTP {r.status_code}"
            try:
                message = (r.json() or {}).get("status_message") or message
            except ValueError:
                pass
            logger.warning("TMDB %s -> HTTP %s", path, r.status_code)
            if r.status_code == 404:
                raise NotFoundError(message)
            raise ExternalServiceError("TMDB", message)
        return r.json() or {}

    async def tv_detail(self, tv_id: Any, append_seasons: Optional[List[int]] = None) -> Dict[str, Any]:
        if not tv_id:
            raise ValidationError("Show ID is required")
        params: Dict[str, Any] = {}
        if append_seasons:
            params["append_to_response"] = ",".join(f"season/{int(n)}" for n in append_seasons)
        return await self._get(f"tv/{tv_id}", params)

    async def season(self, tv_id: Any, season_number: Any) -> List[Dict[str, Any]]:
        if not tv_id or season_number is None or season_number == "":
            raise ValidationError("Show ID and season number are required")
        data = await self._get(f"tv/{tv_id}/season/{season_number}")
        return [map_episode(ep) for ep in data.get("episodes") or []]

    async def search_tv(self, q: str, page: int = 1) -> List[Dict[str, Any]]:
        query = (q or "").strip()
        if not query:
            return []
        data = await self._get("search/tv", {"query": query, "page": page, "include_adult": "false"})
        return data.get("results") or []

    async def trending_tv(self, window: str = "week") -> List[Dict[str, Any]]:
        if window not in TRENDING_WINDOWS:
            raise ValidationError("window must be 'day' or 'week'")
        data = await self._get(f"trending/tv/{window}")
        return data.get("results") or []


tmdb_client = TMDBClient(
    api_key=settings.tmdb_api_key,
    bearer=settings.tmdb_bearer_token,
    base=settings.tmdb_base_url,
    timeout=settings.tmdb_timeout,
)
