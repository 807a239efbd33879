from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Path, Query

from bingeboard.integrations.tmdb import image_url, tmdb_client
from bingeboard.services import tmdb_cached
from bingeboard.services.search import partition_matches, serialize_result

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/shows", tags=["Shows"])


# ---------------------------------------------------------
# SERIALISERS
# ---------------------------------------------------------

def _serialize_detail(data: Dict[str, Any]) -> Dict[str, Any]:
    seasons = [
        {
            "season_number": s.get("season_number"),
            "name": s.get("name"),
            "episode_count": s.get("episode_count"),
            "poster_url": image_url(s.get("poster_path")),
        }
        for s in data.get("seasons") or []
    ]
    return {
        "id": data.get("id"),
        "title": data.get("name") or data.get("original_name"),
        "overview": data.get("overview"),
        "poster_path": data.get("poster_path"),
        "poster_url": image_url(data.get("poster_path")),
        "backdrop_url": image_url(data.get("backdrop_path"), "w1280"),
        "first_air_date": data.get("first_air_date"),
        "vote_average": data.get("vote_average"),
        "genres": [g.get("name") for g in data.get("genres") or [] if g.get("name")],
        "number_of_seasons": data.get("number_of_seasons"),
        "seasons": seasons,
    }


# ---------------------------------------------------------
# ROUTES
# ---------------------------------------------------------

@router.get("/search")
async def search_shows(
    query: str = Query(..., min_length=1, max_length=200),
    page: int = Query(default=1, ge=1, le=50),
) -> Dict[str, List[Dict[str, Any]]]:
    results = await tmdb_client.search_tv(query, page=page)
    return partition_matches(query, results)


@router.get("/trending")
async def trending_shows(window: str = Query(default="week")) -> List[Dict[str, Any]]:
    return [serialize_result(item) for item in await tmdb_client.trending_tv(window)]


@router.get("/{show_id}")
async def show_detail(show_id: int = Path(..., ge=1)) -> Dict[str, Any]:
    return _serialize_detail(await tmdb_cached.get_show(show_id))


@router.get("/{show_id}/season/{season_number}")
async def show_season(
    show_id: int = Path(..., ge=1),
    season_number: int = Path(..., ge=0),
) -> Dict[str, Any]:
    episodes = await tmdb_cached.get_season(show_id, season_number)
    return {"showId": show_id, "seasonNumber": season_number, "episodes": episodes}
