# bingeboard/services/search.py
from __future__ import annotations

from typing import Any, Dict, List

from bingeboard.integrations.tmdb import image_url


def _title(item: Dict[str, Any]) -> str:
    return (item.get("name") or item.get("original_name") or item.get("title") or "").strip()


def serialize_result(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": item.get("id"),
        "title": _title(item) or None,
        "poster_path": item.get("poster_path"),
        "poster_url": image_url(item.get("poster_path")),
        "overview": item.get("overview"),
        "vote_average": item.get("vote_average"),
        "first_air_date": item.get("first_air_date"),
    }


def partition_matches(query: str, results: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Split search results into titles equal to the query (ignoring case
    and surrounding whitespace) and everything else. Order is preserved
    inside each group.
    """
    needle = (query or "").strip().casefold()
    exact: List[Dict[str, Any]] = []
    broadened: List[Dict[str, Any]] = []
    for item in results:
        if needle and _title(item).casefold() == needle:
            exact.append(serialize_result(item))
        else:
            broadened.append(serialize_result(item))
    return {"exactMatches": exact, "broadenedMatches": broadened}
