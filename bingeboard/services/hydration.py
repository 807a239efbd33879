# bingeboard/services/hydration.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from bingeboard.integrations.tmdb import image_url

logger = logging.getLogger(__name__)

EMPTY_WATCHLIST_MESSAGE = "No shows in your watchlist yet."

ShowFetcher = Callable[[str], Awaitable[Dict[str, Any]]]


def show_card(show_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Card-shaped subset of a TMDb /tv/{id} payload."""
    return {
        "id": str(data.get("id") or show_id),
        "title": data.get("name") or data.get("original_name") or data.get("title"),
        "poster_path": data.get("poster_path"),
        "poster_url": image_url(data.get("poster_path"), "w300"),
        "overview": data.get("overview"),
        "vote_average": data.get("vote_average") or 0.0,
        "number_of_seasons": data.get("number_of_seasons") or 0,
        "number_of_episodes": data.get("number_of_episodes") or 0,
    }


async def hydrate_shows(show_ids: Iterable[str], fetch: ShowFetcher) -> List[Dict[str, Any]]:
    """
    Fetch every show in parallel and keep the ones that came back.

    A failed fetch drops that show from the result instead of failing the
    whole list. Surviving shows keep the order of `show_ids`.
    """
    ids = [str(i) for i in show_ids]
    if not ids:
        return []

    results = await asyncio.gather(*(fetch(i) for i in ids), return_exceptions=True)

    out: List[Dict[str, Any]] = []
    for show_id, res in zip(ids, results):
        if isinstance(res, BaseException):
            logger.info("omitting show %s from hydration: %r", show_id, res)
            continue
        if not res:
            continue
        out.append(show_card(show_id, res))
    return out


def empty_message(cards: List[Dict[str, Any]]) -> Optional[str]:
    return None if cards else EMPTY_WATCHLIST_MESSAGE
