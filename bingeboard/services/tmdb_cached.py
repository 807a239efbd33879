# bingeboard/services/tmdb_cached.py
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List

from bingeboard.core.settings import settings
from bingeboard.infra import cache
from bingeboard.integrations.tmdb import tmdb_client

logger = logging.getLogger(__name__)


async def _cached(key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
    # Cache read; a Redis hiccup falls through to the direct fetch
    try:
        val = await cache.get_json(key)
        if val:
            return val
    except Exception as e:
        logger.debug("cache read failed for %s: %r", key, e)

    data = await fetch()

    if data:
        try:
            await cache.set_json(key, data, ttl=settings.tmdb_cache_ttl)
        except Exception as e:
            logger.debug("cache write failed for %s: %r", key, e)
    return data


async def get_show(show_id: Any) -> Dict[str, Any]:
    return await _cached(f"tmdb:tv:{show_id}", lambda: tmdb_client.tv_detail(show_id))


async def get_season(show_id: Any, season_number: int) -> List[Dict[str, Any]]:
    return await _cached(
        f"tmdb:tv:{show_id}:season:{int(season_number)}",
        lambda: tmdb_client.season(show_id, season_number),
    )
