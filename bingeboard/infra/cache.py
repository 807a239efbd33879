# bingeboard/infra/cache.py
from __future__ import annotations

import json
from typing import Any, Optional

import redis.asyncio as redis

from bingeboard.core.settings import settings

_redis: Optional[redis.Redis] = None


def init(url: str) -> None:
    """Synchronous init. Stores a global Redis client."""
    global _redis
    _redis = redis.from_url(url, decode_responses=True)


def client() -> redis.Redis:
    """Return the Redis client, initialising lazily from settings.redis_url."""
    global _redis
    if _redis is None:
        if not settings.redis_url:
            raise RuntimeError("Redis cache not initialized and REDIS_URL not set.")
        init(settings.redis_url)
    return _redis  # type: ignore[return-value]


async def close() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


async def get_json(key: str) -> Any:
    val = await client().get(key)
    if val is None:
        return None
    try:
        return json.loads(val)
    except ValueError:
        return None


async def set_json(key: str, value: Any, ttl: int = 3600) -> None:
    data = json.dumps(value, ensure_ascii=False)
    await client().set(key, data, ex=ttl)
