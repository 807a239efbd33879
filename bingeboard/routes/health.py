# bingeboard/routes/health.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.db.session import get_async_db
from bingeboard.infra import cache

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


# --- simple DB ping ---------------------------------------------------------
async def ping_db(db: AsyncSession) -> bool:
    try:
        res = await db.execute(text("SELECT 1"))
        return res.scalar() == 1
    except Exception as e:
        logger.warning("db ping failed: %r", e)
        return False


# --- Redis ping; the cache is optional so this never fails readiness ---------
async def ping_redis() -> Dict[str, Any]:
    try:
        return {"ok": bool(await cache.client().ping())}
    except Exception as e:
        return {"ok": False, "error": str(e)}


@router.get("/health", summary="Liveness")
async def health() -> Dict[str, bool]:
    return {"ok": True}


@router.get("/ready", summary="Readiness")
async def ready(db: AsyncSession = Depends(get_async_db)):
    db_ok = await ping_db(db)
    body = {"ok": db_ok, "db": db_ok, "redis": await ping_redis()}
    return JSONResponse(body, status_code=200 if db_ok else 503)
