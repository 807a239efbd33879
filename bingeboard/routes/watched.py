from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.db.crud import users, watched
from bingeboard.db.models import User
from bingeboard.db.session import get_async_db
from bingeboard.schemas import MarkWatchedIn
from bingeboard.security import require_user

router = APIRouter(prefix="/users", tags=["Watched"])


@router.post("/mark-watched")
async def mark_watched(
    payload: MarkWatchedIn,
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    return await watched.mark_episodes_watched(db, current.id, payload)


@router.get("/recently-watched")
async def my_recently_watched(
    limit: int = Query(default=5, ge=1, le=50),
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    return await watched.recently_watched(db, current.id, limit=limit)


@router.get("/watched/{show_id}")
async def my_watched_episodes(
    show_id: str,
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    return {"showId": show_id, "episodeIds": await watched.watched_episode_ids(db, current.id, show_id)}


@router.get("/{username}/recently-watched")
async def user_recently_watched(
    username: str,
    limit: int = Query(default=5, ge=1, le=50),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    target = await users.require_by_username(db, username)
    return await watched.recently_watched(db, target.id, limit=limit)
