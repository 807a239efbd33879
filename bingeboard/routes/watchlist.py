from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.db.crud import users, watchlist
from bingeboard.db.models import User
from bingeboard.db.session import get_async_db
from bingeboard.schemas import WatchlistIn, WatchlistOut
from bingeboard.security import require_user
from bingeboard.services import tmdb_cached
from bingeboard.services.hydration import empty_message, hydrate_shows

router = APIRouter(prefix="/watchlist", tags=["Watchlist"])


@router.get("")
async def get_watchlist(
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, List[str]]:
    return {"watchlist": await users.watchlist_ids(db, current.id)}


@router.get("/shows")
async def get_watchlist_shows(
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    """Watchlist with show details; shows the gateway can't load are left out."""
    ids = await users.watchlist_ids(db, current.id)
    cards = await hydrate_shows(ids, tmdb_cached.get_show)
    return {"shows": cards, "empty_message": empty_message(cards)}


@router.post("/add", response_model=WatchlistOut)
async def add(
    payload: WatchlistIn,
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> WatchlistOut:
    before = await users.watchlist_ids(db, current.id)
    after = await watchlist.add_to_watchlist(db, current.id, payload.show_id)
    return WatchlistOut(watchlist=after, changed=after != before)


@router.post("/remove", response_model=WatchlistOut)
async def remove(
    payload: WatchlistIn,
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> WatchlistOut:
    removed, after = await watchlist.remove_from_watchlist(db, current.id, payload.show_id)
    return WatchlistOut(watchlist=after, changed=removed)
