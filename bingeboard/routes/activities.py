from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.db.crud import activities
from bingeboard.db.models import User
from bingeboard.db.session import get_async_db
from bingeboard.security import require_user

router = APIRouter(prefix="/activities", tags=["Activities"])


@router.get("")
async def my_activities(
    filter_name: str = Query(default="all", alias="filter"),
    limit: int = Query(default=100, ge=1, le=500),
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    rows = await activities.list_for_user(db, current.id, filter_name=filter_name, limit=limit)
    return [activities.serialize(a) for a in rows]


@router.get("/friends")
async def friends_activities(
    limit: int = Query(default=50, ge=1, le=200),
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    return [activities.serialize(a) for a in await activities.list_for_friends(db, current.id, limit=limit)]
