from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.exceptions import ValidationError
from bingeboard.db.crud import users
from bingeboard.db.models import User
from bingeboard.db.session import get_async_db
from bingeboard.schemas import ProfileUpdateIn, UserEnvelope
from bingeboard.security import get_optional_user, require_user

router = APIRouter(tags=["Users"])


async def _envelope(db: AsyncSession, target: User, viewer: Optional[User]) -> UserEnvelope:
    own = viewer is not None and viewer.id == target.id
    body = users.own_dict(target) if own else users.public_dict(target)
    body["watchlist"] = await users.watchlist_ids(db, target.id)
    body["friends"] = await users.friend_ids(db, target.id)
    return UserEnvelope(kind="own" if own else "public", user=body)


@router.get("/user", response_model=UserEnvelope)
async def get_own_profile(
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> UserEnvelope:
    return await _envelope(db, current, current)


@router.patch("/user", response_model=UserEnvelope)
async def update_own_profile(
    payload: ProfileUpdateIn,
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> UserEnvelope:
    await users.update_profile(
        db,
        current,
        {"bio": payload.bio, "profilePic": payload.profile_pic, "fullName": payload.full_name},
    )
    return await _envelope(db, current, current)


@router.get("/users")
async def search_users(
    search: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    term = (search or "").strip()
    if not term:
        raise ValidationError("Search query is required")
    found = await users.search(db, term)
    return {
        "exactMatches": [users.public_dict(u) for u in found["exact"]],
        "similarMatches": [users.public_dict(u) for u in found["similar"]],
    }


@router.get("/active-users")
async def active_users(db: AsyncSession = Depends(get_async_db)) -> Dict[str, Any]:
    return {"success": True, "activeUsers": await users.count_users(db)}


@router.get("/users/{username}", response_model=UserEnvelope)
async def get_profile(
    username: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
) -> UserEnvelope:
    target = await users.require_by_username(db, username)
    return await _envelope(db, target, viewer)
