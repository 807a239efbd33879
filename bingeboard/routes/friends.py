from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.settings import settings
from bingeboard.db.crud import friends, users
from bingeboard.db.models import User
from bingeboard.db.session import get_async_db
from bingeboard.security import require_user

router = APIRouter(prefix="/friends", tags=["Friends"])


def _brief(u: User) -> Dict[str, Any]:
    return {
        "id": u.id,
        "username": u.username,
        "profilePic": u.profile_pic or settings.default_profile_pic,
    }


@router.post("/request/{user_id}")
async def send_request(
    user_id: int = Path(..., ge=1),
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    await friends.send_request(db, current, user_id)
    return {"success": True, "message": "Friend request sent"}


@router.post("/accept/{user_id}")
async def accept_request(
    user_id: int = Path(..., ge=1),
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    await friends.accept_request(db, current, user_id)
    return {"success": True, "message": "Friend request accepted"}


@router.post("/decline/{user_id}")
async def decline_request(
    user_id: int = Path(..., ge=1),
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    await friends.decline_request(db, current, user_id)
    return {"success": True, "message": "Friend request declined"}


@router.get("/requests")
async def pending_requests(
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    return [_brief(u) for u in await friends.pending_senders(db, current.id)]


@router.get("/list/{username}")
async def list_friends(username: str, db: AsyncSession = Depends(get_async_db)) -> List[Dict[str, Any]]:
    target = await users.require_by_username(db, username)
    return [_brief(u) for u in await friends.list_friends(db, target.id)]
