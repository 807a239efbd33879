# bingeboard/routes/auth.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.exceptions import AuthenticationError
from bingeboard.core.settings import settings
from bingeboard.db.crud import activities, users
from bingeboard.db.models import ActivityAction, User
from bingeboard.db.session import get_async_db
from bingeboard.schemas import LoginIn, SignupIn, TokenOut
from bingeboard.security import (
    create_access_token,
    get_optional_user,
    hash_password,
    require_user,
    verify_password,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["auth"])


@router.post("/signup", status_code=201, summary="Create an account")
async def signup(payload: SignupIn, db: AsyncSession = Depends(get_async_db)) -> Dict[str, Any]:
    user = await users.create_user(
        db,
        username=payload.username,
        email=str(payload.email),
        password_hash=hash_password(payload.password),
    )
    logger.info("signup user=%s", user.id)
    return {"success": True, "user": users.own_dict(user)}


@router.post("/login", response_model=TokenOut, summary="Login")
async def login(
    payload: LoginIn,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
) -> TokenOut:
    user = await users.get_by_email(db, str(payload.email))
    if user is None:
        raise AuthenticationError("User not found")
    if not verify_password(payload.password, user.password_hash):
        raise AuthenticationError("Incorrect password")

    activities.log_activity(db, user.id, ActivityAction.login, target_id=str(user.id))
    await db.commit()

    token = create_access_token(user_id=user.id, email=user.email)
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return TokenOut(access_token=token, user_id=user.id, username=user.username)


@router.post("/logout", summary="Logout")
async def logout(response: Response) -> Dict[str, Any]:
    response.delete_cookie(settings.auth_cookie_name)
    return {"success": True}


@router.get("/check-auth", summary="Is the caller logged in")
async def check_auth(user: Optional[User] = Depends(get_optional_user)) -> Dict[str, bool]:
    return {"authenticated": user is not None}


@router.get("/getUserInfo", summary="Current user's name and watchlist")
async def get_user_info(
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    return {
        "success": True,
        "id": current.id,
        "username": current.username,
        "fullName": current.full_name or "",
        "profilePic": current.profile_pic or settings.default_profile_pic,
        "watchlist": await users.watchlist_ids(db, current.id),
    }
