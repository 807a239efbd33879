# bingeboard/security.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.exceptions import AuthenticationError
from bingeboard.core.settings import settings
from bingeboard.db.models import User
from bingeboard.db.session import get_async_db

ALGORITHM = "HS256"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)
# auto_error=False so a missing header can fall back to the session cookie
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def create_access_token(*, user_id: int, email: str, minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=minutes or settings.access_token_expire_minutes)
    payload = {
        "sub": str(user_id),
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "type": "access",
    }
    return jwt.encode(payload, settings.auth_secret, algorithm=ALGORITHM)


def _token_from_request(
    request: Request, creds: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if creds and creds.scheme and creds.scheme.lower() == "bearer":
        return creds.credentials
    return request.cookies.get(settings.auth_cookie_name)


async def _user_from_token(session: AsyncSession, token: str) -> Optional[User]:
    try:
        data = jwt.decode(token, settings.auth_secret, algorithms=[ALGORITHM])
        user_id = int(data.get("sub"))
        email = data.get("email")
    except (JWTError, TypeError, ValueError):
        return None
    user = await session.get(User, user_id)
    if user is None or user.email != email:
        return None
    return user


async def get_optional_user(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_async_db),
) -> Optional[User]:
    token = _token_from_request(request, creds)
    if not token:
        return None
    return await _user_from_token(session, token)


async def get_current_user(
    user: Optional[User] = Depends(get_optional_user),
) -> User:
    if user is None:
        raise AuthenticationError("Not logged in")
    return user


# Alias used by routers
require_user = get_current_user
