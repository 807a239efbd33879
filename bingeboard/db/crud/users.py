# bingeboard/db/crud/users.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.exceptions import ConflictError, NotFoundError
from bingeboard.core.settings import settings
from bingeboard.db.crud import activities
from bingeboard.db.models import ActivityAction, Friendship, User, WatchlistEntry


def public_dict(u: User) -> Dict[str, Any]:
    return {
        "id": u.id,
        "username": u.username,
        "fullName": u.full_name or "",
        "profilePic": u.profile_pic or settings.default_profile_pic,
        "bio": u.bio or "",
        "createdAt": u.created_at.isoformat() if u.created_at else None,
    }


def own_dict(u: User) -> Dict[str, Any]:
    out = public_dict(u)
    out["email"] = u.email
    return out


async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.email == email.strip().lower()))
    return res.scalar_one_or_none()


async def get_by_username(db: AsyncSession, username: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.username == username))
    return res.scalar_one_or_none()


async def require_by_username(db: AsyncSession, username: str) -> User:
    user = await get_by_username(db, username)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def create_user(db: AsyncSession, *, username: str, email: str, password_hash: str) -> User:
    email = email.strip().lower()
    username = username.strip()

    existing = (
        await db.execute(select(User.id).where(or_(User.username == username, User.email == email)))
    ).first()
    if existing:
        raise ConflictError("Username or email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=password_hash,
        profile_pic=settings.default_profile_pic,
        bio="",
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # lost a race with a concurrent signup
        await db.rollback()
        raise ConflictError("Username or email already exists")
    await db.refresh(user)
    return user


async def update_profile(db: AsyncSession, user: User, fields: Dict[str, Any]) -> List[str]:
    """Apply non-None fields; returns the names that actually changed."""
    columns = {"bio": "bio", "profilePic": "profile_pic", "fullName": "full_name"}
    changed: List[str] = []
    for key, attr in columns.items():
        value = fields.get(key)
        if value is None or getattr(user, attr) == value:
            continue
        setattr(user, attr, value)
        changed.append(key)

    if changed:
        activities.log_activity(
            db, user.id, ActivityAction.profile_update, target_id=str(user.id), details={"fields": changed}
        )
        await db.commit()
        await db.refresh(user)
    return changed


async def watchlist_ids(db: AsyncSession, user_id: int) -> List[str]:
    rows = (
        await db.execute(
            select(WatchlistEntry.show_id)
            .where(WatchlistEntry.user_id == user_id)
            .order_by(WatchlistEntry.id)
        )
    ).scalars().all()
    return list(rows)


async def friend_ids(db: AsyncSession, user_id: int) -> List[int]:
    rows = (
        await db.execute(select(Friendship.friend_id).where(Friendship.user_id == user_id))
    ).scalars().all()
    return [int(x) for x in rows]


async def search(db: AsyncSession, term: str) -> Dict[str, List[User]]:
    """
    Exact matches (username or email equal to the term) first; similar
    matches are case-insensitive substring hits minus the exact ones.
    """
    exact = (
        await db.execute(select(User).where(or_(User.username == term, User.email == term)))
    ).scalars().all()

    pattern = f"%{term.lower()}%"
    similar = (
        await db.execute(
            select(User).where(
                or_(func.lower(User.username).like(pattern), func.lower(User.email).like(pattern))
            )
        )
    ).scalars().all()

    exact_ids = {u.id for u in exact}
    return {
        "exact": list(exact),
        "similar": [u for u in similar if u.id not in exact_ids],
    }


async def count_users(db: AsyncSession) -> int:
    return int((await db.execute(select(func.count(User.id)))).scalar_one())
