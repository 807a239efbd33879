# bingeboard/db/crud/activities.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.exceptions import ValidationError
from bingeboard.db.models import Activity, ActivityAction, Friendship

# Filter names used by the activity page
ACTION_FILTERS: Dict[str, Optional[set[ActivityAction]]] = {
    "all": None,
    "login": {ActivityAction.login},
    "reviews": {
        ActivityAction.review_create,
        ActivityAction.review_like,
        ActivityAction.review_dislike,
    },
    "watchlist": {ActivityAction.watchlist_add, ActivityAction.watchlist_remove},
    "account": {ActivityAction.profile_update},
    "watched": {ActivityAction.mark_watched, ActivityAction.watched_episode},
}


def _coerce_action(action: Any) -> ActivityAction:
    try:
        return ActivityAction(action)
    except ValueError:
        raise ValidationError(f"Unknown activity action: {action!r}")


def serialize(a: Activity) -> Dict[str, Any]:
    return {
        "id": a.id,
        "userId": a.user_id,
        "username": a.user.username if a.user is not None else None,
        "action": a.action.value,
        "targetId": a.target_id,
        "details": a.details or {},
        "createdAt": a.created_at.isoformat() if a.created_at else None,
    }


def log_activity(
    db: AsyncSession,
    user_id: int,
    action: Any,
    target_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Activity:
    """
    Stage one Activity row on the session. The caller owns the commit so the
    activity lands in the same transaction as the mutation it describes.
    """
    row = Activity(
        user_id=user_id,
        action=_coerce_action(action),
        target_id=str(target_id) if target_id is not None else None,
        details=details,
    )
    db.add(row)
    return row


async def list_for_user(
    db: AsyncSession,
    user_id: int,
    *,
    filter_name: str = "all",
    limit: int = 100,
) -> List[Activity]:
    if filter_name not in ACTION_FILTERS:
        raise ValidationError(f"Unknown activity filter: {filter_name!r}")
    q = select(Activity).where(Activity.user_id == user_id)
    actions = ACTION_FILTERS[filter_name]
    if actions:
        q = q.where(Activity.action.in_(actions))
    q = q.order_by(Activity.created_at.desc(), Activity.id.desc()).limit(limit)
    return list((await db.execute(q)).scalars().all())


async def list_for_friends(db: AsyncSession, user_id: int, limit: int = 50) -> List[Activity]:
    friend_ids = (
        await db.execute(select(Friendship.friend_id).where(Friendship.user_id == user_id))
    ).scalars().all()
    if not friend_ids:
        return []
    q = (
        select(Activity)
        .where(Activity.user_id.in_(friend_ids))
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
    )
    return list((await db.execute(q)).scalars().all())
