# bingeboard/db/crud/reviews.py
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.exceptions import NotFoundError, ValidationError
from bingeboard.db.crud import activities
from bingeboard.db.models import ActivityAction, Review, ReviewVote, User, VoteKind

logger = logging.getLogger(__name__)

MAX_CONTENT = 2000
MAX_RATING = 5.0


def _voters(r: Review, kind: VoteKind) -> List[int]:
    return [v.user_id for v in r.votes if v.kind == kind]


def serialize(r: Review, profile_pic: Optional[str] = None) -> Dict[str, Any]:
    likes = _voters(r, VoteKind.like)
    dislikes = _voters(r, VoteKind.dislike)
    out = {
        "id": r.id,
        "showId": r.show_id,
        "userId": r.user_id,
        "username": r.username,
        "rating": float(r.rating),
        "content": r.content,
        "containsSpoiler": bool(r.contains_spoiler),
        "likes": likes,
        "dislikes": dislikes,
        "likeCount": len(likes),
        "dislikeCount": len(dislikes),
        "createdAt": r.created_at.isoformat() if r.created_at else None,
    }
    if profile_pic is not None:
        out["userProfilePic"] = profile_pic
    return out


def validate_review(rating: float, content: str) -> str:
    """Returns the stripped content; raises ValidationError otherwise."""
    text = (content or "").strip()
    if not text:
        raise ValidationError("Review text is required")
    if len(text) > MAX_CONTENT:
        raise ValidationError(f"Review text must be at most {MAX_CONTENT} characters")
    if rating is None or not math.isfinite(rating) or rating <= 0:
        raise ValidationError("Please select a rating")
    if rating > MAX_RATING:
        raise ValidationError(f"Rating must be at most {MAX_RATING:g}")
    return text


async def _load(db: AsyncSession, review_id: int) -> Review:
    res = await db.execute(
        select(Review).where(Review.id == review_id).execution_options(populate_existing=True)
    )
    review = res.scalar_one_or_none()
    if review is None:
        raise NotFoundError("Review not found")
    return review


async def create_review(
    db: AsyncSession,
    user: User,
    *,
    show_id: str,
    rating: float,
    content: str,
    contains_spoiler: bool = False,
) -> Review:
    text = validate_review(rating, content)
    review = Review(
        show_id=str(show_id),
        user_id=user.id,
        username=user.username,
        rating=float(rating),
        content=text,
        contains_spoiler=bool(contains_spoiler),
    )
    db.add(review)
    await db.flush()
    activities.log_activity(
        db,
        user.id,
        ActivityAction.review_create,
        target_id=str(review.id),
        details={"showId": str(show_id), "rating": float(rating)},
    )
    await db.commit()
    logger.info("review created id=%s user=%s show=%s", review.id, user.id, show_id)
    return await _load(db, review.id)


async def vote(db: AsyncSession, review_id: int, user_id: int, action: str) -> Review:
    """
    Toggle a like/dislike. Repeating the same vote withdraws it; the
    opposite vote replaces it. Only added votes are logged as activity.
    """
    try:
        kind = VoteKind(action)
    except ValueError:
        raise ValidationError("action must be 'like' or 'dislike'")

    review = await _load(db, review_id)
    current = next((v for v in review.votes if v.user_id == user_id), None)

    added = False
    if current is None:
        review.votes.append(ReviewVote(user_id=user_id, kind=kind))
        added = True
    elif current.kind == kind:
        review.votes.remove(current)
    else:
        current.kind = kind
        added = True

    if added:
        activity = ActivityAction.review_like if kind == VoteKind.like else ActivityAction.review_dislike
        activities.log_activity(
            db, user_id, activity, target_id=str(review_id), details={"showId": review.show_id}
        )
    await db.commit()
    return await _load(db, review_id)


async def list_for_show(db: AsyncSession, show_id: str) -> List[Review]:
    res = await db.execute(
        select(Review).where(Review.show_id == str(show_id)).order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(res.scalars().all())


async def list_for_user(db: AsyncSession, user_id: int, limit: int = 50) -> List[Review]:
    res = await db.execute(
        select(Review)
        .where(Review.user_id == user_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
    )
    return list(res.scalars().all())


async def most_liked(db: AsyncSession, limit: int = 10) -> List[Review]:
    like_count = (
        select(ReviewVote.review_id, func.count(ReviewVote.id).label("n"))
        .where(ReviewVote.kind == VoteKind.like)
        .group_by(ReviewVote.review_id)
        .subquery()
    )
    res = await db.execute(
        select(Review)
        .outerjoin(like_count, like_count.c.review_id == Review.id)
        .order_by(func.coalesce(like_count.c.n, 0).desc(), Review.created_at.desc(), Review.id.desc())
        .limit(limit)
    )
    return list(res.scalars().all())


async def average_rating(db: AsyncSession, show_id: str) -> Dict[str, Any]:
    avg, count = (
        await db.execute(
            select(func.avg(Review.rating), func.count(Review.id)).where(Review.show_id == str(show_id))
        )
    ).one()
    return {
        "showId": str(show_id),
        "average": round(float(avg), 2) if avg is not None else None,
        "count": int(count or 0),
    }


async def profile_pics(db: AsyncSession, user_ids: List[int]) -> Dict[int, Optional[str]]:
    if not user_ids:
        return {}
    rows = (await db.execute(select(User.id, User.profile_pic).where(User.id.in_(set(user_ids))))).all()
    return {int(uid): pic for uid, pic in rows}
