from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.db.crud import reviews, users
from bingeboard.db.models import Review, User
from bingeboard.db.session import get_async_db
from bingeboard.schemas import ReviewIn, VoteIn
from bingeboard.security import require_user

router = APIRouter(tags=["Reviews"])


async def _serialize_many(db: AsyncSession, rows: List[Review]) -> List[Dict[str, Any]]:
    pics = await reviews.profile_pics(db, [r.user_id for r in rows])
    return [reviews.serialize(r, pics.get(r.user_id)) for r in rows]


@router.post("/reviews", status_code=201)
async def create_review(
    payload: ReviewIn,
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    review = await reviews.create_review(
        db,
        current,
        show_id=payload.show_id,
        rating=payload.rating,
        content=payload.content,
        contains_spoiler=payload.contains_spoiler,
    )
    return reviews.serialize(review, current.profile_pic)


@router.put("/reviews/{review_id}")
async def vote_on_review(
    payload: VoteIn,
    review_id: int = Path(..., ge=1),
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    review = await reviews.vote(db, review_id, current.id, payload.action)
    return reviews.serialize(review)


@router.get("/reviews/most-liked")
async def most_liked(
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    return await _serialize_many(db, await reviews.most_liked(db, limit=limit))


@router.get("/reviews/show/{show_id}")
async def reviews_for_show(show_id: str, db: AsyncSession = Depends(get_async_db)) -> List[Dict[str, Any]]:
    return await _serialize_many(db, await reviews.list_for_show(db, show_id))


@router.get("/user/reviews")
async def my_reviews(
    current: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_db),
) -> List[Dict[str, Any]]:
    return await _serialize_many(db, await reviews.list_for_user(db, current.id))


@router.get("/users/{username}/reviews")
async def user_reviews(username: str, db: AsyncSession = Depends(get_async_db)) -> List[Dict[str, Any]]:
    target = await users.require_by_username(db, username)
    return await _serialize_many(db, await reviews.list_for_user(db, target.id))


@router.get("/average-rating")
async def average_rating(
    show_id: str = Query(..., alias="showId", min_length=1),
    db: AsyncSession = Depends(get_async_db),
) -> Dict[str, Any]:
    return await reviews.average_rating(db, show_id)
