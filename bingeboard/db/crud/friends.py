# bingeboard/db/crud/friends.py
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.exceptions import NotFoundError, ValidationError
from bingeboard.db.models import FriendRequest, Friendship, User

logger = logging.getLogger(__name__)


async def _are_friends(db: AsyncSession, a: int, b: int) -> bool:
    row = (
        await db.execute(
            select(Friendship.id).where(Friendship.user_id == a, Friendship.friend_id == b)
        )
    ).first()
    return row is not None


async def _pending(db: AsyncSession, sender_id: int, receiver_id: int) -> FriendRequest | None:
    return (
        await db.execute(
            select(FriendRequest).where(
                FriendRequest.sender_id == sender_id, FriendRequest.receiver_id == receiver_id
            )
        )
    ).scalar_one_or_none()


async def send_request(db: AsyncSession, sender: User, target_id: int) -> None:
    if sender.id == target_id:
        raise ValidationError("Invalid request")
    if await db.get(User, target_id) is None:
        raise NotFoundError("User not found")
    if await _pending(db, sender.id, target_id) or await _are_friends(db, sender.id, target_id):
        raise ValidationError("Already sent or already friends")

    db.add(FriendRequest(sender_id=sender.id, receiver_id=target_id))
    await db.commit()
    logger.info("friend request %s -> %s", sender.id, target_id)


async def accept_request(db: AsyncSession, receiver: User, requester_id: int) -> None:
    """
    Accepting writes both friendship directions and drops the request in a
    single commit, so the pair is symmetric once accepted.
    """
    req = await _pending(db, requester_id, receiver.id)
    if req is None:
        raise ValidationError("No such request")

    await db.delete(req)
    # a crossed request in the other direction is now redundant
    await db.execute(
        delete(FriendRequest).where(
            FriendRequest.sender_id == receiver.id, FriendRequest.receiver_id == requester_id
        )
    )
    if not await _are_friends(db, requester_id, receiver.id):
        db.add(Friendship(user_id=requester_id, friend_id=receiver.id))
    if not await _are_friends(db, receiver.id, requester_id):
        db.add(Friendship(user_id=receiver.id, friend_id=requester_id))
    await db.commit()
    logger.info("friend request accepted %s <-> %s", requester_id, receiver.id)


async def decline_request(db: AsyncSession, receiver: User, requester_id: int) -> None:
    req = await _pending(db, requester_id, receiver.id)
    if req is None:
        raise ValidationError("No such request")
    await db.delete(req)
    await db.commit()


async def pending_senders(db: AsyncSession, user_id: int) -> List[User]:
    res = await db.execute(
        select(User)
        .join(FriendRequest, FriendRequest.sender_id == User.id)
        .where(FriendRequest.receiver_id == user_id)
        .order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc())
    )
    return list(res.scalars().all())


async def list_friends(db: AsyncSession, user_id: int) -> List[User]:
    res = await db.execute(
        select(User)
        .join(Friendship, Friendship.friend_id == User.id)
        .where(Friendship.user_id == user_id)
        .order_by(User.username)
    )
    return list(res.scalars().all())
