# bingeboard/db/crud/watchlist.py
from __future__ import annotations

import logging
from typing import List, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.exceptions import ValidationError
from bingeboard.db.crud import activities
from bingeboard.db.crud.users import watchlist_ids
from bingeboard.db.models import ActivityAction, WatchlistEntry

logger = logging.getLogger(__name__)


def _clean_show_id(show_id) -> str:
    value = str(show_id).strip() if show_id is not None else ""
    if not value:
        raise ValidationError("showId is required")
    return value


async def add_to_watchlist(db: AsyncSession, user_id: int, show_id) -> List[str]:
    """
    Append show_id if absent. Adding an id that is already present is a
    successful no-op. Returns the watchlist in insertion order.
    """
    show_id = _clean_show_id(show_id)

    existing = (
        await db.execute(
            select(WatchlistEntry.id).where(
                WatchlistEntry.user_id == user_id, WatchlistEntry.show_id == show_id
            )
        )
    ).scalar_one_or_none()
    if existing is not None:
        return await watchlist_ids(db, user_id)

    db.add(WatchlistEntry(user_id=user_id, show_id=show_id))
    activities.log_activity(db, user_id, ActivityAction.watchlist_add, target_id=show_id)
    try:
        await db.commit()
    except IntegrityError:
        # concurrent add of the same id; the other writer won
        await db.rollback()
    else:
        logger.info("watchlist add user=%s show=%s", user_id, show_id)

    return await watchlist_ids(db, user_id)


async def remove_from_watchlist(db: AsyncSession, user_id: int, show_id) -> Tuple[bool, List[str]]:
    """
    Remove show_id if present; absent ids are a no-op.
    Returns (removed, watchlist).
    """
    show_id = _clean_show_id(show_id)

    res = await db.execute(
        delete(WatchlistEntry).where(
            WatchlistEntry.user_id == user_id, WatchlistEntry.show_id == show_id
        )
    )
    removed = (res.rowcount or 0) > 0
    if removed:
        activities.log_activity(db, user_id, ActivityAction.watchlist_remove, target_id=show_id)
        logger.info("watchlist remove user=%s show=%s", user_id, show_id)
    await db.commit()

    return removed, await watchlist_ids(db, user_id)
