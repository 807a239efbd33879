# bingeboard/db/crud/watched.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Set

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bingeboard.core.exceptions import ConflictError, ValidationError
from bingeboard.db.crud import activities
from bingeboard.db.models import Activity, ActivityAction, WatchedEpisode

logger = logging.getLogger(__name__)


def watched_message(count: int, show_name: str) -> str:
    return f"{count} episode(s) from {show_name} marked as watched!"


async def _already_watched(db: AsyncSession, user_id: int, show_id: str, episode_ids: List[int]) -> Set[int]:
    rows = (
        await db.execute(
            select(WatchedEpisode.episode_id).where(
                WatchedEpisode.user_id == user_id,
                WatchedEpisode.show_id == show_id,
                WatchedEpisode.episode_id.in_(episode_ids),
            )
        )
    ).scalars().all()
    return set(rows)


async def mark_episodes_watched(db: AsyncSession, user_id: int, payload: Any) -> Dict[str, Any]:
    """
    Record a batch of episodes of one show/season as watched.

    One `mark_watched` Activity is written per call, however many episodes
    are in the batch. Episode rows are keyed on (user, show, episode id), so
    re-marking an episode does not duplicate it; the Activity is still
    logged because the user did submit the batch.
    """
    episodes = list(payload.episodes or [])
    if not episodes:
        raise ValidationError("At least one episode is required")

    show_id = str(payload.show_id)
    # the same episode may appear twice in one batch
    by_id: Dict[int, Any] = {}
    for ep in episodes:
        by_id.setdefault(int(ep.id), ep)

    details = {
        "showName": payload.show_name,
        "posterPath": payload.poster_path,
        "seasonNumber": int(payload.season_number),
        "episodes": [{"id": int(e.id), "number": e.number, "name": e.name} for e in by_id.values()],
        "count": len(by_id),
    }

    # second pass only runs when a concurrent request recorded some episodes first
    for attempt in (1, 2):
        already = await _already_watched(db, user_id, show_id, list(by_id))
        new_count = 0
        for ep_id, ep in by_id.items():
            if ep_id in already:
                continue
            db.add(
                WatchedEpisode(
                    user_id=user_id,
                    show_id=show_id,
                    season_number=int(payload.season_number),
                    episode_id=ep_id,
                    episode_number=ep.number,
                    episode_name=ep.name,
                )
            )
            new_count += 1

        activities.log_activity(db, user_id, ActivityAction.mark_watched, target_id=show_id, details=details)
        try:
            await db.commit()
            break
        except IntegrityError:
            await db.rollback()
            logger.info("mark watched race user=%s show=%s attempt=%d", user_id, show_id, attempt)
    else:
        raise ConflictError("Episodes were updated by another request, please retry")

    logger.info(
        "mark watched user=%s show=%s season=%s episodes=%d new=%d",
        user_id, show_id, payload.season_number, len(by_id), new_count,
    )
    return {
        "success": True,
        "message": watched_message(len(by_id), payload.show_name),
        "count": len(by_id),
        "newlyRecorded": new_count,
    }


async def recently_watched(db: AsyncSession, user_id: int, limit: int = 5) -> List[Dict[str, Any]]:
    """Distinct shows from the newest mark_watched activities, newest first."""
    latest = (
        select(func.max(Activity.id).label("last_id"))
        .where(
            Activity.user_id == user_id,
            Activity.action == ActivityAction.mark_watched,
            Activity.target_id.is_not(None),
        )
        .group_by(Activity.target_id)
        .subquery()
    )
    rows = (
        await db.execute(
            select(Activity)
            .join(latest, Activity.id == latest.c.last_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(limit)
        )
    ).scalars().all()

    out: List[Dict[str, Any]] = []
    for a in rows:
        d = a.details or {}
        out.append(
            {
                "showId": a.target_id,
                "showName": d.get("showName"),
                "posterPath": d.get("posterPath"),
                "seasonNumber": d.get("seasonNumber"),
                "watchedAt": a.created_at.isoformat() if a.created_at else None,
            }
        )
    return out


async def watched_episode_ids(db: AsyncSession, user_id: int, show_id: str) -> List[int]:
    rows = (
        await db.execute(
            select(WatchedEpisode.episode_id)
            .where(WatchedEpisode.user_id == user_id, WatchedEpisode.show_id == str(show_id))
            .order_by(WatchedEpisode.season_number, WatchedEpisode.episode_number)
        )
    ).scalars().all()
    return [int(x) for x in rows]
