# bingeboard/db/models.py
from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ActivityAction(str, enum.Enum):
    login = "login"
    review_create = "review_create"
    watchlist_add = "watchlist_add"
    watchlist_remove = "watchlist_remove"
    review_like = "review_like"
    review_dislike = "review_dislike"
    profile_update = "profile_update"
    mark_watched = "mark_watched"
    watched_episode = "watched_episode"


class VoteKind(str, enum.Enum):
    like = "like"
    dislike = "dislike"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    full_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    profile_pic: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    bio: Mapped[str] = mapped_column(String(200), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    watchlist_entries: Mapped[list["WatchlistEntry"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="WatchlistEntry.id",
    )


class WatchlistEntry(Base):
    """
    One show id on a user's watchlist. Insertion order (id) is list order.
    Show ids are TMDb ids kept as strings; nothing about the show is stored.
    """
    __tablename__ = "watchlist_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    show_id: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    user: Mapped["User"] = relationship(back_populates="watchlist_entries")

    __table_args__ = (UniqueConstraint("user_id", "show_id", name="uq_watchlist_user_show"),)


class Friendship(Base):
    """Directed edge; an accepted request writes both directions."""
    __tablename__ = "friendships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    friend_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (UniqueConstraint("user_id", "friend_id", name="uq_friendship_pair"),)


class FriendRequest(Base):
    __tablename__ = "friend_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    receiver_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (UniqueConstraint("sender_id", "receiver_id", name="uq_friend_request_pair"),)


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    show_id: Mapped[str] = mapped_column(String(32), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    # denormalised for display; user_id is authoritative
    username: Mapped[str] = mapped_column(String(30))
    rating: Mapped[float] = mapped_column(Float)  # 0 < rating <= 5
    content: Mapped[str] = mapped_column(Text)
    contains_spoiler: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)

    votes: Mapped[list["ReviewVote"]] = relationship(
        back_populates="review", cascade="all, delete-orphan", lazy="selectin"
    )


class ReviewVote(Base):
    """
    Like or dislike on a review. One row per (review, user) keeps the
    like and dislike sets disjoint.
    """
    __tablename__ = "review_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    review_id: Mapped[int] = mapped_column(ForeignKey("reviews.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    kind: Mapped[VoteKind] = mapped_column(Enum(VoteKind, native_enum=False, length=16))

    review: Mapped["Review"] = relationship(back_populates="votes")

    __table_args__ = (UniqueConstraint("review_id", "user_id", name="uq_review_vote_user"),)


class Activity(Base):
    """Append-only log of user actions; `details` is interpreted per action."""
    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    action: Mapped[ActivityAction] = mapped_column(Enum(ActivityAction, native_enum=False, length=32))
    target_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    details: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)

    user: Mapped["User"] = relationship(lazy="joined")

    __table_args__ = (
        Index("ix_activities_user_created", "user_id", "created_at"),
        Index("ix_activities_action_created", "action", "created_at"),
    )


class WatchedEpisode(Base):
    __tablename__ = "watched_episodes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    show_id: Mapped[str] = mapped_column(String(32), index=True)
    season_number: Mapped[int] = mapped_column(Integer)
    episode_id: Mapped[int] = mapped_column(Integer)
    episode_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    episode_name: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    watched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "show_id", "episode_id", name="uq_watched_user_show_episode"),
    )


__all__ = [
    "Base",
    "ActivityAction",
    "VoteKind",
    "User",
    "WatchlistEntry",
    "Friendship",
    "FriendRequest",
    "Review",
    "ReviewVote",
    "Activity",
    "WatchedEpisode",
]
