from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class _CamelIn(BaseModel):
    # accept both the frontend's camelCase keys and snake_case
    model_config = ConfigDict(populate_by_name=True)


# ── Auth ─────────────────────────────────────────────────────────────────────

class SignupIn(BaseModel):
    username: str = Field(min_length=3, max_length=30, pattern=r"^[A-Za-z0-9]+$")
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class TokenOut(BaseModel):
    success: bool = True
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user_id: int
    username: str


# ── Users / profile ──────────────────────────────────────────────────────────

class ProfileUpdateIn(_CamelIn):
    bio: Optional[str] = Field(default=None, max_length=200)
    profile_pic: Optional[str] = Field(default=None, alias="profilePic", max_length=500)
    full_name: Optional[str] = Field(default=None, alias="fullName", max_length=100)


class UserEnvelope(BaseModel):
    """Profile response; `kind` says whether private fields are present."""
    kind: Literal["own", "public"]
    user: Dict[str, Any]


# ── Watchlist ────────────────────────────────────────────────────────────────

class WatchlistIn(_CamelIn):
    show_id: str = Field(alias="showId", min_length=1, max_length=32)


class WatchlistOut(BaseModel):
    success: bool = True
    watchlist: List[str]
    changed: bool


# ── Watched episodes ─────────────────────────────────────────────────────────

class EpisodeIn(BaseModel):
    id: int
    number: Optional[int] = None
    name: Optional[str] = Field(default=None, max_length=300)


class MarkWatchedIn(_CamelIn):
    show_id: str = Field(alias="showId", min_length=1, max_length=32)
    show_name: str = Field(alias="showName", min_length=1, max_length=300)
    poster_path: Optional[str] = Field(default=None, alias="posterPath")
    season_number: int = Field(alias="seasonNumber", ge=0)
    episodes: List[EpisodeIn] = Field(min_length=1)


# ── Reviews ──────────────────────────────────────────────────────────────────

class ReviewIn(_CamelIn):
    show_id: str = Field(alias="showId", min_length=1, max_length=32)
    rating: float = Field(allow_inf_nan=False)
    content: str
    contains_spoiler: bool = Field(default=False, alias="containsSpoiler")


class VoteIn(BaseModel):
    action: Literal["like", "dislike"]
