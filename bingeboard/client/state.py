"""
Client-side state for the watchlist, episode logging and review flows.

Every server mutation is tracked as a `Mutation` that moves from PENDING to
COMMITTED or FAILED. Optimistic changes are reconciled explicitly: a failed
mutation puts the local state back to the last list the server confirmed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from bingeboard.client.api import ApiError, BingeBoardClient
from bingeboard.services.hydration import empty_message, hydrate_shows

logger = logging.getLogger(__name__)

# Failures a client call can surface; both become a user-facing notification.
CLIENT_ERRORS = (ApiError, httpx.HTTPError)


class MutationStatus(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass
class Mutation:
    kind: str  # "add" | "remove"
    show_id: str
    status: MutationStatus = MutationStatus.PENDING
    error: Optional[str] = None

    def commit(self) -> None:
        self.status = MutationStatus.COMMITTED

    def fail(self, error: str) -> None:
        self.status = MutationStatus.FAILED
        self.error = error


@dataclass
class WatchlistStore:
    api: BingeBoardClient
    items: List[str] = field(default_factory=list)
    confirmed: List[str] = field(default_factory=list)
    mutations: List[Mutation] = field(default_factory=list)
    notification: Optional[str] = None

    async def load(self) -> List[str]:
        self.confirmed = await self.api.get_watchlist()
        self.items = list(self.confirmed)
        return self.items

    def _settle(self, mutation: Mutation, server_list: List[str]) -> None:
        mutation.commit()
        self.confirmed = list(server_list)
        self.items = list(server_list)

    def _revert(self, mutation: Mutation, err: Exception, text: str) -> None:
        mutation.fail(str(err))
        self.items = list(self.confirmed)
        self.notification = text
        logger.info("watchlist %s %s failed: %r", mutation.kind, mutation.show_id, err)

    async def add(self, show_id: str) -> Mutation:
        show_id = str(show_id)
        mutation = Mutation("add", show_id)
        self.mutations.append(mutation)
        try:
            res = await self.api.add_to_watchlist(show_id)
        except CLIENT_ERRORS as e:
            self._revert(mutation, e, "Could not add show to watchlist.")
            return mutation
        self._settle(mutation, res["watchlist"])
        return mutation

    async def remove(self, show_id: str) -> Mutation:
        """Remove locally right away, then confirm with the server."""
        show_id = str(show_id)
        mutation = Mutation("remove", show_id)
        self.mutations.append(mutation)
        if show_id in self.items:
            self.items.remove(show_id)
        try:
            res = await self.api.remove_from_watchlist(show_id)
        except CLIENT_ERRORS as e:
            self._revert(mutation, e, "Could not remove show from watchlist.")
            return mutation
        self._settle(mutation, res["watchlist"])
        return mutation

    def dismiss_notification(self) -> None:
        self.notification = None


@dataclass
class EpisodeSelection:
    show_id: str
    show_name: str
    season_number: int
    poster_path: Optional[str] = None
    selected: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    in_flight: bool = False
    toast: Optional[str] = None
    error: Optional[str] = None

    def toggle(self, episode: Dict[str, Any]) -> bool:
        """Flip one episode in or out of the selection; returns True if now selected."""
        ep_id = int(episode["id"])
        if ep_id in self.selected:
            del self.selected[ep_id]
            return False
        self.selected[ep_id] = {
            "id": ep_id,
            "number": episode.get("number"),
            "name": episode.get("name") or episode.get("title"),
        }
        return True

    def is_selected(self, episode_id: int) -> bool:
        return int(episode_id) in self.selected

    def change_season(self, season_number: int) -> None:
        if season_number != self.season_number:
            self.season_number = season_number
            self.selected.clear()

    @property
    def can_submit(self) -> bool:
        return bool(self.selected) and not self.in_flight

    async def submit(self, api: BingeBoardClient) -> Optional[Dict[str, Any]]:
        """
        Send the whole selection as one mark-watched request.

        Returns the server response, or None when there was nothing to send
        or a request was already running. The selection is kept on failure.
        """
        if not self.can_submit:
            return None
        self.in_flight = True
        self.error = None
        try:
            res = await api.mark_watched(
                show_id=self.show_id,
                show_name=self.show_name,
                season_number=self.season_number,
                poster_path=self.poster_path,
                episodes=list(self.selected.values()),
            )
        except CLIENT_ERRORS as e:
            self.error = getattr(e, "message", None) or "Failed to mark episodes as watched."
            return None
        finally:
            self.in_flight = False
        self.selected.clear()
        self.toast = res.get("message")
        return res


class ModalState(str, Enum):
    CLOSED = "closed"
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"


@dataclass
class ReviewModal:
    show_id: str
    state: ModalState = ModalState.CLOSED
    rating: float = 0.0
    content: str = ""
    contains_spoiler: bool = False
    error: Optional[str] = None
    review: Optional[Dict[str, Any]] = None

    def open(self) -> None:
        if self.state is ModalState.CLOSED:
            self.state = ModalState.IDLE
            self.error = None

    @property
    def can_close(self) -> bool:
        return self.state not in (ModalState.SUBMITTING, ModalState.SUCCESS)

    def close(self) -> bool:
        if not self.can_close:
            return False
        self.state = ModalState.CLOSED
        return True

    def _client_error(self, authenticated: bool) -> Optional[str]:
        if not authenticated:
            return "You must be logged in to submit a review."
        if not self.content.strip():
            return "Review text is required"
        if self.rating <= 0:
            return "Please select a rating"
        return None

    async def submit(self, api: BingeBoardClient) -> bool:
        if self.state is not ModalState.IDLE:
            return False
        self.error = self._client_error(api.authenticated)
        if self.error:
            return False

        self.state = ModalState.SUBMITTING
        try:
            self.review = await api.create_review(
                self.show_id, self.rating, self.content.strip(), self.contains_spoiler
            )
        except CLIENT_ERRORS as e:
            self.state = ModalState.IDLE
            self.error = getattr(e, "message", None) or "Failed to submit review."
            return False
        self.state = ModalState.SUCCESS
        return True

    def acknowledge_success(self) -> None:
        """Called once the success notice has been shown; closes the modal."""
        if self.state is ModalState.SUCCESS:
            self.state = ModalState.CLOSED
            self.rating = 0.0
            self.content = ""
            self.contains_spoiler = False


@dataclass
class WatchlistCarousel:
    api: BingeBoardClient
    cards: List[Dict[str, Any]] = field(default_factory=list)
    empty_message: Optional[str] = None
    error: Optional[str] = None

    async def load(self) -> List[Dict[str, Any]]:
        self.error = None
        try:
            info = await self.api.get_user_info()
        except CLIENT_ERRORS as e:
            logger.info("carousel could not load user info: %r", e)
            self.error = getattr(e, "message", None) or "Could not load your watchlist."
            self.cards = []
            self.empty_message = empty_message(self.cards)
            return self.cards
        self.cards = await hydrate_shows(info.get("watchlist") or [], self.api.get_show)
        self.empty_message = empty_message(self.cards)
        return self.cards
