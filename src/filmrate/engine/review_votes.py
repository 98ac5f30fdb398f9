from __future__ import annotations

from enum import Enum
import sqlite3

from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.db.loaders import review_from_row
from filmrate.errors import NotFoundError
from filmrate.models.entities import Review, Vote, VoteState
from filmrate.util.logging import get_logger

LOG = get_logger(__name__)


class VoteAction(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    REMOVE_LIKE = "remove_like"
    REMOVE_DISLIKE = "remove_dislike"


_TRANSITIONS: dict[tuple[VoteState, VoteAction], tuple[VoteState, int]] = {
    (VoteState.NONE, VoteAction.LIKE): (VoteState.LIKED, 1),
    (VoteState.DISLIKED, VoteAction.LIKE): (VoteState.LIKED, 2),
    (VoteState.LIKED, VoteAction.LIKE): (VoteState.LIKED, 0),
    (VoteState.NONE, VoteAction.DISLIKE): (VoteState.DISLIKED, -1),
    (VoteState.LIKED, VoteAction.DISLIKE): (VoteState.DISLIKED, -2),
    (VoteState.DISLIKED, VoteAction.DISLIKE): (VoteState.DISLIKED, 0),
    (VoteState.LIKED, VoteAction.REMOVE_LIKE): (VoteState.NONE, -1),
    (VoteState.DISLIKED, VoteAction.REMOVE_DISLIKE): (VoteState.NONE, 1),
}

_STATE_BY_KIND = {
    None: VoteState.NONE,
    Vote.LIKE.value: VoteState.LIKED,
    Vote.DISLIKE.value: VoteState.DISLIKED,
}


def transition(state: VoteState, action: VoteAction) -> tuple[VoteState, int]:
    """Return ``(new_state, usefulness_delta)`` for one vote action.

    Removing a vote the user does not currently hold raises
    :class:`NotFoundError`; repeating a vote is a no-op with delta 0.
    """
    try:
        return _TRANSITIONS[(state, action)]
    except KeyError:
        wanted = "like" if action is VoteAction.REMOVE_LIKE else "dislike"
        raise NotFoundError(f"No {wanted} to remove (current vote: {state.value})") from None


class ReviewVoteLedger:
    """Per (review, user) like/dislike state driving ``reviews.usefulness``."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def like(self, review_id: int, user_id: int) -> Review:
        return self._apply(review_id, user_id, VoteAction.LIKE)

    def dislike(self, review_id: int, user_id: int) -> Review:
        return self._apply(review_id, user_id, VoteAction.DISLIKE)

    def remove_like(self, review_id: int, user_id: int) -> Review:
        return self._apply(review_id, user_id, VoteAction.REMOVE_LIKE)

    def remove_dislike(self, review_id: int, user_id: int) -> Review:
        return self._apply(review_id, user_id, VoteAction.REMOVE_DISLIKE)

    def state(self, review_id: int, user_id: int) -> VoteState:
        with self.db.connect() as conn:
            _require_review_and_user(conn, review_id, user_id)
            return _current_state(conn, review_id, user_id)

    def _apply(self, review_id: int, user_id: int, action: VoteAction) -> Review:
        def _write(conn: sqlite3.Connection) -> tuple[VoteState, int, Review]:
            _require_review_and_user(conn, review_id, user_id)
            current = _current_state(conn, review_id, user_id)
            new_state, delta = transition(current, action)
            if delta == 0:
                return new_state, delta, review_from_row(repo.select_review_row(conn, review_id))
            if new_state is VoteState.NONE:
                kind = Vote.LIKE if current is VoteState.LIKED else Vote.DISLIKE
                repo.delete_review_vote(conn, review_id, user_id, kind.value)
            else:
                kind = Vote.LIKE if new_state is VoteState.LIKED else Vote.DISLIKE
                repo.upsert_review_vote(conn, review_id, user_id, kind.value)
            repo.add_review_usefulness(conn, review_id, delta)
            return new_state, delta, review_from_row(repo.select_review_row(conn, review_id))

        new_state, delta, review = self.db.write(_write)
        if delta:
            LOG.info(
                "Review %s: user %s -> %s (usefulness %+d = %d)",
                review_id,
                user_id,
                new_state.value,
                delta,
                review.usefulness,
            )
        return review


def _current_state(conn: sqlite3.Connection, review_id: int, user_id: int) -> VoteState:
    return _STATE_BY_KIND[repo.select_review_vote(conn, review_id, user_id)]


def _require_review_and_user(conn: sqlite3.Connection, review_id: int, user_id: int) -> None:
    if repo.select_review_row(conn, review_id) is None:
        raise NotFoundError(f"Review {review_id} not found")
    if not repo.user_exists(conn, user_id):
        raise NotFoundError(f"User {user_id} not found")
