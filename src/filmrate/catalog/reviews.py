from __future__ import annotations

import sqlite3

from filmrate.catalog.validation import validate_review
from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.db.loaders import review_from_row
from filmrate.errors import NotFoundError, ValidationError
from filmrate.events import EventLedger
from filmrate.models.entities import EventType, Operation, Review
from filmrate.util.logging import get_logger

LOG = get_logger(__name__)

DEFAULT_REVIEW_COUNT = 10


class ReviewStore:
    """Review CRUD. ``usefulness`` is only ever changed by the vote ledger."""

    def __init__(self, db: Database, events: EventLedger) -> None:
        self.db = db
        self.events = events

    def create(self, review: Review) -> Review:
        validate_review(review)

        def _write(conn: sqlite3.Connection) -> int:
            _require_user_and_film(conn, review.user_id, review.film_id)
            return repo.insert_review(
                conn,
                review.content,
                review.is_positive,
                review.user_id,
                review.film_id,
            )

        review_id = self.db.write(_write)
        LOG.info("User %s reviewed film %s (review %s)", review.user_id, review.film_id, review_id)
        self.events.append(review.user_id, None, EventType.REVIEW, Operation.ADD, review_id)
        return self.get(review_id)

    def update(self, review: Review) -> Review:
        if review.id is None:
            raise ValidationError("Review id is required for update")
        validate_review(review)

        def _write(conn: sqlite3.Connection) -> Review:
            row = repo.select_review_row(conn, review.id)
            if row is None:
                raise NotFoundError(f"Review {review.id} not found")
            _require_user_and_film(conn, review.user_id, review.film_id)
            repo.update_review(conn, review.id, review.content, review.is_positive)
            return review_from_row(repo.select_review_row(conn, review.id))

        updated = self.db.write(_write)
        LOG.info("Updated review %s", review.id)
        self.events.append(updated.user_id, None, EventType.REVIEW, Operation.UPDATE, updated.id)
        return updated

    def delete(self, review_id: int) -> None:
        def _write(conn: sqlite3.Connection) -> Review:
            row = repo.select_review_row(conn, review_id)
            if row is None:
                raise NotFoundError(f"Review {review_id} not found")
            repo.delete_review(conn, review_id)
            return review_from_row(row)

        removed = self.db.write(_write)
        LOG.info("Deleted review %s", review_id)
        self.events.append(removed.user_id, None, EventType.REVIEW, Operation.REMOVE, review_id)

    def get(self, review_id: int) -> Review:
        with self.db.connect() as conn:
            row = repo.select_review_row(conn, review_id)
        if row is None:
            raise NotFoundError(f"Review {review_id} not found")
        return review_from_row(row)

    def for_film(self, film_id: int | None = None, count: int | None = DEFAULT_REVIEW_COUNT) -> list[Review]:
        if count is not None and count < 1:
            raise ValidationError(f"count must be positive, got {count}")
        with self.db.connect() as conn:
            rows = repo.select_review_rows(conn, film_id, count)
        return [review_from_row(row) for row in rows]


def _require_user_and_film(conn: sqlite3.Connection, user_id: int, film_id: int) -> None:
    if not repo.user_exists(conn, user_id):
        raise NotFoundError(f"User {user_id} not found")
    if not repo.film_exists(conn, film_id):
        raise NotFoundError(f"Film {film_id} not found")
