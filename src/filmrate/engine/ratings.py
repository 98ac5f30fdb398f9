from __future__ import annotations

import sqlite3

from filmrate.config import RatingsConfig
from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.db.loaders import load_film
from filmrate.errors import NotFoundError, ValidationError
from filmrate.events import EventLedger
from filmrate.models.entities import EventType, Film, Operation
from filmrate.util.logging import get_logger

LOG = get_logger(__name__)


class RatingAggregator:
    """Keeps ``films.score`` equal to the rounded mean of the film's ratings.

    The rating write and the score recomputation share one write
    transaction, so two users rating the same film at once cannot lose an
    update to the aggregate.
    """

    def __init__(
        self,
        db: Database,
        events: EventLedger,
        config: RatingsConfig | None = None,
    ) -> None:
        self.db = db
        self.events = events
        self.config = config or RatingsConfig()

    def rate(self, film_id: int, user_id: int, score: int) -> Film:
        self._validate_score(score)

        def _apply(conn: sqlite3.Connection) -> float:
            _require_film_and_user(conn, film_id, user_id)
            repo.upsert_rating(conn, film_id, user_id, int(score))
            return repo.recompute_film_score(conn, film_id)

        new_score = self.db.write(_apply)
        LOG.info("User %s rated film %s with %s; score now %.1f", user_id, film_id, score, new_score)
        self.events.append(user_id, None, EventType.LIKE, Operation.ADD, film_id)
        return self._film(film_id)

    def unrate(self, film_id: int, user_id: int) -> Film:
        def _apply(conn: sqlite3.Connection) -> float:
            _require_film_and_user(conn, film_id, user_id)
            if not repo.delete_rating(conn, film_id, user_id):
                raise NotFoundError(f"Film {film_id} has no rating from user {user_id}")
            return repo.recompute_film_score(conn, film_id)

        new_score = self.db.write(_apply)
        LOG.info("User %s removed rating of film %s; score now %.1f", user_id, film_id, new_score)
        self.events.append(user_id, None, EventType.LIKE, Operation.REMOVE, film_id)
        return self._film(film_id)

    def score_of(self, film_id: int) -> float:
        with self.db.connect() as conn:
            if not repo.film_exists(conn, film_id):
                raise NotFoundError(f"Film {film_id} not found")
            return repo.select_film_score(conn, film_id)

    def _validate_score(self, score: int) -> None:
        if isinstance(score, bool) or not isinstance(score, int):
            raise ValidationError(f"Rating must be an integer, got {score!r}")
        if not self.config.min_value <= score <= self.config.max_value:
            raise ValidationError(
                f"Rating must be between {self.config.min_value} and {self.config.max_value}"
            )

    def _film(self, film_id: int) -> Film:
        with self.db.connect() as conn:
            film = load_film(conn, film_id)
        if film is None:
            raise NotFoundError(f"Film {film_id} not found")
        return film


def _require_film_and_user(conn: sqlite3.Connection, film_id: int, user_id: int) -> None:
    if not repo.film_exists(conn, film_id):
        raise NotFoundError(f"Film {film_id} not found")
    if not repo.user_exists(conn, user_id):
        raise NotFoundError(f"User {user_id} not found")
