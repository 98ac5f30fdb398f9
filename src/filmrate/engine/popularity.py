from __future__ import annotations

from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.db.loaders import load_films
from filmrate.errors import ValidationError
from filmrate.models.entities import Film


class PopularityRanker:
    def __init__(self, db: Database) -> None:
        self.db = db

    def popular(
        self,
        count: int | None = None,
        genre_id: int | None = None,
        year: int | None = None,
    ) -> list[Film]:
        """Films by score, best first, ties by id.

        ``genre_id`` and ``year`` filter conjunctively. An unknown genre id
        simply matches nothing.
        """
        if count is not None and count < 1:
            raise ValidationError(f"count must be positive, got {count}")
        with self.db.connect() as conn:
            film_ids = repo.select_popular_film_ids(conn, count=count, genre_id=genre_id, year=year)
            return load_films(conn, film_ids)
