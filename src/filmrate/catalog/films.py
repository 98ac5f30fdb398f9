from __future__ import annotations

import sqlite3

from filmrate.catalog.validation import unique_ids, check_film_references, validate_film
from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.db.loaders import load_all_films, load_film, load_films
from filmrate.errors import NotFoundError, ValidationError
from filmrate.models.entities import DirectorSort, Film
from filmrate.util.logging import get_logger

LOG = get_logger(__name__)


class FilmStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    def create(self, film: Film) -> Film:
        validate_film(film)

        def _write(conn: sqlite3.Connection) -> int:
            check_film_references(conn, film)
            if repo.select_film_id_by_identity(conn, film.name, film.release_date) is not None:
                raise ValidationError(
                    f"Film {film.name!r} released {film.release_date.isoformat()} already exists"
                )
            film_id = repo.insert_film(
                conn,
                film.name,
                film.description,
                film.release_date,
                film.duration,
                film.mpa.id,
            )
            repo.replace_film_genres(conn, film_id, unique_ids(g.id for g in film.genres))
            repo.replace_film_directors(conn, film_id, unique_ids(d.id for d in film.directors))
            return film_id

        film_id = self.db.write(_write)
        LOG.info("Added film %s (%s)", film_id, film.name)
        return self.get(film_id)

    def update(self, film: Film) -> Film:
        if film.id is None:
            raise ValidationError("Film id is required for update")
        validate_film(film)

        def _write(conn: sqlite3.Connection) -> None:
            if not repo.film_exists(conn, film.id):
                raise NotFoundError(f"Film {film.id} not found")
            check_film_references(conn, film)
            owner = repo.select_film_id_by_identity(conn, film.name, film.release_date)
            if owner is not None and owner != film.id:
                raise ValidationError(
                    f"Film {film.name!r} released {film.release_date.isoformat()} already exists"
                )
            repo.update_film(
                conn,
                film.id,
                film.name,
                film.description,
                film.release_date,
                film.duration,
                film.mpa.id,
            )
            repo.replace_film_genres(conn, film.id, unique_ids(g.id for g in film.genres))
            repo.replace_film_directors(conn, film.id, unique_ids(d.id for d in film.directors))

        self.db.write(_write)
        LOG.info("Updated film %s (%s)", film.id, film.name)
        return self.get(film.id)

    def get(self, film_id: int) -> Film:
        with self.db.connect() as conn:
            film = load_film(conn, film_id)
        if film is None:
            raise NotFoundError(f"Film {film_id} not found")
        return film

    def all(self) -> list[Film]:
        with self.db.connect() as conn:
            return load_all_films(conn)

    def exists(self, film_id: int) -> bool:
        with self.db.connect() as conn:
            return repo.film_exists(conn, film_id)

    def delete(self, film_id: int) -> None:
        def _write(conn: sqlite3.Connection) -> None:
            if not repo.film_exists(conn, film_id):
                raise NotFoundError(f"Film {film_id} not found")
            repo.delete_film_events(conn, film_id)
            repo.delete_film(conn, film_id)

        self.db.write(_write)
        LOG.info("Deleted film %s", film_id)

    def director_films(self, director_id: int, sort: DirectorSort | str = DirectorSort.YEAR) -> list[Film]:
        order = DirectorSort.parse(sort)
        with self.db.connect() as conn:
            if not repo.select_director_rows(conn, [director_id]):
                raise NotFoundError(f"Director {director_id} not found")
            film_ids = repo.select_director_film_ids(conn, director_id, order.value)
            return load_films(conn, film_ids)
