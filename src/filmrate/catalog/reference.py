"""Genre, MPA and director lookup tables."""

from __future__ import annotations

import sqlite3

from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.errors import NotFoundError, ValidationError
from filmrate.models.entities import Director, Genre, Mpa
from filmrate.util.logging import get_logger

LOG = get_logger(__name__)


class _Lookup:
    kind = "entry"

    def __init__(self, db: Database) -> None:
        self.db = db

    def _rows(self, conn: sqlite3.Connection, ids: list[int] | None):
        raise NotImplementedError

    def _build(self, row):
        raise NotImplementedError

    def exists_by_id(self, entry_id: int) -> bool:
        with self.db.connect() as conn:
            return bool(self._rows(conn, [entry_id]))

    def name_by_id(self, entry_id: int) -> str:
        return self.get(entry_id).name

    def get(self, entry_id: int):
        with self.db.connect() as conn:
            rows = self._rows(conn, [entry_id])
        if not rows:
            raise NotFoundError(f"{self.kind.capitalize()} {entry_id} not found")
        return self._build(rows[0])

    def all(self) -> list:
        with self.db.connect() as conn:
            return [self._build(row) for row in self._rows(conn, None)]


class GenreLookup(_Lookup):
    kind = "genre"

    def _rows(self, conn, ids):
        return repo.select_genre_rows(conn, ids)

    def _build(self, row) -> Genre:
        return Genre(id=int(row["id"]), name=row["name"])


class MpaLookup(_Lookup):
    kind = "MPA rating"

    def _rows(self, conn, ids):
        return repo.select_mpa_rows(conn, ids)

    def _build(self, row) -> Mpa:
        return Mpa(id=int(row["id"]), name=row["name"])


class DirectorStore(_Lookup):
    kind = "director"

    def _rows(self, conn, ids):
        return repo.select_director_rows(conn, ids)

    def _build(self, row) -> Director:
        return Director(id=int(row["id"]), name=row["name"])

    def create(self, name: str) -> Director:
        name = _require_name(name)
        director_id = self.db.write(lambda conn: repo.insert_director(conn, name))
        LOG.info("Added director %s (%s)", director_id, name)
        return Director(id=director_id, name=name)

    def update(self, director: Director) -> Director:
        if director.id is None:
            raise ValidationError("Director id is required for update")
        name = _require_name(director.name)

        def _write(conn: sqlite3.Connection) -> None:
            if not repo.select_director_rows(conn, [director.id]):
                raise NotFoundError(f"Director {director.id} not found")
            repo.update_director(conn, director.id, name)

        self.db.write(_write)
        return Director(id=director.id, name=name)

    def delete(self, director_id: int) -> None:
        def _write(conn: sqlite3.Connection) -> None:
            if not repo.delete_director(conn, director_id):
                raise NotFoundError(f"Director {director_id} not found")

        self.db.write(_write)
        LOG.info("Deleted director %s", director_id)


def _require_name(name: str | None) -> str:
    if not name or not name.strip():
        raise ValidationError("Director name must not be blank")
    return name.strip()
