"""Row-to-entity assembly for the repo queries."""

from __future__ import annotations

from datetime import date
import sqlite3

from filmrate.db import repo
from filmrate.models.entities import (
    Director,
    Event,
    EventType,
    Film,
    Genre,
    Mpa,
    Operation,
    Review,
    User,
)


def load_films(conn: sqlite3.Connection, film_ids: list[int]) -> list[Film]:
    """Return films for ``film_ids`` in the same order, skipping unknown ids."""
    if not film_ids:
        return []
    rows = {int(row["id"]): row for row in repo.select_film_rows(conn, film_ids)}
    genres = repo.select_film_genres(conn, list(rows))
    directors = repo.select_film_directors(conn, list(rows))
    films: list[Film] = []
    for film_id in film_ids:
        row = rows.get(film_id)
        if row is None:
            continue
        films.append(
            Film(
                id=film_id,
                name=row["name"],
                description=row["description"],
                release_date=date.fromisoformat(row["release_date"]),
                duration=int(row["duration"]),
                mpa=Mpa(id=int(row["mpa_id"]), name=row["mpa_name"]),
                genres=tuple(Genre(id=gid, name=name) for gid, name in genres.get(film_id, [])),
                directors=tuple(
                    Director(id=did, name=name) for did, name in directors.get(film_id, [])
                ),
                score=float(row["score"]),
            )
        )
    return films


def load_film(conn: sqlite3.Connection, film_id: int) -> Film | None:
    films = load_films(conn, [film_id])
    return films[0] if films else None


def load_all_films(conn: sqlite3.Connection) -> list[Film]:
    ids = [int(row["id"]) for row in repo.select_film_rows(conn)]
    return load_films(conn, ids)


def load_users(conn: sqlite3.Connection, user_ids: list[int] | None = None) -> list[User]:
    rows = repo.select_user_rows(conn, user_ids)
    ids = [int(row["id"]) for row in rows]
    friends = repo.select_friend_ids(conn, ids)
    by_id = {
        int(row["id"]): User(
            id=int(row["id"]),
            email=row["email"],
            login=row["login"],
            name=row["name"],
            birthday=date.fromisoformat(row["birthday"]) if row["birthday"] else None,
            friends=frozenset(friends.get(int(row["id"]), set())),
        )
        for row in rows
    }
    order = user_ids if user_ids is not None else ids
    return [by_id[uid] for uid in order if uid in by_id]


def load_user(conn: sqlite3.Connection, user_id: int) -> User | None:
    users = load_users(conn, [user_id])
    return users[0] if users else None


def review_from_row(row) -> Review:
    return Review(
        id=int(row["id"]),
        content=row["content"],
        is_positive=bool(row["is_positive"]),
        user_id=int(row["user_id"]),
        film_id=int(row["film_id"]),
        usefulness=int(row["usefulness"]),
    )


def event_from_row(row) -> Event:
    return Event(
        event_id=int(row["id"]),
        user_id=int(row["user_id"]),
        timestamp=int(row["timestamp"]),
        event_type=EventType(row["event_type"]),
        operation=Operation(row["operation"]),
        entity_id=int(row["entity_id"]),
    )
