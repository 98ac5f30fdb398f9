from __future__ import annotations

from datetime import date
import re
import sqlite3

from filmrate.db import repo
from filmrate.errors import NotFoundError, ValidationError
from filmrate.models.entities import Film, Review, User

CINEMA_BIRTHDAY = date(1895, 12, 28)
DESCRIPTION_MAX_LENGTH = 200

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_film(film: Film) -> None:
    if not film.name or not film.name.strip():
        raise ValidationError("Film name must not be blank")
    if film.description is not None and len(film.description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Film description must be at most {DESCRIPTION_MAX_LENGTH} characters"
        )
    if film.release_date is None:
        raise ValidationError("Film release date is required")
    if film.release_date < CINEMA_BIRTHDAY:
        raise ValidationError(f"Release date must not be before {CINEMA_BIRTHDAY.isoformat()}")
    if film.duration is None or film.duration <= 0:
        raise ValidationError("Film duration must be positive")
    if film.mpa is None:
        raise ValidationError("Film MPA rating is required")


def check_film_references(conn: sqlite3.Connection, film: Film) -> None:
    if not repo.select_mpa_rows(conn, [film.mpa.id]):
        raise NotFoundError(f"MPA rating {film.mpa.id} not found")
    genre_ids = unique_ids(g.id for g in film.genres)
    found = {int(row["id"]) for row in repo.select_genre_rows(conn, genre_ids)}
    missing = [gid for gid in genre_ids if gid not in found]
    if missing:
        raise NotFoundError(f"Genre {missing[0]} not found")
    director_ids = unique_ids(d.id for d in film.directors)
    found = {int(row["id"]) for row in repo.select_director_rows(conn, director_ids)}
    missing = [did for did in director_ids if did not in found]
    if missing:
        raise NotFoundError(f"Director {missing[0]} not found")


def normalize_user(user: User, today: date | None = None) -> User:
    """Validate ``user`` and return it with the display name defaulted."""
    if not user.email or not _EMAIL_RE.match(user.email):
        raise ValidationError(f"Invalid email: {user.email!r}")
    if not user.login or any(ch.isspace() for ch in user.login):
        raise ValidationError("Login must not be blank or contain whitespace")
    if user.birthday is not None and user.birthday > (today or date.today()):
        raise ValidationError("Birthday must not be in the future")
    name = user.name if user.name and user.name.strip() else user.login
    return User(
        id=user.id,
        email=user.email,
        login=user.login,
        name=name,
        birthday=user.birthday,
        friends=user.friends,
    )


def validate_review(review: Review) -> None:
    if not review.content or not review.content.strip():
        raise ValidationError("Review content must not be blank")
    if not isinstance(review.is_positive, bool):
        raise ValidationError("Review must say whether it is positive")
    if review.user_id is None or review.film_id is None:
        raise ValidationError("Review needs both a user and a film")


def unique_ids(ids) -> list[int]:
    seen: dict[int, None] = {}
    for value in ids:
        seen.setdefault(int(value), None)
    return list(seen)
