from __future__ import annotations

import sqlite3

from filmrate.catalog.validation import normalize_user
from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.db.loaders import load_user, load_users
from filmrate.errors import NotFoundError, ValidationError
from filmrate.events import EventLedger
from filmrate.models.entities import EventType, Operation, User, Vote
from filmrate.util.logging import get_logger

LOG = get_logger(__name__)


class UserStore:
    """Users and their directed friend edges.

    An edge belongs to the user who added it and is never mirrored.
    """

    def __init__(self, db: Database, events: EventLedger) -> None:
        self.db = db
        self.events = events

    def create(self, user: User) -> User:
        user = normalize_user(user)

        def _write(conn: sqlite3.Connection) -> int:
            if repo.select_user_id_by_email(conn, user.email) is not None:
                raise ValidationError(f"Email {user.email} is already registered")
            return repo.insert_user(conn, user.email, user.login, user.name, user.birthday)

        user_id = self.db.write(_write)
        LOG.info("Created user %s (%s)", user_id, user.login)
        return self.get(user_id)

    def update(self, user: User) -> User:
        if user.id is None:
            raise ValidationError("User id is required for update")
        user = normalize_user(user)

        def _write(conn: sqlite3.Connection) -> None:
            if not repo.user_exists(conn, user.id):
                raise NotFoundError(f"User {user.id} not found")
            owner = repo.select_user_id_by_email(conn, user.email)
            if owner is not None and owner != user.id:
                raise ValidationError(f"Email {user.email} is already registered")
            repo.update_user(conn, user.id, user.email, user.login, user.name, user.birthday)

        self.db.write(_write)
        LOG.info("Updated user %s", user.id)
        return self.get(user.id)

    def get(self, user_id: int) -> User:
        with self.db.connect() as conn:
            user = load_user(conn, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def all(self) -> list[User]:
        with self.db.connect() as conn:
            return load_users(conn)

    def exists(self, user_id: int) -> bool:
        with self.db.connect() as conn:
            return repo.user_exists(conn, user_id)

    def delete(self, user_id: int) -> None:
        def _write(conn: sqlite3.Connection) -> list[int]:
            if not repo.user_exists(conn, user_id):
                raise NotFoundError(f"User {user_id} not found")
            for review_id, kind in repo.select_user_review_votes(conn, user_id):
                repo.add_review_usefulness(conn, review_id, -1 if kind == Vote.LIKE.value else 1)
            rated = list(repo.select_user_ratings(conn, user_id))
            repo.delete_friend_events_targeting(conn, user_id)
            repo.delete_user(conn, user_id)
            # the cascade removed this user's ratings, reviews and votes
            for film_id in rated:
                repo.recompute_film_score(conn, film_id)
            return rated

        rated = self.db.write(_write)
        LOG.info("Deleted user %s (rescored %s films)", user_id, len(rated))

    def add_friend(self, user_id: int, friend_id: int) -> None:
        if user_id == friend_id:
            raise ValidationError("A user cannot befriend themselves")

        def _write(conn: sqlite3.Connection) -> bool:
            _require_users(conn, user_id, friend_id)
            return repo.insert_friend(conn, user_id, friend_id)

        if not self.db.write(_write):
            return
        LOG.info("User %s added friend %s", user_id, friend_id)
        self.events.append(user_id, None, EventType.FRIEND, Operation.ADD, friend_id)

    def remove_friend(self, user_id: int, friend_id: int) -> None:
        def _write(conn: sqlite3.Connection) -> None:
            _require_users(conn, user_id, friend_id)
            if not repo.delete_friend(conn, user_id, friend_id):
                raise NotFoundError(f"User {friend_id} is not a friend of user {user_id}")

        self.db.write(_write)
        LOG.info("User %s removed friend %s", user_id, friend_id)
        self.events.append(user_id, None, EventType.FRIEND, Operation.REMOVE, friend_id)


def _require_users(conn: sqlite3.Connection, *user_ids: int) -> None:
    for user_id in user_ids:
        if not repo.user_exists(conn, user_id):
            raise NotFoundError(f"User {user_id} not found")
