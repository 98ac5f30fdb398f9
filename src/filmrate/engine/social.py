from __future__ import annotations

import sqlite3

from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.db.loaders import load_films, load_users
from filmrate.errors import NotFoundError
from filmrate.models.entities import Film, User


class SocialGraphQuery:
    def __init__(self, db: Database) -> None:
        self.db = db

    def friends(self, user_id: int) -> list[User]:
        with self.db.connect() as conn:
            _require_users(conn, user_id)
            friend_ids = sorted(repo.select_friend_ids(conn, [user_id])[user_id])
            return load_users(conn, friend_ids)

    def common_friends(self, user_id: int, other_id: int) -> list[User]:
        """Users both ``user_id`` and ``other_id`` have added as friends, by id."""
        with self.db.connect() as conn:
            _require_users(conn, user_id, other_id)
            return load_users(conn, repo.select_common_friend_ids(conn, user_id, other_id))

    def common_films(self, user_id: int, other_id: int) -> list[Film]:
        """Films both users rated, by score then rating count, descending."""
        with self.db.connect() as conn:
            _require_users(conn, user_id, other_id)
            return load_films(conn, repo.select_common_film_ids(conn, user_id, other_id))


def _require_users(conn: sqlite3.Connection, *user_ids: int) -> None:
    for user_id in user_ids:
        if not repo.user_exists(conn, user_id):
            raise NotFoundError(f"User {user_id} not found")
