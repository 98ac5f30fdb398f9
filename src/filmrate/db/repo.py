from __future__ import annotations

from datetime import date
import sqlite3
from typing import Iterable

from filmrate.errors import StorageError


def connect(path: str, busy_timeout_ms: int = 5000) -> sqlite3.Connection:
    conn = sqlite3.connect(path, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
    return conn


def _placeholders(values: list) -> str:
    return ",".join("?" for _ in values)


def _update_one(conn: sqlite3.Connection, query: str, params: tuple, what: str) -> None:
    cur = conn.execute(query, params)
    if cur.rowcount == 0:
        raise StorageError(f"Failed to update {what}")


# -- users -----------------------------------------------------------------


def insert_user(
    conn: sqlite3.Connection,
    email: str,
    login: str,
    name: str,
    birthday: date | None,
) -> int:
    cur = conn.execute(
        "INSERT INTO users (email, login, name, birthday) VALUES (?, ?, ?, ?)",
        (email, login, name, birthday.isoformat() if birthday else None),
    )
    if cur.lastrowid is None:
        raise StorageError("Failed to store user")
    return int(cur.lastrowid)


def update_user(
    conn: sqlite3.Connection,
    user_id: int,
    email: str,
    login: str,
    name: str,
    birthday: date | None,
) -> None:
    _update_one(
        conn,
        "UPDATE users SET email = ?, login = ?, name = ?, birthday = ? WHERE id = ?",
        (email, login, name, birthday.isoformat() if birthday else None, user_id),
        f"user {user_id}",
    )


def delete_user(conn: sqlite3.Connection, user_id: int) -> bool:
    return conn.execute("DELETE FROM users WHERE id = ?", (user_id,)).rowcount > 0


def user_exists(conn: sqlite3.Connection, user_id: int) -> bool:
    row = conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone()
    return row is not None


def select_user_id_by_email(conn: sqlite3.Connection, email: str) -> int | None:
    row = conn.execute("SELECT id FROM users WHERE email = ?", (email,)).fetchone()
    if not row:
        return None
    return int(row[0])


def select_user_rows(conn: sqlite3.Connection, user_ids: list[int] | None = None):
    if user_ids is None:
        return conn.execute(
            "SELECT id, email, login, name, birthday FROM users ORDER BY id"
        ).fetchall()
    if not user_ids:
        return []
    return conn.execute(
        f"""
        SELECT id, email, login, name, birthday
        FROM users
        WHERE id IN ({_placeholders(user_ids)})
        ORDER BY id
        """,
        user_ids,
    ).fetchall()


def insert_friend(conn: sqlite3.Connection, user_id: int, friend_id: int) -> bool:
    cur = conn.execute(
        "INSERT OR IGNORE INTO friendships (user_id, friend_id) VALUES (?, ?)",
        (user_id, friend_id),
    )
    return cur.rowcount > 0


def delete_friend(conn: sqlite3.Connection, user_id: int, friend_id: int) -> bool:
    cur = conn.execute(
        "DELETE FROM friendships WHERE user_id = ? AND friend_id = ?",
        (user_id, friend_id),
    )
    return cur.rowcount > 0


def select_friend_ids(conn: sqlite3.Connection, user_ids: list[int]) -> dict[int, set[int]]:
    if not user_ids:
        return {}
    rows = conn.execute(
        f"""
        SELECT user_id, friend_id
        FROM friendships
        WHERE user_id IN ({_placeholders(user_ids)})
        """,
        user_ids,
    ).fetchall()
    friends: dict[int, set[int]] = {uid: set() for uid in user_ids}
    for row in rows:
        friends[int(row[0])].add(int(row[1]))
    return friends


def select_common_friend_ids(conn: sqlite3.Connection, user_id: int, other_id: int) -> list[int]:
    rows = conn.execute(
        """
        SELECT a.friend_id
        FROM friendships a
        JOIN friendships b ON b.friend_id = a.friend_id
        WHERE a.user_id = ?
          AND b.user_id = ?
        ORDER BY a.friend_id
        """,
        (user_id, other_id),
    ).fetchall()
    return [int(row[0]) for row in rows]


# -- reference data --------------------------------------------------------


def select_mpa_rows(conn: sqlite3.Connection, mpa_ids: list[int] | None = None):
    if mpa_ids is None:
        return conn.execute("SELECT id, name FROM mpa ORDER BY id").fetchall()
    if not mpa_ids:
        return []
    return conn.execute(
        f"SELECT id, name FROM mpa WHERE id IN ({_placeholders(mpa_ids)}) ORDER BY id",
        mpa_ids,
    ).fetchall()


def select_genre_rows(conn: sqlite3.Connection, genre_ids: list[int] | None = None):
    if genre_ids is None:
        return conn.execute("SELECT id, name FROM genres ORDER BY id").fetchall()
    if not genre_ids:
        return []
    return conn.execute(
        f"SELECT id, name FROM genres WHERE id IN ({_placeholders(genre_ids)}) ORDER BY id",
        genre_ids,
    ).fetchall()


def select_director_rows(conn: sqlite3.Connection, director_ids: list[int] | None = None):
    if director_ids is None:
        return conn.execute("SELECT id, name FROM directors ORDER BY id").fetchall()
    if not director_ids:
        return []
    return conn.execute(
        f"SELECT id, name FROM directors WHERE id IN ({_placeholders(director_ids)}) ORDER BY id",
        director_ids,
    ).fetchall()


def insert_director(conn: sqlite3.Connection, name: str) -> int:
    cur = conn.execute("INSERT INTO directors (name) VALUES (?)", (name,))
    if cur.lastrowid is None:
        raise StorageError("Failed to store director")
    return int(cur.lastrowid)


def update_director(conn: sqlite3.Connection, director_id: int, name: str) -> None:
    _update_one(
        conn,
        "UPDATE directors SET name = ? WHERE id = ?",
        (name, director_id),
        f"director {director_id}",
    )


def delete_director(conn: sqlite3.Connection, director_id: int) -> bool:
    return conn.execute("DELETE FROM directors WHERE id = ?", (director_id,)).rowcount > 0


# -- films -----------------------------------------------------------------


def insert_film(
    conn: sqlite3.Connection,
    name: str,
    description: str | None,
    release_date: date,
    duration: int,
    mpa_id: int,
) -> int:
    cur = conn.execute(
        """
        INSERT INTO films (name, description, release_date, duration, mpa_id, score)
        VALUES (?, ?, ?, ?, ?, 0)
        """,
        (name, description, release_date.isoformat(), duration, mpa_id),
    )
    if cur.lastrowid is None:
        raise StorageError("Failed to store film")
    return int(cur.lastrowid)


def update_film(
    conn: sqlite3.Connection,
    film_id: int,
    name: str,
    description: str | None,
    release_date: date,
    duration: int,
    mpa_id: int,
) -> None:
    # score is derived from ratings and never written here
    _update_one(
        conn,
        """
        UPDATE films
        SET name = ?, description = ?, release_date = ?, duration = ?, mpa_id = ?
        WHERE id = ?
        """,
        (name, description, release_date.isoformat(), duration, mpa_id, film_id),
        f"film {film_id}",
    )


def delete_film(conn: sqlite3.Connection, film_id: int) -> bool:
    return conn.execute("DELETE FROM films WHERE id = ?", (film_id,)).rowcount > 0


def film_exists(conn: sqlite3.Connection, film_id: int) -> bool:
    row = conn.execute("SELECT 1 FROM films WHERE id = ?", (film_id,)).fetchone()
    return row is not None


def select_film_id_by_identity(
    conn: sqlite3.Connection, name: str, release_date: date
) -> int | None:
    row = conn.execute(
        "SELECT id FROM films WHERE name = ? AND release_date = ?",
        (name, release_date.isoformat()),
    ).fetchone()
    if not row:
        return None
    return int(row[0])


def select_film_rows(conn: sqlite3.Connection, film_ids: list[int] | None = None):
    base = """
        SELECT f.id, f.name, f.description, f.release_date, f.duration, f.score,
               f.mpa_id, m.name AS mpa_name
        FROM films f
        JOIN mpa m ON m.id = f.mpa_id
    """
    if film_ids is None:
        return conn.execute(base + " ORDER BY f.id").fetchall()
    if not film_ids:
        return []
    return conn.execute(
        base + f" WHERE f.id IN ({_placeholders(film_ids)})",
        film_ids,
    ).fetchall()


def replace_film_genres(conn: sqlite3.Connection, film_id: int, genre_ids: Iterable[int]) -> None:
    conn.execute("DELETE FROM film_genres WHERE film_id = ?", (film_id,))
    conn.executemany(
        "INSERT INTO film_genres (film_id, genre_id, position) VALUES (?, ?, ?)",
        [(film_id, genre_id, pos) for pos, genre_id in enumerate(genre_ids)],
    )


def replace_film_directors(
    conn: sqlite3.Connection, film_id: int, director_ids: Iterable[int]
) -> None:
    conn.execute("DELETE FROM film_directors WHERE film_id = ?", (film_id,))
    conn.executemany(
        "INSERT INTO film_directors (film_id, director_id, position) VALUES (?, ?, ?)",
        [(film_id, director_id, pos) for pos, director_id in enumerate(director_ids)],
    )


def select_film_genres(conn: sqlite3.Connection, film_ids: list[int]) -> dict[int, list[tuple[int, str]]]:
    if not film_ids:
        return {}
    rows = conn.execute(
        f"""
        SELECT fg.film_id, g.id, g.name
        FROM film_genres fg
        JOIN genres g ON g.id = fg.genre_id
        WHERE fg.film_id IN ({_placeholders(film_ids)})
        ORDER BY fg.film_id, fg.position
        """,
        film_ids,
    ).fetchall()
    genres: dict[int, list[tuple[int, str]]] = {}
    for row in rows:
        genres.setdefault(int(row[0]), []).append((int(row[1]), str(row[2])))
    return genres


def select_film_directors(
    conn: sqlite3.Connection, film_ids: list[int]
) -> dict[int, list[tuple[int, str]]]:
    if not film_ids:
        return {}
    rows = conn.execute(
        f"""
        SELECT fd.film_id, d.id, d.name
        FROM film_directors fd
        JOIN directors d ON d.id = fd.director_id
        WHERE fd.film_id IN ({_placeholders(film_ids)})
        ORDER BY fd.film_id, fd.position
        """,
        film_ids,
    ).fetchall()
    directors: dict[int, list[tuple[int, str]]] = {}
    for row in rows:
        directors.setdefault(int(row[0]), []).append((int(row[1]), str(row[2])))
    return directors


def select_popular_film_ids(
    conn: sqlite3.Connection,
    count: int | None = None,
    genre_id: int | None = None,
    year: int | None = None,
) -> list[int]:
    clauses: list[str] = []
    params: list[object] = []
    if genre_id is not None:
        clauses.append(
            "EXISTS (SELECT 1 FROM film_genres fg WHERE fg.film_id = f.id AND fg.genre_id = ?)"
        )
        params.append(genre_id)
    if year is not None:
        clauses.append("CAST(strftime('%Y', f.release_date) AS INTEGER) = ?")
        params.append(year)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    limit = ""
    if count is not None:
        limit = "LIMIT ?"
        params.append(count)
    rows = conn.execute(
        f"""
        SELECT f.id
        FROM films f
        {where}
        ORDER BY f.score DESC, f.id ASC
        {limit}
        """,
        params,
    ).fetchall()
    return [int(row[0]) for row in rows]


def select_director_film_ids(conn: sqlite3.Connection, director_id: int, order_by: str) -> list[int]:
    orderings = {
        "year": "f.release_date ASC, f.id ASC",
        "likes": "f.score DESC, f.id ASC",
    }
    if order_by not in orderings:
        raise ValueError(f"Unknown director film ordering: {order_by}")
    rows = conn.execute(
        f"""
        SELECT f.id
        FROM films f
        JOIN film_directors fd ON fd.film_id = f.id
        WHERE fd.director_id = ?
        ORDER BY {orderings[order_by]}
        """,
        (director_id,),
    ).fetchall()
    return [int(row[0]) for row in rows]


def select_common_film_ids(conn: sqlite3.Connection, user_id: int, other_id: int) -> list[int]:
    rows = conn.execute(
        """
        SELECT f.id
        FROM ratings r1
        JOIN ratings r2 ON r2.film_id = r1.film_id
        JOIN films f ON f.id = r1.film_id
        WHERE r1.user_id = ?
          AND r2.user_id = ?
        ORDER BY f.score DESC,
                 (SELECT COUNT(*) FROM ratings r WHERE r.film_id = f.id) DESC,
                 f.id ASC
        """,
        (user_id, other_id),
    ).fetchall()
    return [int(row[0]) for row in rows]


# -- ratings ---------------------------------------------------------------


def upsert_rating(conn: sqlite3.Connection, film_id: int, user_id: int, rating: int) -> None:
    conn.execute(
        """
        INSERT INTO ratings (film_id, user_id, rating)
        VALUES (?, ?, ?)
        ON CONFLICT(film_id, user_id) DO UPDATE SET
            rating = excluded.rating
        """,
        (film_id, user_id, rating),
    )


def delete_rating(conn: sqlite3.Connection, film_id: int, user_id: int) -> bool:
    cur = conn.execute(
        "DELETE FROM ratings WHERE film_id = ? AND user_id = ?",
        (film_id, user_id),
    )
    return cur.rowcount > 0


def recompute_film_score(conn: sqlite3.Connection, film_id: int) -> float:
    _update_one(
        conn,
        """
        UPDATE films
        SET score = COALESCE(
            (SELECT ROUND(AVG(rating), 1) FROM ratings WHERE film_id = ?),
            0
        )
        WHERE id = ?
        """,
        (film_id, film_id),
        f"score of film {film_id}",
    )
    return select_film_score(conn, film_id)


def select_film_score(conn: sqlite3.Connection, film_id: int) -> float:
    row = conn.execute("SELECT score FROM films WHERE id = ?", (film_id,)).fetchone()
    if not row:
        raise StorageError(f"Film {film_id} vanished during score update")
    return float(row[0])


def select_user_ratings(conn: sqlite3.Connection, user_id: int) -> dict[int, int]:
    rows = conn.execute(
        "SELECT film_id, rating FROM ratings WHERE user_id = ?",
        (user_id,),
    ).fetchall()
    return {int(row[0]): int(row[1]) for row in rows}


def select_neighbor_rows(conn: sqlite3.Connection, user_id: int, threshold: int):
    return conn.execute(
        """
        SELECT
            r2.user_id AS neighbor_id,
            COUNT(*) AS shared,
            SUM(CASE WHEN ABS(r1.rating - r2.rating) <= ? THEN 1 ELSE 0 END) AS weight
        FROM ratings r1
        JOIN ratings r2 ON r2.film_id = r1.film_id
        WHERE r1.user_id = ?
          AND r2.user_id != ?
        GROUP BY r2.user_id
        """,
        (threshold, user_id, user_id),
    ).fetchall()


def select_unseen_neighbor_films(
    conn: sqlite3.Connection,
    user_id: int,
    neighbor_ids: list[int],
    quality_floor: float,
):
    if not neighbor_ids:
        return []
    return conn.execute(
        f"""
        SELECT r.user_id AS neighbor_id, f.id AS film_id, f.score AS score
        FROM ratings r
        JOIN films f ON f.id = r.film_id
        WHERE r.user_id IN ({_placeholders(neighbor_ids)})
          AND f.score >= ?
          AND f.id NOT IN (SELECT film_id FROM ratings WHERE user_id = ?)
        """,
        (*neighbor_ids, quality_floor, user_id),
    ).fetchall()


# -- reviews ---------------------------------------------------------------


def insert_review(
    conn: sqlite3.Connection,
    content: str,
    is_positive: bool,
    user_id: int,
    film_id: int,
) -> int:
    cur = conn.execute(
        """
        INSERT INTO reviews (content, is_positive, user_id, film_id, usefulness)
        VALUES (?, ?, ?, ?, 0)
        """,
        (content, int(is_positive), user_id, film_id),
    )
    if cur.lastrowid is None:
        raise StorageError("Failed to store review")
    return int(cur.lastrowid)


def update_review(
    conn: sqlite3.Connection,
    review_id: int,
    content: str,
    is_positive: bool,
) -> None:
    # usefulness is owned by the vote ledger
    _update_one(
        conn,
        "UPDATE reviews SET content = ?, is_positive = ? WHERE id = ?",
        (content, int(is_positive), review_id),
        f"review {review_id}",
    )


def delete_review(conn: sqlite3.Connection, review_id: int) -> bool:
    return conn.execute("DELETE FROM reviews WHERE id = ?", (review_id,)).rowcount > 0


def select_review_row(conn: sqlite3.Connection, review_id: int):
    return conn.execute(
        """
        SELECT id, content, is_positive, user_id, film_id, usefulness
        FROM reviews
        WHERE id = ?
        """,
        (review_id,),
    ).fetchone()


def select_review_rows(conn: sqlite3.Connection, film_id: int | None, count: int | None):
    clauses = ""
    params: list[object] = []
    if film_id is not None:
        clauses = "WHERE film_id = ?"
        params.append(film_id)
    limit = ""
    if count is not None:
        limit = "LIMIT ?"
        params.append(count)
    return conn.execute(
        f"""
        SELECT id, content, is_positive, user_id, film_id, usefulness
        FROM reviews
        {clauses}
        ORDER BY usefulness DESC, id ASC
        {limit}
        """,
        params,
    ).fetchall()


def select_review_vote(conn: sqlite3.Connection, review_id: int, user_id: int) -> str | None:
    row = conn.execute(
        "SELECT kind FROM review_votes WHERE review_id = ? AND user_id = ?",
        (review_id, user_id),
    ).fetchone()
    if not row:
        return None
    return str(row[0])


def upsert_review_vote(conn: sqlite3.Connection, review_id: int, user_id: int, kind: str) -> None:
    conn.execute(
        """
        INSERT INTO review_votes (review_id, user_id, kind)
        VALUES (?, ?, ?)
        ON CONFLICT(review_id, user_id) DO UPDATE SET
            kind = excluded.kind
        """,
        (review_id, user_id, kind),
    )


def delete_review_vote(conn: sqlite3.Connection, review_id: int, user_id: int, kind: str) -> bool:
    cur = conn.execute(
        "DELETE FROM review_votes WHERE review_id = ? AND user_id = ? AND kind = ?",
        (review_id, user_id, kind),
    )
    return cur.rowcount > 0


def add_review_usefulness(conn: sqlite3.Connection, review_id: int, delta: int) -> None:
    _update_one(
        conn,
        "UPDATE reviews SET usefulness = usefulness + ? WHERE id = ?",
        (delta, review_id),
        f"usefulness of review {review_id}",
    )


def select_review_vote_totals(conn: sqlite3.Connection, review_id: int) -> tuple[int, int]:
    row = conn.execute(
        """
        SELECT
            COALESCE(SUM(CASE WHEN kind = 'like' THEN 1 ELSE 0 END), 0),
            COALESCE(SUM(CASE WHEN kind = 'dislike' THEN 1 ELSE 0 END), 0)
        FROM review_votes
        WHERE review_id = ?
        """,
        (review_id,),
    ).fetchone()
    return int(row[0]), int(row[1])


# -- events ----------------------------------------------------------------


def insert_event(
    conn: sqlite3.Connection,
    user_id: int,
    timestamp: int,
    event_type: str,
    operation: str,
    entity_id: int,
) -> int:
    cur = conn.execute(
        """
        INSERT INTO events (user_id, timestamp, event_type, operation, entity_id)
        VALUES (?, ?, ?, ?, ?)
        """,
        (user_id, timestamp, event_type, operation, entity_id),
    )
    if cur.lastrowid is None:
        raise StorageError("Failed to store event")
    return int(cur.lastrowid)


def select_event_rows(conn: sqlite3.Connection, user_id: int):
    return conn.execute(
        """
        SELECT id, user_id, timestamp, event_type, operation, entity_id
        FROM events
        WHERE user_id = ?
        ORDER BY timestamp ASC, id ASC
        """,
        (user_id,),
    ).fetchall()


def select_user_review_votes(conn: sqlite3.Connection, user_id: int) -> list[tuple[int, str]]:
    rows = conn.execute(
        "SELECT review_id, kind FROM review_votes WHERE user_id = ?",
        (user_id,),
    ).fetchall()
    return [(int(row[0]), str(row[1])) for row in rows]


def delete_film_events(conn: sqlite3.Connection, film_id: int) -> int:
    cur = conn.execute(
        """
        DELETE FROM events
        WHERE (event_type = 'LIKE' AND entity_id = ?)
           OR (event_type = 'REVIEW' AND entity_id IN (
                SELECT id FROM reviews WHERE film_id = ?
           ))
        """,
        (film_id, film_id),
    )
    return cur.rowcount


def delete_friend_events_targeting(conn: sqlite3.Connection, user_id: int) -> int:
    cur = conn.execute(
        "DELETE FROM events WHERE event_type = 'FRIEND' AND entity_id = ?",
        (user_id,),
    )
    return cur.rowcount
