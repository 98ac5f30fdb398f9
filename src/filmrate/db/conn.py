from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
import sqlite3
from typing import TypeVar

from filmrate.db import repo
from filmrate.errors import ConflictError
from filmrate.util.logging import get_logger
from filmrate.util.retry import retry

LOG = get_logger(__name__)
T = TypeVar("T")


def ensure_db(path: str) -> None:
    db_path = Path(path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    created = not db_path.exists()

    with sqlite3.connect(db_path) as conn:
        schema_path = Path(__file__).parent / "schema.sql"
        conn.executescript(schema_path.read_text(encoding="utf-8"))

    if created:
        LOG.info("Created database at %s", db_path)


def _is_lock_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return "locked" in message or "busy" in message


class Database:
    """Data-access handle shared by the services.

    Reads get a short-lived autocommit connection. Writes run inside
    ``BEGIN IMMEDIATE`` so concurrent writers of the same rows queue on
    SQLite's write lock; lock timeouts are retried before surfacing as
    :class:`ConflictError`.
    """

    def __init__(
        self,
        path: str,
        busy_timeout_ms: int = 5000,
        max_retries: int = 3,
        retry_delay_seconds: float = 0.05,
    ) -> None:
        self.path = path
        self.busy_timeout_ms = busy_timeout_ms
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

    @classmethod
    def from_config(cls, cfg) -> "Database":
        return cls(
            cfg.database_path,
            busy_timeout_ms=cfg.storage.busy_timeout_ms,
            max_retries=cfg.storage.max_retries,
            retry_delay_seconds=cfg.storage.retry_delay_seconds,
        )

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        conn = repo.connect(self.path, busy_timeout_ms=self.busy_timeout_ms)
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        conn = repo.connect(self.path, busy_timeout_ms=self.busy_timeout_ms)
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    def write(self, func: Callable[[sqlite3.Connection], T]) -> T:
        def _attempt() -> T:
            with self.transaction() as conn:
                return func(conn)

        def _on_error(exc: Exception, attempt: int) -> None:
            LOG.warning("Write attempt %s on %s hit a lock: %s", attempt, self.path, exc)

        try:
            return retry(
                _attempt,
                attempts=max(1, self.max_retries),
                delay_seconds=self.retry_delay_seconds,
                retry_on=(sqlite3.OperationalError,),
                should_retry=_is_lock_error,
                on_error=_on_error,
            )
        except sqlite3.OperationalError as exc:
            if _is_lock_error(exc):
                raise ConflictError(f"Could not acquire write lock on {self.path}") from exc
            raise
