from __future__ import annotations

import sqlite3
import time

from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.db.loaders import event_from_row
from filmrate.errors import NotFoundError
from filmrate.models.entities import Event, EventType, Operation
from filmrate.util.logging import get_logger

LOG = get_logger(__name__)


def now_millis() -> int:
    return int(time.time() * 1000)


class EventLedger:
    """Append-only action log behind the user feed.

    Appends are best-effort: a failed write is logged and dropped so it never
    undoes the rating, vote or friendship change that triggered it.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def append(
        self,
        user_id: int,
        timestamp: int | None,
        event_type: EventType,
        operation: Operation,
        entity_id: int,
    ) -> int | None:
        stamp = timestamp if timestamp is not None else now_millis()
        try:
            with self.db.connect() as conn:
                event_id = repo.insert_event(
                    conn,
                    user_id,
                    stamp,
                    EventType(event_type).value,
                    Operation(operation).value,
                    entity_id,
                )
        except sqlite3.Error as exc:
            LOG.warning(
                "Dropped %s %s event for user %s on %s: %s",
                event_type,
                operation,
                user_id,
                entity_id,
                exc,
            )
            return None
        LOG.debug(
            "Event %s: %s %s %s by user %s",
            event_id,
            event_type,
            operation,
            entity_id,
            user_id,
        )
        return event_id

    def feed(self, user_id: int) -> list[Event]:
        with self.db.connect() as conn:
            if not repo.user_exists(conn, user_id):
                raise NotFoundError(f"User {user_id} not found")
            rows = repo.select_event_rows(conn, user_id)
        return [event_from_row(row) for row in rows]
