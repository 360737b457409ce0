from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from dialogue_engine.db.schema import init_db

log = logging.getLogger(__name__)


class Store:
    def __init__(self, db_path: str = ":memory:") -> None:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        init_db(self.conn)

    @contextmanager
    def tx(self) -> Iterator[sqlite3.Connection]:
        log.debug("transaction_start")
        try:
            yield self.conn
            self.conn.commit()
            log.debug("transaction_commit")
        except Exception:
            self.conn.rollback()
            log.exception("transaction_rollback")
            raise

    def write_event(self, actor_id: str, event_type: str, payload: dict[str, Any]) -> None:
        log.debug("event_write actor=%s type=%s", actor_id, event_type)
        with self.tx() as conn:
            conn.execute(
                "INSERT INTO events(actor_id, event_type, payload_json) VALUES (?, ?, ?)",
                (actor_id, event_type, json.dumps(payload, sort_keys=True)),
            )

    def get_recent_events(self, actor_id: str, limit: int = 6) -> list[dict[str, Any]]:
        rows = self.conn.execute(
            """
            SELECT event_type, payload_json, ts
            FROM events
            WHERE actor_id = ?
            ORDER BY event_id DESC
            LIMIT ?
            """,
            (actor_id, limit),
        ).fetchall()
        items: list[dict[str, Any]] = []
        for row in reversed(rows):
            try:
                payload = json.loads(row["payload_json"])
            except json.JSONDecodeError:
                payload = {}
            items.append(
                {
                    "event_type": row["event_type"],
                    "payload": payload,
                    "ts": row["ts"],
                }
            )
        return items

    def count_events(self, actor_id: str, event_type: str | None = None) -> int:
        if event_type is None:
            row = self.conn.execute("SELECT COUNT(*) c FROM events WHERE actor_id = ?", (actor_id,)).fetchone()
        else:
            row = self.conn.execute(
                "SELECT COUNT(*) c FROM events WHERE actor_id = ? AND event_type = ?",
                (actor_id, event_type),
            ).fetchone()
        return int(row["c"])

    def record_strategic_action(
        self,
        actor_id: str,
        action_kind: str,
        character_id: str,
        stage_id: str,
        successful: bool,
        reason: str | None = None,
    ) -> None:
        with self.tx() as conn:
            conn.execute(
                """
                INSERT INTO strategic_actions(actor_id, action_kind, character_id, stage_id, successful, reason)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (actor_id, action_kind, character_id, stage_id, 1 if successful else 0, reason),
            )

    def get_action_history(self, actor_id: str, limit: int = 20) -> list[dict[str, Any]]:
        rows = self.conn.execute(
            """
            SELECT action_kind, character_id, stage_id, successful, reason, ts
            FROM strategic_actions
            WHERE actor_id = ?
            ORDER BY action_id DESC
            LIMIT ?
            """,
            (actor_id, limit),
        ).fetchall()
        return [
            {
                "action_kind": row["action_kind"],
                "character_id": row["character_id"],
                "stage_id": row["stage_id"],
                "successful": bool(row["successful"]),
                "reason": row["reason"],
                "ts": row["ts"],
            }
            for row in reversed(rows)
        ]
