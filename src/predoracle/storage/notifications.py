"""Notification log append and query (append-only)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from predoracle.models import Notification, StoredNotification

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_notification_adapter: TypeAdapter[Any] = TypeAdapter(Notification)


def append_notification(conn: DuckDBPyConnection, notification: Any, emitted_at: int) -> int:
    """Append a notification and return its sequence number."""
    row = conn.execute(
        """
        INSERT INTO notifications (kind, proposal_id, emitted_at, payload)
        VALUES (?, ?, ?, ?)
        RETURNING seq
        """,
        [notification.kind, notification.proposal_id, emitted_at, notification.model_dump_json()],
    ).fetchone()
    return row[0]


def list_notifications(
    conn: DuckDBPyConnection,
    kind: str | None = None,
    proposal_id: int | None = None,
    after_seq: int = 0,
    limit: int = 100,
) -> list[StoredNotification]:
    """Notifications in emission order, optionally filtered by kind or proposal."""
    clauses = ["seq > ?"]
    params: list[Any] = [after_seq]
    if kind:
        clauses.append("kind = ?")
        params.append(kind)
    if proposal_id is not None:
        clauses.append("proposal_id = ?")
        params.append(proposal_id)
    params.append(limit)
    rows = conn.execute(
        f"SELECT seq, emitted_at, payload FROM notifications WHERE {' AND '.join(clauses)} ORDER BY seq LIMIT ?",
        params,
    ).fetchall()
    return [
        StoredNotification(
            seq=r[0],
            emitted_at=r[1],
            notification=_notification_adapter.validate_json(r[2]),
        )
        for r in rows
    ]


def notification_stats(conn: DuckDBPyConnection) -> dict[str, Any]:
    """Total count and count per kind."""
    total = conn.execute("SELECT COUNT(*) FROM notifications").fetchone()[0]
    by_kind = conn.execute(
        "SELECT kind, COUNT(*) AS cnt FROM notifications GROUP BY kind ORDER BY kind"
    ).fetchall()
    return {"total": total, "by_kind": {r[0]: r[1] for r in by_kind}}
