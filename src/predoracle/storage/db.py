"""DuckDB connection, schema init and transactions."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS notification_seq START 1;

-- Oracle singleton (id pinned to 1, second insert violates the primary key)
CREATE TABLE IF NOT EXISTS oracle_config (
    id                  TINYINT PRIMARY KEY CHECK (id = 1),
    authority           VARCHAR NOT NULL,
    bond_amount         UBIGINT NOT NULL,
    liveness_period     BIGINT NOT NULL,
    active_proposals    UBIGINT NOT NULL,
    total_resolved      UBIGINT NOT NULL,
    proposal_seq        UBIGINT NOT NULL,
    event_seq           UBIGINT NOT NULL,
    created_at          BIGINT NOT NULL
);

-- Events (immutable)
CREATE TABLE IF NOT EXISTS events (
    id                  UBIGINT PRIMARY KEY,
    description         VARCHAR NOT NULL,
    resolution_type     UTINYINT NOT NULL,
    resolution          JSON NOT NULL,
    market_ref          VARCHAR,
    created_at          BIGINT NOT NULL,
    creator             VARCHAR NOT NULL
);

-- Proposals (one per event)
CREATE TABLE IF NOT EXISTS proposals (
    id                      UBIGINT PRIMARY KEY,
    event_id                UBIGINT NOT NULL UNIQUE,
    proposer                VARCHAR NOT NULL,
    outcome                 BOOLEAN NOT NULL,
    evidence_hash           VARCHAR NOT NULL,
    submitted_at            BIGINT NOT NULL,
    liveness_end            BIGINT NOT NULL,
    bonded_amount           UBIGINT NOT NULL,
    resolved                BOOLEAN NOT NULL,
    disputed                BOOLEAN NOT NULL,
    dispute_bond            UBIGINT NOT NULL,
    disputer                VARCHAR,
    dispute_evidence_hash   VARCHAR,
    resolver                VARCHAR
);

-- Notification log (append-only)
CREATE TABLE IF NOT EXISTS notifications (
    seq             BIGINT PRIMARY KEY DEFAULT nextval('notification_seq'),
    kind            VARCHAR NOT NULL,
    proposal_id     UBIGINT NOT NULL,
    emitted_at      BIGINT NOT NULL,
    payload         JSON NOT NULL
);

-- Bond ledger: balances per principal and bond reservations
CREATE TABLE IF NOT EXISTS ledger_balances (
    principal       VARCHAR PRIMARY KEY,
    balance         UBIGINT NOT NULL
);

CREATE TABLE IF NOT EXISTS bond_reservations (
    key             VARCHAR PRIMARY KEY,
    principal       VARCHAR NOT NULL,
    amount          UBIGINT NOT NULL,
    released        BOOLEAN NOT NULL DEFAULT FALSE,
    created_at      BIGINT NOT NULL,
    released_at     BIGINT
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager.
    Pass ":memory:" for a throwaway database (tests)."""
    if str(db_path) == ":memory:":
        return duckdb.connect(":memory:")
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables and sequences if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise


@contextmanager
def transaction(conn: DuckDBPyConnection) -> Iterator[DuckDBPyConnection]:
    """Run a block in one transaction: commit on success, roll back on any exception."""
    conn.begin()
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()
