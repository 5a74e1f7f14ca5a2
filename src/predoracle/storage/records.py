"""Oracle config, event and proposal persistence."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import duckdb
from pydantic import TypeAdapter

from predoracle.errors import AlreadyInitialized, ProposalExists
from predoracle.models import Event, OracleConfig, Proposal, ProposalState, ResolutionType

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_resolution_adapter: TypeAdapter[Any] = TypeAdapter(ResolutionType)

_CONFIG_COLUMNS = [
    "authority",
    "bond_amount",
    "liveness_period",
    "active_proposals",
    "total_resolved",
    "proposal_seq",
    "event_seq",
]
_EVENT_COLUMNS = ["id", "description", "resolution", "market_ref", "created_at", "creator"]
_PROPOSAL_COLUMNS = [
    "id",
    "event_id",
    "proposer",
    "outcome",
    "evidence_hash",
    "submitted_at",
    "liveness_end",
    "bonded_amount",
    "resolved",
    "disputed",
    "dispute_bond",
    "disputer",
    "dispute_evidence_hash",
    "resolver",
]


# --- Oracle config ---
def insert_oracle_config(conn: DuckDBPyConnection, config: OracleConfig, created_at: int) -> None:
    """Create the singleton row. The primary key rejects a second initialization."""
    try:
        conn.execute(
            f"""
            INSERT INTO oracle_config (id, {', '.join(_CONFIG_COLUMNS)}, created_at)
            VALUES (1, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [getattr(config, c) for c in _CONFIG_COLUMNS] + [created_at],
        )
    except duckdb.ConstraintException as e:
        raise AlreadyInitialized() from e


def load_oracle_config(conn: DuckDBPyConnection) -> OracleConfig | None:
    row = conn.execute(f"SELECT {', '.join(_CONFIG_COLUMNS)} FROM oracle_config WHERE id = 1").fetchone()
    if not row:
        return None
    return OracleConfig(**dict(zip(_CONFIG_COLUMNS, row)))


def save_oracle_config(conn: DuckDBPyConnection, config: OracleConfig) -> None:
    """Persist counters and sequences. authority/bond/liveness are fixed at initialization."""
    conn.execute(
        """
        UPDATE oracle_config
        SET active_proposals = ?, total_resolved = ?, proposal_seq = ?, event_seq = ?
        WHERE id = 1
        """,
        [config.active_proposals, config.total_resolved, config.proposal_seq, config.event_seq],
    )


# --- Events ---
def insert_event(conn: DuckDBPyConnection, event: Event) -> None:
    conn.execute(
        """
        INSERT INTO events (id, description, resolution_type, resolution, market_ref, created_at, creator)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        [
            event.id,
            event.description,
            int(event.resolution_code),
            event.resolution.model_dump_json(),
            event.market_ref,
            event.created_at,
            event.creator,
        ],
    )


def _row_to_event(row: tuple[Any, ...]) -> Event:
    data = dict(zip(_EVENT_COLUMNS, row))
    data["resolution"] = _resolution_adapter.validate_python(json.loads(data["resolution"]))
    data["market_ref"] = data["market_ref"] or ""
    return Event(**data)


def get_event(conn: DuckDBPyConnection, event_id: int) -> Event | None:
    row = conn.execute(f"SELECT {', '.join(_EVENT_COLUMNS)} FROM events WHERE id = ?", [event_id]).fetchone()
    return _row_to_event(row) if row else None


def list_events(conn: DuckDBPyConnection, limit: int = 100, offset: int = 0) -> list[Event]:
    rows = conn.execute(
        f"SELECT {', '.join(_EVENT_COLUMNS)} FROM events ORDER BY id LIMIT ? OFFSET ?",
        [limit, offset],
    ).fetchall()
    return [_row_to_event(r) for r in rows]


def count_events(conn: DuckDBPyConnection) -> int:
    return conn.execute("SELECT COUNT(*) FROM events").fetchone()[0]


# --- Proposals ---
def insert_proposal(conn: DuckDBPyConnection, proposal: Proposal) -> None:
    """Insert a new proposal. The unique event_id column rejects a second proposal per event."""
    try:
        conn.execute(
            f"""
            INSERT INTO proposals ({', '.join(_PROPOSAL_COLUMNS)})
            VALUES ({', '.join('?' for _ in _PROPOSAL_COLUMNS)})
            """,
            [getattr(proposal, c) for c in _PROPOSAL_COLUMNS],
        )
    except duckdb.ConstraintException as e:
        raise ProposalExists(f"Proposal for event {proposal.event_id} already exists") from e


def update_proposal(conn: DuckDBPyConnection, proposal: Proposal) -> None:
    """Write back the mutable fields (dispute, resolution, bond zeroing)."""
    conn.execute(
        """
        UPDATE proposals
        SET outcome = ?, bonded_amount = ?, resolved = ?, disputed = ?, dispute_bond = ?,
            disputer = ?, dispute_evidence_hash = ?, resolver = ?
        WHERE id = ?
        """,
        [
            proposal.outcome,
            proposal.bonded_amount,
            proposal.resolved,
            proposal.disputed,
            proposal.dispute_bond,
            proposal.disputer,
            proposal.dispute_evidence_hash,
            proposal.resolver,
            proposal.id,
        ],
    )


def _row_to_proposal(row: tuple[Any, ...]) -> Proposal:
    return Proposal(**dict(zip(_PROPOSAL_COLUMNS, row)))


def get_proposal(conn: DuckDBPyConnection, proposal_id: int) -> Proposal | None:
    row = conn.execute(
        f"SELECT {', '.join(_PROPOSAL_COLUMNS)} FROM proposals WHERE id = ?", [proposal_id]
    ).fetchone()
    return _row_to_proposal(row) if row else None


def get_proposal_for_event(conn: DuckDBPyConnection, event_id: int) -> Proposal | None:
    row = conn.execute(
        f"SELECT {', '.join(_PROPOSAL_COLUMNS)} FROM proposals WHERE event_id = ?", [event_id]
    ).fetchone()
    return _row_to_proposal(row) if row else None


_STATE_FILTERS = {
    ProposalState.OPEN: "resolved = false AND disputed = false",
    ProposalState.DISPUTED: "resolved = false AND disputed = true",
    ProposalState.RESOLVED: "resolved = true",
}


def list_proposals(
    conn: DuckDBPyConnection,
    state: ProposalState | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Proposal]:
    """List proposals by id, optionally filtered by lifecycle state."""
    where = f"WHERE {_STATE_FILTERS[state]}" if state is not None else ""
    rows = conn.execute(
        f"SELECT {', '.join(_PROPOSAL_COLUMNS)} FROM proposals {where} ORDER BY id LIMIT ? OFFSET ?",
        [limit, offset],
    ).fetchall()
    return [_row_to_proposal(r) for r in rows]


def proposal_stats(conn: DuckDBPyConnection) -> dict[str, int]:
    """Counts per lifecycle state."""
    row = conn.execute(
        """
        SELECT
            COUNT(*) FILTER (WHERE resolved = false AND disputed = false),
            COUNT(*) FILTER (WHERE resolved = false AND disputed = true),
            COUNT(*) FILTER (WHERE resolved = true),
            COUNT(*)
        FROM proposals
        """
    ).fetchone()
    return {"open": row[0], "disputed": row[1], "resolved": row[2], "total": row[3]}
