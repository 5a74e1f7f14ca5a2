"""OracleService - locking, persistence and notification delivery around the state machine.

Each operation:
  1. takes the per-record locks it needs (proposal, event, principal, config - in that order),
  2. reads `now` once from the clock,
  3. loads records on its own DuckDB cursor and runs the pure transition in core/,
  4. commits every write (records, bond reservation, notification) in one transaction.

A failed check raises before anything is written, and any exception rolls the
transaction back, so no partial effect is ever visible.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from threading import Lock
from typing import TYPE_CHECKING, Any, Callable, Iterator

import structlog

from predoracle import core
from predoracle.core.locks import KeyedLocks
from predoracle.core.registry import DEFAULT_DESCRIPTION_MAX_BYTES
from predoracle.core.settlement import BondRelease
from predoracle.errors import InvalidEvent, NotInitialized, OracleError, ProposalExists, ProposalNotFound
from predoracle.ledger.base import BondLedger, reservation_key
from predoracle.models import Event, OracleConfig, Proposal, ProposalState, StoredNotification
from predoracle.storage import records
from predoracle.storage.db import get_connection, init_schema, transaction
from predoracle.storage.ledger import DuckDBBondLedger
from predoracle.storage.notifications import append_notification, list_notifications

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

    from predoracle.config import Settings

log = structlog.get_logger(__name__)

Subscriber = Callable[[StoredNotification], None]

_CONFIG_LOCK = "config"


def _system_clock() -> int:
    return int(time.time())


class OracleService:
    """Entry point for every oracle operation (library, CLI and API all go through here)."""

    def __init__(
        self,
        conn: DuckDBPyConnection,
        *,
        clock: Callable[[], int] | None = None,
        ledger_factory: Callable[[Any], BondLedger] | None = None,
        max_description_bytes: int = DEFAULT_DESCRIPTION_MAX_BYTES,
    ) -> None:
        self.conn = conn
        self.clock = clock or _system_clock
        self._ledger_factory = ledger_factory or (lambda c: DuckDBBondLedger(c, clock=self.clock))
        self.max_description_bytes = max_description_bytes
        self._locks = KeyedLocks()
        self._cursor_lock = Lock()
        self._subscribers: list[Subscriber] = []
        init_schema(conn)

    @classmethod
    def from_settings(cls, settings: Settings, clock: Callable[[], int] | None = None) -> OracleService:
        conn = get_connection(settings.db_path)
        return cls(conn, clock=clock, max_description_bytes=settings.description_max_bytes)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> OracleService:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # --- plumbing ---
    @contextmanager
    def _cursor(self) -> Iterator[DuckDBPyConnection]:
        """Dedicated cursor per operation; DuckDB connections are not shared across threads."""
        with self._cursor_lock:
            cur = self.conn.cursor()
        try:
            yield cur
        finally:
            cur.close()

    def _ledger(self, cur: DuckDBPyConnection) -> BondLedger:
        return self._ledger_factory(cur)

    @staticmethod
    def _require_config(cur: DuckDBPyConnection) -> OracleConfig:
        config = records.load_oracle_config(cur)
        if config is None:
            raise NotInitialized("Oracle is not initialized; run initialize first")
        return config

    @staticmethod
    def _require_event(cur: DuckDBPyConnection, event_id: int) -> Event:
        event = records.get_event(cur, event_id)
        if event is None:
            raise InvalidEvent(f"Event not found: {event_id}")
        return event

    @staticmethod
    def _require_proposal(cur: DuckDBPyConnection, proposal_id: int) -> Proposal:
        proposal = records.get_proposal(cur, proposal_id)
        if proposal is None:
            raise ProposalNotFound(f"Proposal not found: {proposal_id}")
        return proposal

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a notification callback. Returns an unsubscribe function."""
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    def _deliver(self, stored: list[StoredNotification]) -> None:
        for item in stored:
            for callback in list(self._subscribers):
                try:
                    callback(item)
                except Exception:
                    # Subscriber failures never undo a committed transition
                    log.exception("notification_subscriber_failed", seq=item.seq, kind=item.notification.kind)

    @contextmanager
    def _operation(self, name: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except OracleError as e:
            log.info("operation_rejected", operation=name, code=e.code, reason=e.message, **context)
            raise

    # --- Oracle configuration ---
    def initialize(self, authority: str, bond_amount: int, liveness_period: int) -> OracleConfig:
        """Create the oracle singleton. A second call fails AlreadyInitialized."""
        with self._operation("initialize", authority=authority):
            config = core.initialize_oracle(authority, bond_amount, liveness_period)
            with self._locks.hold(_CONFIG_LOCK), self._cursor() as cur:
                now = self.clock()
                with transaction(cur):
                    records.insert_oracle_config(cur, config, created_at=now)
        log.info(
            "oracle_initialized",
            authority=authority,
            bond_amount=bond_amount,
            liveness_period=liveness_period,
        )
        return config

    def get_config(self) -> OracleConfig:
        with self._cursor() as cur:
            return self._require_config(cur)

    def is_initialized(self) -> bool:
        with self._cursor() as cur:
            return records.load_oracle_config(cur) is not None

    # --- Event registry ---
    def create_event(
        self,
        description: str,
        creator: str,
        resolution: Any = None,
        market_ref: str = "",
    ) -> Event:
        with self._operation("create_event", creator=creator):
            with self._locks.hold(_CONFIG_LOCK), self._cursor() as cur:
                now = self.clock()
                config = self._require_config(cur)
                config, event = core.create_event(
                    config,
                    description,
                    resolution,
                    market_ref,
                    creator,
                    now=now,
                    max_description_bytes=self.max_description_bytes,
                )
                with transaction(cur):
                    records.insert_event(cur, event)
                    records.save_oracle_config(cur, config)
        log.info("event_created", event_id=event.id, creator=creator, resolution=event.resolution.kind)
        return event

    def get_event(self, event_id: int) -> Event:
        with self._cursor() as cur:
            return self._require_event(cur, event_id)

    def list_events(self, limit: int = 100, offset: int = 0) -> list[Event]:
        with self._cursor() as cur:
            return records.list_events(cur, limit=limit, offset=offset)

    # --- Proposal engine ---
    def propose(self, event_id: int, proposer: str, outcome: bool, evidence_hash: bytes | str) -> Proposal:
        """Assert an outcome for an event and reserve the proposer's bond."""
        with self._operation("propose", event_id=event_id, proposer=proposer):
            with self._locks.hold(f"event:{event_id}", f"principal:{proposer}", _CONFIG_LOCK), self._cursor() as cur:
                now = self.clock()
                config = self._require_config(cur)
                event = self._require_event(cur, event_id)
                existing = records.get_proposal_for_event(cur, event_id)
                if existing is not None:
                    raise ProposalExists(f"Event {event_id} already has proposal {existing.id}")
                ledger = self._ledger(cur)
                config, proposal = core.propose(
                    config,
                    event,
                    proposer,
                    outcome,
                    evidence_hash,
                    available_balance=ledger.available(proposer),
                    now=now,
                )
                with transaction(cur):
                    records.insert_proposal(cur, proposal)
                    records.save_oracle_config(cur, config)
                    ledger.reserve(proposer, proposal.bonded_amount, reservation_key(proposal.id, "proposer"))
        log.info(
            "proposal_created",
            proposal_id=proposal.id,
            event_id=event_id,
            proposer=proposer,
            outcome=outcome,
            liveness_end=proposal.liveness_end,
        )
        return proposal

    def dispute(self, proposal_id: int, disputer: str, counter_evidence_hash: bytes | str) -> Proposal:
        """Challenge a proposal inside its liveness window and reserve the disputer's bond."""
        with self._operation("dispute", proposal_id=proposal_id, disputer=disputer):
            with self._locks.hold(f"proposal:{proposal_id}", f"principal:{disputer}"), self._cursor() as cur:
                now = self.clock()
                config = self._require_config(cur)
                proposal = self._require_proposal(cur, proposal_id)
                ledger = self._ledger(cur)
                proposal, notification = core.dispute(
                    config,
                    proposal,
                    disputer,
                    counter_evidence_hash,
                    available_balance=ledger.available(disputer),
                    now=now,
                )
                with transaction(cur):
                    records.update_proposal(cur, proposal)
                    ledger.reserve(disputer, proposal.dispute_bond, reservation_key(proposal.id, "disputer"))
                    seq = append_notification(cur, notification, emitted_at=now)
        log.warning("proposal_disputed", proposal_id=proposal_id, disputer=disputer)
        self._deliver([StoredNotification(seq=seq, emitted_at=now, notification=notification)])
        return proposal

    # --- Resolution gateway ---
    def resolve(self, proposal_id: int, caller: str, final_outcome: bool) -> Proposal:
        """Finalize a proposal after its window (authority only if disputed)."""
        with self._operation("resolve", proposal_id=proposal_id, caller=caller):
            with self._locks.hold(f"proposal:{proposal_id}", _CONFIG_LOCK), self._cursor() as cur:
                now = self.clock()
                config = self._require_config(cur)
                proposal = self._require_proposal(cur, proposal_id)
                event = self._require_event(cur, proposal.event_id)
                config, proposal, notification = core.resolve(
                    config, proposal, event, caller, final_outcome, now=now
                )
                with transaction(cur):
                    records.update_proposal(cur, proposal)
                    records.save_oracle_config(cur, config)
                    seq = append_notification(cur, notification, emitted_at=now)
        log.info(
            "proposal_resolved",
            proposal_id=proposal_id,
            event_id=proposal.event_id,
            outcome=final_outcome,
            resolver=caller,
            disputed=proposal.disputed,
        )
        self._deliver([StoredNotification(seq=seq, emitted_at=now, notification=notification)])
        return proposal

    # --- Bond settlement ---
    def withdraw_bond(self, proposal_id: int, withdrawer: str) -> BondRelease:
        """Release the withdrawer's bond on a resolved proposal, exactly once."""
        with self._operation("withdraw_bond", proposal_id=proposal_id, withdrawer=withdrawer):
            with self._locks.hold(f"proposal:{proposal_id}", f"principal:{withdrawer}"), self._cursor() as cur:
                proposal = self._require_proposal(cur, proposal_id)
                proposal, release = core.withdraw_bond(proposal, withdrawer)
                ledger = self._ledger(cur)
                with transaction(cur):
                    records.update_proposal(cur, proposal)
                    released = ledger.release(release.reservation_key)
        if released != release.amount:
            log.warning(
                "bond_release_mismatch",
                proposal_id=proposal_id,
                authorized=release.amount,
                released=released,
            )
        log.info("bond_withdrawn", proposal_id=proposal_id, principal=withdrawer, role=release.role, amount=release.amount)
        return release

    # --- Read side ---
    def get_proposal(self, proposal_id: int) -> Proposal:
        with self._cursor() as cur:
            return self._require_proposal(cur, proposal_id)

    def proposal_for_event(self, event_id: int) -> Proposal | None:
        with self._cursor() as cur:
            return records.get_proposal_for_event(cur, event_id)

    def list_proposals(self, state: ProposalState | None = None, limit: int = 100, offset: int = 0) -> list[Proposal]:
        with self._cursor() as cur:
            return records.list_proposals(cur, state=state, limit=limit, offset=offset)

    def disputable_proposals(self, now: int | None = None) -> list[Proposal]:
        """Open proposals whose liveness window is still running (dispute candidates)."""
        now = self.clock() if now is None else now
        return [p for p in self.list_proposals(ProposalState.OPEN, limit=10_000) if p.in_liveness(now)]

    def resolvable_proposals(self, now: int | None = None) -> list[Proposal]:
        """Unresolved proposals whose liveness window has elapsed."""
        now = self.clock() if now is None else now
        pending = self.list_proposals(ProposalState.OPEN, limit=10_000)
        pending += self.list_proposals(ProposalState.DISPUTED, limit=10_000)
        return sorted((p for p in pending if not p.in_liveness(now)), key=lambda p: p.id)

    def proposal_stats(self) -> dict[str, int]:
        with self._cursor() as cur:
            return records.proposal_stats(cur)

    def notifications(
        self,
        kind: str | None = None,
        proposal_id: int | None = None,
        after_seq: int = 0,
        limit: int = 100,
    ) -> list[StoredNotification]:
        with self._cursor() as cur:
            return list_notifications(cur, kind=kind, proposal_id=proposal_id, after_seq=after_seq, limit=limit)

    # --- Ledger passthrough ---
    def deposit(self, principal: str, amount: int) -> int:
        with self._locks.hold(f"principal:{principal}"), self._cursor() as cur:
            with transaction(cur):
                balance = self._ledger(cur).deposit(principal, amount)
        log.info("ledger_deposit", principal=principal, amount=amount, balance=balance)
        return balance

    def balances(self, principal: str) -> dict[str, int]:
        with self._cursor() as cur:
            ledger = self._ledger(cur)
            total = ledger.balance(principal)
            available = ledger.available(principal)
        return {"balance": total, "available": available, "reserved": total - available}
