"""DuckDB-backed bond ledger (balances + reservations)."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

import structlog

from predoracle.errors import InsufficientBond
from predoracle.ledger.base import Reservation

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

log = structlog.get_logger(__name__)


class DuckDBBondLedger:
    """BondLedger over the oracle database, so reservations commit in the same transaction as the proposal."""

    def __init__(self, conn: DuckDBPyConnection, clock: Callable[[], int] | None = None) -> None:
        self.conn = conn
        self._clock = clock or (lambda: int(time.time()))

    def deposit(self, principal: str, amount: int) -> int:
        """Credit principal. Returns the new balance."""
        if amount <= 0:
            raise ValueError("deposit amount must be positive")
        self.conn.execute(
            """
            INSERT INTO ledger_balances (principal, balance) VALUES (?, ?)
            ON CONFLICT (principal) DO UPDATE SET balance = ledger_balances.balance + excluded.balance
            """,
            [principal, amount],
        )
        return self.balance(principal)

    def balance(self, principal: str) -> int:
        row = self.conn.execute(
            "SELECT balance FROM ledger_balances WHERE principal = ?", [principal]
        ).fetchone()
        return row[0] if row else 0

    def reserved(self, principal: str) -> int:
        row = self.conn.execute(
            "SELECT COALESCE(SUM(amount), 0) FROM bond_reservations WHERE principal = ? AND released = false",
            [principal],
        ).fetchone()
        return int(row[0])

    def available(self, principal: str) -> int:
        return self.balance(principal) - self.reserved(principal)

    def reserve(self, principal: str, amount: int, key: str) -> Reservation:
        if self.available(principal) < amount:
            raise InsufficientBond(
                f"{principal} has {self.available(principal)} available, bond requires {amount}"
            )
        self.conn.execute(
            "INSERT INTO bond_reservations (key, principal, amount, released, created_at) VALUES (?, ?, ?, false, ?)",
            [key, principal, amount, self._clock()],
        )
        log.debug("bond_reserved", key=key, principal=principal, amount=amount)
        return Reservation(key=key, principal=principal, amount=amount)

    def release(self, key: str) -> int:
        reservation = self.get_reservation(key)
        if reservation is None or reservation.released:
            return 0
        self.conn.execute(
            "UPDATE bond_reservations SET released = true, released_at = ? WHERE key = ?",
            [self._clock(), key],
        )
        log.debug("bond_released", key=key, principal=reservation.principal, amount=reservation.amount)
        return reservation.amount

    def get_reservation(self, key: str) -> Reservation | None:
        row = self.conn.execute(
            "SELECT key, principal, amount, released FROM bond_reservations WHERE key = ?", [key]
        ).fetchone()
        if not row:
            return None
        return Reservation(key=row[0], principal=row[1], amount=row[2], released=row[3])

    def reservations(self, principal: str | None = None) -> list[Reservation]:
        if principal is None:
            rows = self.conn.execute(
                "SELECT key, principal, amount, released FROM bond_reservations ORDER BY created_at, key"
            ).fetchall()
        else:
            rows = self.conn.execute(
                "SELECT key, principal, amount, released FROM bond_reservations WHERE principal = ? ORDER BY created_at, key",
                [principal],
            ).fetchall()
        return [Reservation(key=r[0], principal=r[1], amount=r[2], released=r[3]) for r in rows]
