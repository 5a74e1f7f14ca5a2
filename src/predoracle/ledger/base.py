"""Bond ledger protocol (external collaborator)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


def reservation_key(proposal_id: int, role: str) -> str:
    """Reservation key for a bond: one per (proposal, role). role is 'proposer' or 'disputer'."""
    return f"proposal:{proposal_id}:{role}"


@dataclass(frozen=True)
class Reservation:
    key: str
    principal: str
    amount: int
    released: bool = False


class BondLedger(Protocol):
    """Two-phase bond custody: reserve on propose/dispute, release once on withdrawal.

    Implementations must make release idempotent per key: releasing an already
    released reservation returns 0 and moves nothing.
    """

    def deposit(self, principal: str, amount: int) -> int:
        """Credit principal (funding from outside the oracle). Returns the new balance."""
        ...

    def balance(self, principal: str) -> int:
        """Total value held for principal (reserved included)."""
        ...

    def available(self, principal: str) -> int:
        """Balance not currently reserved for a bond."""
        ...

    def reserve(self, principal: str, amount: int, key: str) -> Reservation: ...

    def release(self, key: str) -> int:
        """Release reservation back to its principal. Returns amount released (0 if already released)."""
        ...

    def get_reservation(self, key: str) -> Reservation | None: ...
