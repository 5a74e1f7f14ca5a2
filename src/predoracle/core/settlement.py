"""Bond settlement: authorize release of a bond to its owner once the proposal is final."""

from __future__ import annotations

from dataclasses import dataclass

from predoracle.errors import InsufficientBond, NotYetResolved, Unauthorized
from predoracle.ledger.base import reservation_key
from predoracle.models import Proposal


@dataclass(frozen=True)
class BondRelease:
    """Authorization to release `amount` to `principal` for one bond of a proposal."""

    proposal_id: int
    principal: str
    role: str  # proposer | disputer
    amount: int

    @property
    def reservation_key(self) -> str:
        return reservation_key(self.proposal_id, self.role)


def withdraw_bond(proposal: Proposal, withdrawer: str) -> tuple[Proposal, BondRelease]:
    """Return (proposal with the claimed bond zeroed, release authorization).

    Zeroing the bond is what makes a retried withdrawal fail instead of paying twice.
    """
    if not proposal.resolved:
        raise NotYetResolved(f"Proposal {proposal.id} is not resolved yet")

    is_disputer = proposal.disputer is not None and withdrawer == proposal.disputer

    # Proposer bond first; a self-disputer collects the dispute bond on the next call
    if withdrawer == proposal.proposer and (proposal.bonded_amount > 0 or not is_disputer):
        if proposal.bonded_amount <= 0:
            raise InsufficientBond(f"No proposer bond left on proposal {proposal.id}")
        release = BondRelease(proposal.id, withdrawer, "proposer", proposal.bonded_amount)
        return proposal.model_copy(update={"bonded_amount": 0}), release

    if is_disputer:
        if proposal.dispute_bond <= 0:
            raise InsufficientBond(f"No dispute bond left on proposal {proposal.id}")
        release = BondRelease(proposal.id, withdrawer, "disputer", proposal.dispute_bond)
        return proposal.model_copy(update={"dispute_bond": 0}), release

    raise Unauthorized(f"{withdrawer} holds no bond on proposal {proposal.id}")
