"""Proposal - an outcome assertion and its dispute/resolution state."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from predoracle.models.oracle import U64_MAX

DIGEST_HEX_PATTERN = "^[0-9a-f]{64}$"


class ProposalState(str, Enum):
    OPEN = "open"
    DISPUTED = "disputed"
    RESOLVED = "resolved"


class Proposal(BaseModel):
    """Outcome assertion against an Event. Terminal once resolved."""

    id: int = Field(..., ge=1, le=U64_MAX)
    event_id: int
    proposer: str
    outcome: bool
    evidence_hash: str = Field(..., pattern=DIGEST_HEX_PATTERN, description="SHA-256 of evidence bundle (hex)")
    submitted_at: int
    liveness_end: int
    bonded_amount: int = Field(0, ge=0)
    resolved: bool = False
    disputed: bool = False
    dispute_bond: int = Field(0, ge=0)
    disputer: str | None = None
    dispute_evidence_hash: str | None = Field(None, pattern=DIGEST_HEX_PATTERN)
    resolver: str | None = None

    @property
    def state(self) -> ProposalState:
        if self.resolved:
            return ProposalState.RESOLVED
        if self.disputed:
            return ProposalState.DISPUTED
        return ProposalState.OPEN

    def in_liveness(self, now: int) -> bool:
        """True while the proposal may still be disputed."""
        return now < self.liveness_end
