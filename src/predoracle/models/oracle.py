"""OracleConfig - the per-deployment singleton record."""

from __future__ import annotations

from pydantic import BaseModel, Field

U64_MAX = 2**64 - 1
I64_MAX = 2**63 - 1


class OracleConfig(BaseModel):
    """Authority, bond/liveness parameters and running counters."""

    authority: str = Field(..., min_length=1)
    bond_amount: int = Field(..., ge=0, le=U64_MAX, description="Minimum stake for proposers and disputers")
    liveness_period: int = Field(..., ge=0, le=I64_MAX, description="Challenge window in seconds")
    active_proposals: int = Field(0, ge=0, le=U64_MAX)
    total_resolved: int = Field(0, ge=0, le=U64_MAX)
    # ID sequences, independent of the counters above
    proposal_seq: int = Field(0, ge=0, le=U64_MAX)
    event_seq: int = Field(0, ge=0, le=U64_MAX)
