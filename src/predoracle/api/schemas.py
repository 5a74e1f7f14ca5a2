"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from pydantic import BaseModel, Field

from predoracle.models import Event, Proposal, ResolutionType, StoredNotification
from predoracle.models.event import BinaryResolution


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. insufficient_bond, unauthorized")


# --- Oracle ---
class InitializeRequest(BaseModel):
    authority: str = Field(..., min_length=1)
    bond_amount: int = Field(..., ge=0)
    liveness_period: int = Field(..., ge=0, description="Seconds")


class OracleStatusResponse(BaseModel):
    authority: str
    bond_amount: int
    liveness_period: int
    active_proposals: int
    total_resolved: int
    event_count: int
    proposals: dict[str, int]


# --- Events ---
class CreateEventRequest(BaseModel):
    description: str
    creator: str = Field(..., min_length=1)
    resolution: ResolutionType = Field(default_factory=BinaryResolution)
    market_ref: str = ""


class EventsListResponse(BaseModel):
    events: list[Event]
    total: int


# --- Proposals ---
class ProposeRequest(BaseModel):
    event_id: int
    proposer: str = Field(..., min_length=1)
    outcome: bool
    evidence_hash: str = Field(..., description="SHA-256 of the evidence bundle, 64 hex chars")


class DisputeRequest(BaseModel):
    disputer: str = Field(..., min_length=1)
    counter_evidence_hash: str


class ResolveRequest(BaseModel):
    caller: str = Field(..., min_length=1)
    final_outcome: bool


class WithdrawRequest(BaseModel):
    withdrawer: str = Field(..., min_length=1)


class ProposalResponse(BaseModel):
    id: int
    event_id: int
    proposer: str
    outcome: bool
    evidence_hash: str
    submitted_at: int
    liveness_end: int
    bonded_amount: int
    resolved: bool
    disputed: bool
    dispute_bond: int
    disputer: str | None = None
    dispute_evidence_hash: str | None = None
    resolver: str | None = None
    state: str = Field(..., description="open | disputed | resolved")

    @classmethod
    def from_proposal(cls, p: Proposal) -> ProposalResponse:
        return cls(**p.model_dump(), state=p.state.value)


class ProposalsListResponse(BaseModel):
    proposals: list[ProposalResponse]
    total: int


class DueProposalsResponse(BaseModel):
    now: int
    disputable: list[ProposalResponse]
    resolvable: list[ProposalResponse]


class BondReleaseResponse(BaseModel):
    proposal_id: int
    principal: str
    role: str
    amount: int


# --- Notifications ---
class NotificationsResponse(BaseModel):
    notifications: list[StoredNotification]
    total: int


# --- Ledger ---
class DepositRequest(BaseModel):
    amount: int = Field(..., gt=0)


class BalanceResponse(BaseModel):
    principal: str
    balance: int
    reserved: int
    available: int
