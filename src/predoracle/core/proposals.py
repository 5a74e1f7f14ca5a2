"""Proposal engine: assert an outcome, open the liveness window, accept at most one dispute."""

from __future__ import annotations

from predoracle.core.oracle import checked_increment
from predoracle.errors import (
    AlreadyDisputed,
    ArithmeticOverflow,
    InsufficientBond,
    LivenessExpired,
    ResolutionMismatch,
)
from predoracle.evidence import normalize_evidence_hash
from predoracle.models import Event, OracleConfig, Proposal, ProposalDisputed
from predoracle.models.oracle import I64_MAX


def propose(
    config: OracleConfig,
    event: Event,
    proposer: str,
    outcome: bool,
    evidence_hash: bytes | str,
    *,
    available_balance: int,
    now: int,
) -> tuple[OracleConfig, Proposal]:
    """Return (config with counters advanced, new open Proposal). Inputs are not mutated."""
    evidence = normalize_evidence_hash(evidence_hash)
    if available_balance < config.bond_amount:
        raise InsufficientBond(
            f"Bond of {config.bond_amount} required, {proposer} has {available_balance} available"
        )
    if not event.is_binary:
        raise ResolutionMismatch(
            f"Event {event.id} uses {event.resolution.kind} resolution, only binary events accept proposals"
        )

    proposal_id = checked_increment(config.proposal_seq, "proposal id")
    active = checked_increment(config.active_proposals, "active proposal count")
    liveness_end = now + config.liveness_period
    if liveness_end > I64_MAX:
        raise ArithmeticOverflow("liveness end would overflow")

    proposal = Proposal(
        id=proposal_id,
        event_id=event.id,
        proposer=proposer,
        outcome=outcome,
        evidence_hash=evidence,
        submitted_at=now,
        liveness_end=liveness_end,
        bonded_amount=config.bond_amount,
    )
    updated = config.model_copy(update={"proposal_seq": proposal_id, "active_proposals": active})
    return updated, proposal


def dispute(
    config: OracleConfig,
    proposal: Proposal,
    disputer: str,
    counter_evidence_hash: bytes | str,
    *,
    available_balance: int,
    now: int,
) -> tuple[Proposal, ProposalDisputed]:
    """Return (disputed copy of proposal, notification).

    Checks run in order: window still open, disputer bond, not already disputed.
    """
    evidence = normalize_evidence_hash(counter_evidence_hash)
    if not proposal.in_liveness(now):
        raise LivenessExpired(f"Liveness for proposal {proposal.id} ended at {proposal.liveness_end}")
    if available_balance < config.bond_amount:
        raise InsufficientBond(
            f"Bond of {config.bond_amount} required, {disputer} has {available_balance} available"
        )
    if proposal.disputed:
        raise AlreadyDisputed(f"Proposal {proposal.id} already disputed by {proposal.disputer}")

    disputed = proposal.model_copy(
        update={
            "disputed": True,
            "dispute_evidence_hash": evidence,
            "disputer": disputer,
            "dispute_bond": config.bond_amount,
        }
    )
    return disputed, ProposalDisputed(proposal_id=proposal.id, disputer=disputer)
