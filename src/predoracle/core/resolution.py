"""Resolution gateway: who may finalize a proposal, and with which outcome."""

from __future__ import annotations

from predoracle.core.oracle import saturating_add, saturating_sub
from predoracle.errors import (
    AlreadyResolved,
    LivenessStillOpen,
    ProposalNotFound,
    ResolutionMismatch,
    Unauthorized,
)
from predoracle.models import Event, OracleConfig, Proposal, ProposalResolved


def resolve(
    config: OracleConfig,
    proposal: Proposal,
    event: Event,
    caller: str,
    final_outcome: bool,
    *,
    now: int,
) -> tuple[OracleConfig, Proposal, ProposalResolved]:
    """Finalize a proposal once its window has elapsed.

    Undisputed proposals resolve optimistically: any caller, but only to the
    proposed outcome. Disputed proposals resolve only by the authority, to any
    outcome. Counters saturate instead of failing so resolution is never blocked.
    """
    if proposal.event_id != event.id:
        raise ProposalNotFound(f"Proposal {proposal.id} does not belong to event {event.id}")
    if now < proposal.liveness_end:
        raise LivenessStillOpen(f"Liveness for proposal {proposal.id} runs until {proposal.liveness_end}")
    if proposal.disputed and caller != config.authority:
        raise Unauthorized(f"Only the oracle authority may resolve disputed proposal {proposal.id}")
    if proposal.resolved:
        raise AlreadyResolved(f"Proposal {proposal.id} already resolved by {proposal.resolver}")
    if final_outcome != proposal.outcome and not proposal.disputed:
        raise ResolutionMismatch(
            f"Undisputed proposal {proposal.id} can only resolve to its proposed outcome ({proposal.outcome})"
        )

    resolved = proposal.model_copy(update={"outcome": final_outcome, "resolved": True, "resolver": caller})
    updated = config.model_copy(
        update={
            "active_proposals": saturating_sub(config.active_proposals),
            "total_resolved": saturating_add(config.total_resolved),
        }
    )
    notification = ProposalResolved(
        proposal_id=proposal.id,
        event_id=proposal.event_id,
        outcome=final_outcome,
        proposer=proposal.proposer,
        disputed=proposal.disputed,
    )
    return updated, resolved, notification
