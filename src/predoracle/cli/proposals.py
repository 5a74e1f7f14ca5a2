"""Proposal subcommand: propose, dispute, resolve, withdraw, list, show, due."""

from __future__ import annotations

import typer

from predoracle.cli.common import format_proposal, open_service, parse_outcome, resolve_evidence
from predoracle.models import ProposalState

app = typer.Typer(help="Proposals, disputes, resolution and bond withdrawal")


@app.command("propose")
def propose(
    ctx: typer.Context,
    event_id: int = typer.Argument(..., help="Event ID"),
    outcome: str = typer.Option(..., "--outcome", "-o", help="Asserted outcome: yes/no"),
    proposer: str = typer.Option(..., "--as", help="Proposing principal"),
    evidence_hash: str | None = typer.Option(None, "--evidence-hash", help="SHA-256 of the evidence bundle (hex)"),
    evidence: str | None = typer.Option(None, "--evidence", help="Evidence text to hash into a bundle"),
    sources: list[str] | None = typer.Option(None, "--source", help="Evidence source URL (repeatable)"),
) -> None:
    """Assert the outcome of an event. Reserves the proposer's bond."""
    digest = resolve_evidence(evidence_hash, evidence, sources)
    with open_service(ctx) as service:
        p = service.propose(event_id, proposer, parse_outcome(outcome), digest)
        typer.echo(f"Proposal id: {p.id}")
        typer.echo(f"Bond: {p.bonded_amount}  Liveness ends: {p.liveness_end}")


@app.command("dispute")
def dispute(
    ctx: typer.Context,
    proposal_id: int = typer.Argument(..., help="Proposal ID"),
    disputer: str = typer.Option(..., "--as", help="Disputing principal"),
    evidence_hash: str | None = typer.Option(None, "--evidence-hash", help="SHA-256 of the counter-evidence bundle (hex)"),
    evidence: str | None = typer.Option(None, "--evidence", help="Counter-evidence text to hash into a bundle"),
    sources: list[str] | None = typer.Option(None, "--source", help="Evidence source URL (repeatable)"),
) -> None:
    """Challenge a proposal during its liveness window. Reserves the disputer's bond."""
    digest = resolve_evidence(evidence_hash, evidence, sources)
    with open_service(ctx) as service:
        p = service.dispute(proposal_id, disputer, digest)
        typer.echo(f"Proposal {p.id} disputed by {p.disputer}. Dispute bond: {p.dispute_bond}")


@app.command("resolve")
def resolve(
    ctx: typer.Context,
    proposal_id: int = typer.Argument(..., help="Proposal ID"),
    outcome: str = typer.Option(..., "--outcome", "-o", help="Final outcome: yes/no"),
    caller: str = typer.Option(..., "--as", help="Resolving principal (authority for disputed proposals)"),
) -> None:
    """Finalize a proposal after its liveness window."""
    with open_service(ctx) as service:
        p = service.resolve(proposal_id, caller, parse_outcome(outcome))
        typer.echo(f"Proposal {p.id} resolved: {'yes' if p.outcome else 'no'} (disputed={p.disputed})")


@app.command("withdraw")
def withdraw(
    ctx: typer.Context,
    proposal_id: int = typer.Argument(..., help="Proposal ID"),
    withdrawer: str = typer.Option(..., "--as", help="Proposer or disputer reclaiming their bond"),
) -> None:
    """Reclaim a bond from a resolved proposal."""
    with open_service(ctx) as service:
        release = service.withdraw_bond(proposal_id, withdrawer)
        typer.echo(f"Released {release.amount} to {release.principal} ({release.role} bond)")


@app.command("list")
def list_proposals(
    ctx: typer.Context,
    state: ProposalState | None = typer.Option(None, "--state", "-s", help="open | disputed | resolved"),
    limit: int = typer.Option(50, "--limit", "-n", help="Max proposals"),
) -> None:
    """List proposals."""
    with open_service(ctx) as service:
        proposals = service.list_proposals(state=state, limit=limit)
        for p in proposals:
            typer.echo(format_proposal(p))
        typer.echo(f"Total: {len(proposals)} proposals")


@app.command("show")
def show(ctx: typer.Context, proposal_id: int = typer.Argument(..., help="Proposal ID")) -> None:
    """Show one proposal in full."""
    with open_service(ctx) as service:
        p = service.get_proposal(proposal_id)
        for key, value in p.model_dump().items():
            typer.echo(f"{key}: {value}")
        typer.echo(f"state: {p.state.value}")


@app.command("due")
def due(ctx: typer.Context) -> None:
    """Show proposals still open to dispute and proposals ready to resolve."""
    with open_service(ctx) as service:
        disputable = service.disputable_proposals()
        resolvable = service.resolvable_proposals()
        typer.echo(f"Disputable ({len(disputable)}):")
        for p in disputable:
            typer.echo(format_proposal(p))
        typer.echo(f"Resolvable ({len(resolvable)}):")
        for p in resolvable:
            typer.echo(format_proposal(p))
