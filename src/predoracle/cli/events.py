"""Event subcommand: create, list, show."""

from __future__ import annotations

import typer

from predoracle.cli.common import format_proposal, open_service
from predoracle.models.event import resolution_from_kind

app = typer.Typer(help="Event registry")


@app.command("create")
def create(
    ctx: typer.Context,
    description: str = typer.Argument(..., help="Event description, e.g. 'SOL > $200 on 2026-12-31?'"),
    creator: str = typer.Option(..., "--as", help="Creating principal"),
    market: str = typer.Option("", "--market", "-m", help="External market reference"),
    resolution_type: str = typer.Option("binary", "--type", "-t", help="binary | multi_choice | numeric (or 0/1/2)"),
    options: list[str] | None = typer.Option(None, "--option", help="Choice (multi_choice; repeatable)"),
    min_value: int = typer.Option(0, "--min", help="Lower bound (numeric)"),
    max_value: int = typer.Option(0, "--max", help="Upper bound (numeric)"),
) -> None:
    """Register an event to be resolved. Any principal may create events."""
    try:
        resolution = resolution_from_kind(resolution_type, options, min_value, max_value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--type") from e
    with open_service(ctx) as service:
        event = service.create_event(description, creator, resolution=resolution, market_ref=market)
        typer.echo(f"Event id: {event.id}")
        typer.echo(f"Type: {event.resolution.kind}  Market: {event.market_ref or '-'}")


@app.command("list")
def list_events(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", "-n", help="Max events"),
) -> None:
    """List registered events."""
    with open_service(ctx) as service:
        events = service.list_events(limit=limit)
        for e in events:
            typer.echo(f"  {e.id:>4}  {e.resolution.kind:<12}  {e.creator:<16}  {e.description[:60]}")
        typer.echo(f"Total: {len(events)} events")


@app.command("show")
def show(ctx: typer.Context, event_id: int = typer.Argument(..., help="Event ID")) -> None:
    """Show an event and its proposal, if any."""
    with open_service(ctx) as service:
        event = service.get_event(event_id)
        typer.echo(f"Event {event.id}: {event.description}")
        typer.echo(f"Type: {event.resolution.kind}  Market: {event.market_ref or '-'}")
        typer.echo(f"Creator: {event.creator}  Created at: {event.created_at}")
        proposal = service.proposal_for_event(event_id)
        if proposal:
            typer.echo("Proposal:")
            typer.echo(format_proposal(proposal))
