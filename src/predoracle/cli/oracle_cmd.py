"""Oracle subcommand: init, status."""

from __future__ import annotations

import typer

from predoracle.cli.common import open_service

app = typer.Typer(help="Oracle configuration")


@app.command("init")
def init(
    ctx: typer.Context,
    authority: str | None = typer.Option(None, "--authority", "-a", help="Authority principal (default from config)"),
    bond_amount: int | None = typer.Option(None, "--bond", help="Bond amount (default from config)"),
    liveness: int | None = typer.Option(None, "--liveness", help="Liveness period in seconds (default from config)"),
) -> None:
    """Create the oracle singleton. Fails if already initialized."""
    settings = ctx.obj["settings"]
    authority = authority or settings.authority
    if not authority:
        typer.echo("--authority is required (or set oracle.authority in config)")
        raise typer.Exit(1)
    with open_service(ctx) as service:
        config = service.initialize(
            authority,
            bond_amount if bond_amount is not None else settings.bond_amount,
            liveness if liveness is not None else settings.liveness_period_sec,
        )
        typer.echo(f"Oracle initialized. Authority: {config.authority}")
        typer.echo(f"Bond: {config.bond_amount}  Liveness: {config.liveness_period}s")


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Show oracle configuration, counters and proposal states."""
    with open_service(ctx) as service:
        config = service.get_config()
        stats = service.proposal_stats()
        typer.echo(f"Authority: {config.authority}")
        typer.echo(f"Bond: {config.bond_amount}  Liveness: {config.liveness_period}s")
        typer.echo(f"Active proposals: {config.active_proposals}  Total resolved: {config.total_resolved}")
        typer.echo(f"Events: {config.event_seq}  Proposals: {stats['total']}")
        typer.echo(f"  open={stats['open']}  disputed={stats['disputed']}  resolved={stats['resolved']}")
