"""Log subcommand: list, stats (notification log)."""

from __future__ import annotations

import typer

from predoracle.cli.common import open_service
from predoracle.storage.notifications import notification_stats

app = typer.Typer(help="Dispute/resolution notification log")


@app.command("list")
def list_log(
    ctx: typer.Context,
    kind: str | None = typer.Option(None, "--kind", "-k", help="proposal_disputed | proposal_resolved"),
    proposal: int | None = typer.Option(None, "--proposal", "-p", help="Filter by proposal ID"),
    limit: int = typer.Option(100, "--limit", "-n", help="Max notifications"),
) -> None:
    """List notifications in emission order."""
    with open_service(ctx) as service:
        items = service.notifications(kind=kind, proposal_id=proposal, limit=limit)
        for item in items:
            typer.echo(f"  {item.seq:>5}  {item.emitted_at}  {item.notification.model_dump_json()}")
        typer.echo(f"Total: {len(items)} notifications")


@app.command("stats")
def stats(ctx: typer.Context) -> None:
    """Show notification counts by kind."""
    with open_service(ctx) as service:
        s = notification_stats(service.conn)
        typer.echo(f"Total notifications: {s['total']}")
        for kind, count in s["by_kind"].items():
            typer.echo(f"  {kind}  {count}")
