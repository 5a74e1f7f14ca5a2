"""Ledger subcommand: deposit, balance."""

from __future__ import annotations

import typer

from predoracle.cli.common import open_service

app = typer.Typer(help="Bond ledger balances")


@app.command("deposit")
def deposit(
    ctx: typer.Context,
    principal: str = typer.Argument(..., help="Principal to credit"),
    amount: int = typer.Argument(..., min=1, help="Amount to credit"),
) -> None:
    """Credit a principal so it can post bonds."""
    with open_service(ctx) as service:
        balance = service.deposit(principal, amount)
        typer.echo(f"{principal} balance: {balance}")


@app.command("balance")
def balance(ctx: typer.Context, principal: str = typer.Argument(..., help="Principal")) -> None:
    """Show balance, reserved bonds and available amount."""
    with open_service(ctx) as service:
        b = service.balances(principal)
        typer.echo(f"{principal}  balance={b['balance']}  reserved={b['reserved']}  available={b['available']}")
