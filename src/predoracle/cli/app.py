"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from predoracle.config import get_settings
from predoracle.config.settings import configure_logging

app = typer.Typer(
    name="predoracle",
    help="predoracle - optimistic dispute-resolution oracle for binary events.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from predoracle.cli import api_cmd, events, ledger_cmd, log, oracle_cmd, proposals  # noqa: E402

app.add_typer(oracle_cmd.app, name="oracle")
app.add_typer(events.app, name="event")
app.add_typer(proposals.app, name="proposal")
app.add_typer(ledger_cmd.app, name="ledger")
app.add_typer(log.app, name="log")
app.add_typer(api_cmd.app, name="api")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
