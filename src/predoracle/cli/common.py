"""Shared CLI helpers: open the service from context settings, render errors."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer

from predoracle.core.service import OracleService
from predoracle.errors import OracleError
from predoracle.evidence import hash_evidence
from predoracle.models import Proposal

_TRUE = {"true", "yes", "y", "1"}
_FALSE = {"false", "no", "n", "0"}


@contextmanager
def open_service(ctx: typer.Context) -> Iterator[OracleService]:
    """Yield an OracleService on the configured database; oracle errors exit 1 with their code."""
    settings = ctx.obj["settings"]
    service = OracleService.from_settings(settings)
    try:
        yield service
    except OracleError as e:
        typer.echo(f"Error [{e.code}]: {e.message}", err=True)
        raise typer.Exit(1)
    finally:
        service.close()


def parse_outcome(value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise typer.BadParameter(f"Outcome must be yes/no or true/false, got {value!r}")


def resolve_evidence(evidence_hash: str | None, evidence: str | None, sources: list[str] | None) -> str:
    """Use an explicit digest, or hash an evidence text + sources bundle."""
    if evidence_hash:
        return evidence_hash
    if evidence:
        return hash_evidence(evidence, sources)
    raise typer.BadParameter("Provide --evidence-hash or --evidence")


def format_proposal(p: Proposal) -> str:
    line = (
        f"  #{p.id}  event={p.event_id}  {p.state.value:<8}  outcome={'yes' if p.outcome else 'no':<3}  "
        f"proposer={p.proposer}  liveness_end={p.liveness_end}  bond={p.bonded_amount}"
    )
    if p.disputer:
        line += f"  disputer={p.disputer}  dispute_bond={p.dispute_bond}"
    if p.resolver:
        line += f"  resolver={p.resolver}"
    return line
