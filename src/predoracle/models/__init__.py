"""Canonical schema (Pydantic) - OracleConfig, Event, Proposal, notifications."""

from predoracle.models.event import (
    BinaryResolution,
    Event,
    MultiChoiceResolution,
    NumericResolution,
    ResolutionKind,
    ResolutionType,
)
from predoracle.models.notifications import (
    Notification,
    ProposalDisputed,
    ProposalResolved,
    StoredNotification,
)
from predoracle.models.oracle import U64_MAX, OracleConfig
from predoracle.models.proposal import Proposal, ProposalState

__all__ = [
    "OracleConfig",
    "U64_MAX",
    "Event",
    "ResolutionKind",
    "ResolutionType",
    "BinaryResolution",
    "MultiChoiceResolution",
    "NumericResolution",
    "Proposal",
    "ProposalState",
    "Notification",
    "ProposalDisputed",
    "ProposalResolved",
    "StoredNotification",
]
