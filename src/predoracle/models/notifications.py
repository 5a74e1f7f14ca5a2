"""Notifications emitted for external subscribers (append-only)."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ProposalDisputed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["proposal_disputed"] = "proposal_disputed"
    proposal_id: int
    disputer: str


class ProposalResolved(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["proposal_resolved"] = "proposal_resolved"
    proposal_id: int
    event_id: int
    outcome: bool
    proposer: str
    disputed: bool


Notification = Annotated[Union[ProposalDisputed, ProposalResolved], Field(discriminator="kind")]


class StoredNotification(BaseModel):
    """Notification as persisted in the log, with its sequence number."""

    seq: int
    emitted_at: int  # unix seconds
    notification: Notification
