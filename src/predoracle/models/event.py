"""Event and its resolution type (closed tagged union)."""

from __future__ import annotations

from enum import IntEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ResolutionKind(IntEnum):
    """Wire codes for resolution types. Only BINARY is actionable."""

    BINARY = 0
    MULTI_CHOICE = 1
    NUMERIC = 2


class BinaryResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["binary"] = "binary"

    @property
    def code(self) -> ResolutionKind:
        return ResolutionKind.BINARY


class MultiChoiceResolution(BaseModel):
    """Placeholder: stored, never resolved."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["multi_choice"] = "multi_choice"
    options: list[str] = Field(default_factory=list)

    @property
    def code(self) -> ResolutionKind:
        return ResolutionKind.MULTI_CHOICE


class NumericResolution(BaseModel):
    """Placeholder: stored, never resolved."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["numeric"] = "numeric"
    min: int = 0
    max: int = 0

    @model_validator(mode="after")
    def _check_bounds(self) -> NumericResolution:
        if self.min > self.max:
            raise ValueError("numeric resolution requires min <= max")
        return self

    @property
    def code(self) -> ResolutionKind:
        return ResolutionKind.NUMERIC


ResolutionType = Annotated[
    Union[BinaryResolution, MultiChoiceResolution, NumericResolution],
    Field(discriminator="kind"),
]


def resolution_from_kind(
    kind: str | int,
    options: list[str] | None = None,
    min_value: int = 0,
    max_value: int = 0,
) -> BinaryResolution | MultiChoiceResolution | NumericResolution:
    """Build a resolution type from a name ("binary", "multi_choice", "numeric") or wire code."""
    if isinstance(kind, str) and kind.isdigit():
        kind = int(kind)
    if isinstance(kind, int):
        kind = ResolutionKind(kind).name.lower()
    kind = kind.lower().replace("-", "_")
    if kind == "binary":
        return BinaryResolution()
    if kind == "multi_choice":
        return MultiChoiceResolution(options=list(options or []))
    if kind == "numeric":
        return NumericResolution(min=min_value, max=max_value)
    raise ValueError(f"Unknown resolution type: {kind}")


class Event(BaseModel):
    """Immutable description of a real-world event to be resolved."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    description: str
    resolution: ResolutionType = Field(default_factory=BinaryResolution)
    market_ref: str = ""  # opaque external reference (e.g. market address)
    created_at: int  # unix seconds
    creator: str

    @property
    def resolution_code(self) -> ResolutionKind:
        return self.resolution.code

    @property
    def is_binary(self) -> bool:
        return self.resolution.code == ResolutionKind.BINARY
