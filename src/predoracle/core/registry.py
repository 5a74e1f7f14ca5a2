"""Event registry: anyone may register an event to be resolved."""

from __future__ import annotations

from predoracle.core.oracle import checked_increment
from predoracle.errors import InvalidEvent
from predoracle.models import BinaryResolution, Event, OracleConfig

DEFAULT_DESCRIPTION_MAX_BYTES = 256


def create_event(
    config: OracleConfig,
    description: str,
    resolution: object | None,
    market_ref: str,
    creator: str,
    *,
    now: int,
    max_description_bytes: int = DEFAULT_DESCRIPTION_MAX_BYTES,
) -> tuple[OracleConfig, Event]:
    """Return (config with advanced event sequence, new Event). No authorization check."""
    description = (description or "").strip()
    if not description:
        raise InvalidEvent("Event description is required")
    size = len(description.encode("utf-8"))
    if size > max_description_bytes:
        raise InvalidEvent(f"Event description is {size} bytes, maximum is {max_description_bytes}")
    if not creator:
        raise InvalidEvent("Event creator is required")

    event_id = checked_increment(config.event_seq, "event id")
    event = Event(
        id=event_id,
        description=description,
        resolution=resolution if resolution is not None else BinaryResolution(),
        market_ref=market_ref or "",
        created_at=now,
        creator=creator,
    )
    return config.model_copy(update={"event_seq": event_id}), event
