"""Oracle error taxonomy.

Every failure raised by an oracle operation is an ``OracleError`` subclass with a
stable machine-readable ``code`` (used by the CLI and the HTTP API) so callers can
branch on the kind of failure, e.g. prompt for a larger bond on ``insufficient_bond``.
Failures abort the whole operation; nothing is retried by the oracle itself.
"""

from __future__ import annotations


class OracleError(Exception):
    """Base class for all oracle failures."""

    code: str = "oracle_error"
    http_status: int = 400
    default_message: str = "Oracle operation failed"

    def __init__(self, message: str | None = None, **context: object) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict[str, object]:
        return {"detail": self.message, "code": self.code}


# --- Authorization ---
class Unauthorized(OracleError):
    code = "unauthorized"
    http_status = 403
    default_message = "Unauthorized access"


# --- Timing ---
class TimingError(OracleError):
    http_status = 409


class LivenessExpired(TimingError):
    """Dispute attempted at or after the end of the liveness window."""

    code = "liveness_expired"
    default_message = "Dispute period expired"


class LivenessStillOpen(TimingError):
    """Resolution attempted while the liveness window is still running."""

    code = "liveness_still_open"
    default_message = "Liveness period still active"


class NotYetResolved(TimingError):
    code = "not_yet_resolved"
    default_message = "Proposal is not resolved yet"


# --- State conflicts ---
class StateConflict(OracleError):
    http_status = 409


class AlreadyResolved(StateConflict):
    code = "already_resolved"
    default_message = "Proposal already resolved"


class AlreadyDisputed(StateConflict):
    code = "already_disputed"
    default_message = "Proposal already disputed"


class AlreadyInitialized(StateConflict):
    code = "already_initialized"
    default_message = "Oracle already initialized"


class NotInitialized(StateConflict):
    code = "not_initialized"
    default_message = "Oracle is not initialized"


class ProposalExists(StateConflict):
    code = "proposal_exists"
    default_message = "A proposal already exists for this event"


# --- Input validation ---
class InputValidationError(OracleError):
    http_status = 422


class InsufficientBond(InputValidationError):
    code = "insufficient_bond"
    default_message = "Insufficient bond amount"


class InvalidEvidence(InputValidationError):
    code = "invalid_evidence"
    default_message = "Invalid evidence hash"


class ResolutionMismatch(InputValidationError):
    code = "resolution_mismatch"
    default_message = "Event resolution type mismatch"


class InvalidEvent(InputValidationError):
    code = "invalid_event"
    default_message = "Event not found or invalid"


class InvalidConfig(InputValidationError):
    code = "invalid_config"
    default_message = "Invalid oracle configuration"


# --- Lookup ---
class ProposalNotFound(OracleError):
    code = "proposal_not_found"
    http_status = 404
    default_message = "Proposal not found"


# --- Arithmetic ---
class ArithmeticOverflow(OracleError):
    code = "arithmetic_overflow"
    http_status = 409
    default_message = "Arithmetic overflow"
