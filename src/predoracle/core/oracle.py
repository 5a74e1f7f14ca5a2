"""Oracle configuration and counter arithmetic."""

from __future__ import annotations

from predoracle.errors import ArithmeticOverflow, InvalidConfig
from predoracle.models.oracle import I64_MAX, U64_MAX, OracleConfig


def initialize_oracle(authority: str, bond_amount: int, liveness_period: int) -> OracleConfig:
    """Build the singleton config with zeroed counters. Persisting it (once) is the store's job."""
    if not authority:
        raise InvalidConfig("Authority principal is required")
    if not 0 <= bond_amount <= U64_MAX:
        raise InvalidConfig(f"Bond amount out of range: {bond_amount}")
    if not 0 <= liveness_period <= I64_MAX:
        raise InvalidConfig(f"Liveness period out of range: {liveness_period}")
    return OracleConfig(authority=authority, bond_amount=bond_amount, liveness_period=liveness_period)


def checked_increment(value: int, what: str) -> int:
    """value + 1, or ArithmeticOverflow once the u64 maximum would be reached."""
    nxt = value + 1
    if nxt >= U64_MAX:
        raise ArithmeticOverflow(f"{what} would overflow")
    return nxt


def saturating_add(value: int, n: int = 1) -> int:
    return min(value + n, U64_MAX)


def saturating_sub(value: int, n: int = 1) -> int:
    return max(value - n, 0)
