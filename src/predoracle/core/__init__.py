"""Oracle state machine: configuration, event registry, proposals, resolution, settlement."""

from predoracle.core.oracle import initialize_oracle
from predoracle.core.proposals import dispute, propose
from predoracle.core.registry import create_event
from predoracle.core.resolution import resolve
from predoracle.core.settlement import BondRelease, withdraw_bond

__all__ = [
    "initialize_oracle",
    "create_event",
    "propose",
    "dispute",
    "resolve",
    "withdraw_bond",
    "BondRelease",
]
