"""Shared fixtures: in-memory oracle with a controllable clock."""

import pytest

from predoracle.core.service import OracleService
from predoracle.storage.db import get_connection

AUTHORITY = "authority"
BOND = 100
LIVENESS = 7200
EVIDENCE = "ab" * 32
COUNTER_EVIDENCE = "cd" * 32


class FakeClock:
    """Unix-seconds clock the test moves by hand."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def set(self, now: int) -> None:
        self.now = now


@pytest.fixture
def clock():
    return FakeClock(0)


@pytest.fixture
def service(clock):
    svc = OracleService(get_connection(":memory:"), clock=clock)
    yield svc
    svc.close()


@pytest.fixture
def oracle(service):
    """Initialized oracle (bond 100, liveness 7200s) with funded alice and bob."""
    service.initialize(AUTHORITY, BOND, LIVENESS)
    service.deposit("alice", 1000)
    service.deposit("bob", 1000)
    return service


@pytest.fixture
def event(oracle):
    return oracle.create_event("Will SOL close above $200 on 2026-12-31?", "alice", market_ref="mkt-1")
