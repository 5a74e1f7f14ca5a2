"""OracleService end-to-end: scenarios, persistence, bonds, notifications, concurrency."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from predoracle.core.service import OracleService
from predoracle.errors import (
    AlreadyDisputed,
    AlreadyInitialized,
    AlreadyResolved,
    InsufficientBond,
    InvalidEvent,
    LivenessExpired,
    LivenessStillOpen,
    NotInitialized,
    NotYetResolved,
    ProposalExists,
    ProposalNotFound,
    ResolutionMismatch,
    Unauthorized,
)
from predoracle.ledger.base import reservation_key
from predoracle.models import MultiChoiceResolution, ProposalDisputed, ProposalResolved, ProposalState
from predoracle.storage.db import get_connection
from predoracle.storage.ledger import DuckDBBondLedger

from conftest import AUTHORITY, BOND, COUNTER_EVIDENCE, EVIDENCE, FakeClock


def test_scenario_a_optimistic_resolution(oracle, event, clock):
    p = oracle.propose(event.id, "alice", True, EVIDENCE)
    assert p.liveness_end == 7200
    assert oracle.get_config().active_proposals == 1

    clock.set(7200)
    with pytest.raises(LivenessExpired):
        oracle.dispute(p.id, "bob", COUNTER_EVIDENCE)

    clock.set(7199)
    with pytest.raises(LivenessStillOpen):
        oracle.resolve(p.id, "carol", True)

    clock.set(7200)
    resolved = oracle.resolve(p.id, "carol", True)
    assert resolved.resolved and resolved.resolver == "carol"
    config = oracle.get_config()
    assert config.active_proposals == 0
    assert config.total_resolved == 1


def test_scenario_b_authority_overrides_disputed(oracle, event, clock):
    p = oracle.propose(event.id, "alice", True, EVIDENCE)
    clock.set(100)
    disputed = oracle.dispute(p.id, "bob", COUNTER_EVIDENCE)
    assert disputed.state == ProposalState.DISPUTED

    clock.set(7200)
    with pytest.raises(Unauthorized):
        oracle.resolve(p.id, "bob", False)
    resolved = oracle.resolve(p.id, AUTHORITY, False)
    assert resolved.outcome is False
    assert oracle.get_proposal(p.id).resolver == AUTHORITY


def test_scenario_c_insufficient_bond_leaves_no_trace(oracle, event):
    oracle.deposit("poor", BOND - 1)
    with pytest.raises(InsufficientBond):
        oracle.propose(event.id, "poor", True, EVIDENCE)
    assert oracle.list_proposals() == []
    assert oracle.proposal_for_event(event.id) is None
    assert oracle.get_config().active_proposals == 0
    assert oracle.balances("poor")["reserved"] == 0


def test_scenario_d_stranger_cannot_withdraw(oracle, event, clock):
    p = oracle.propose(event.id, "alice", True, EVIDENCE)
    clock.set(100)
    oracle.dispute(p.id, "bob", COUNTER_EVIDENCE)
    clock.set(7200)
    oracle.resolve(p.id, AUTHORITY, True)
    with pytest.raises(Unauthorized):
        oracle.withdraw_bond(p.id, "mallory")


def test_second_resolve_and_dispute_fail(oracle, event, clock):
    p = oracle.propose(event.id, "alice", True, EVIDENCE)
    clock.set(1)
    oracle.dispute(p.id, "bob", COUNTER_EVIDENCE)
    with pytest.raises(AlreadyDisputed):
        oracle.dispute(p.id, "alice", COUNTER_EVIDENCE)
    clock.set(7200)
    oracle.resolve(p.id, AUTHORITY, True)
    with pytest.raises(AlreadyResolved):
        oracle.resolve(p.id, AUTHORITY, True)
    assert oracle.get_config().total_resolved == 1


def test_undisputed_outcome_cannot_be_overridden(oracle, event, clock):
    p = oracle.propose(event.id, "alice", True, EVIDENCE)
    clock.set(7200)
    with pytest.raises(ResolutionMismatch):
        oracle.resolve(p.id, AUTHORITY, False)
    assert not oracle.get_proposal(p.id).resolved


def test_bonds_reserved_and_released_once(oracle, event, clock):
    p = oracle.propose(event.id, "alice", True, EVIDENCE)
    assert oracle.balances("alice") == {"balance": 1000, "available": 900, "reserved": 100}
    clock.set(50)
    oracle.dispute(p.id, "bob", COUNTER_EVIDENCE)
    assert oracle.balances("bob")["available"] == 900

    with pytest.raises(NotYetResolved):
        oracle.withdraw_bond(p.id, "alice")

    clock.set(7200)
    oracle.resolve(p.id, AUTHORITY, False)

    release = oracle.withdraw_bond(p.id, "alice")
    assert (release.amount, release.role) == (100, "proposer")
    assert oracle.balances("alice")["available"] == 1000
    with pytest.raises(InsufficientBond):
        oracle.withdraw_bond(p.id, "alice")
    assert oracle.balances("alice")["available"] == 1000

    release = oracle.withdraw_bond(p.id, "bob")
    assert (release.amount, release.role) == (100, "disputer")
    assert oracle.balances("bob") == {"balance": 1000, "available": 1000, "reserved": 0}
    stored = oracle.get_proposal(p.id)
    assert stored.bonded_amount == 0 and stored.dispute_bond == 0


def test_reserved_bond_counts_against_next_proposal(oracle, clock):
    oracle.deposit("carol", BOND)
    e1 = oracle.create_event("first", "carol")
    e2 = oracle.create_event("second", "carol")
    oracle.propose(e1.id, "carol", True, EVIDENCE)
    with pytest.raises(InsufficientBond):
        oracle.propose(e2.id, "carol", True, EVIDENCE)


def test_one_proposal_per_event(oracle, event):
    oracle.propose(event.id, "alice", True, EVIDENCE)
    with pytest.raises(ProposalExists):
        oracle.propose(event.id, "bob", False, EVIDENCE)
    assert oracle.get_config().active_proposals == 1
    assert oracle.balances("bob")["reserved"] == 0


def test_non_binary_event_rejected(oracle):
    e = oracle.create_event("Which team wins?", "alice", resolution=MultiChoiceResolution(options=["a", "b"]))
    assert oracle.get_event(e.id).resolution.options == ["a", "b"]
    with pytest.raises(ResolutionMismatch):
        oracle.propose(e.id, "alice", True, EVIDENCE)


def test_lookup_errors(oracle):
    with pytest.raises(InvalidEvent):
        oracle.propose(42, "alice", True, EVIDENCE)
    with pytest.raises(ProposalNotFound):
        oracle.dispute(42, "bob", COUNTER_EVIDENCE)
    with pytest.raises(ProposalNotFound):
        oracle.withdraw_bond(42, "bob")


def test_initialize_once(service):
    with pytest.raises(NotInitialized):
        service.create_event("too early", "alice")
    service.initialize(AUTHORITY, BOND, 60)
    with pytest.raises(AlreadyInitialized):
        service.initialize("someone-else", 1, 1)
    assert service.get_config().authority == AUTHORITY


def test_event_ids_independent_of_resolutions(oracle, clock):
    first = oracle.create_event("first", "alice")
    p = oracle.propose(first.id, "alice", True, EVIDENCE)
    clock.set(7200)
    oracle.resolve(p.id, "anyone", True)
    second = oracle.create_event("second", "bob")
    third = oracle.create_event("third", "bob")
    assert [first.id, second.id, third.id] == [1, 2, 3]


def test_notifications_persisted_and_delivered(oracle, event, clock):
    received = []
    unsubscribe = oracle.subscribe(received.append)
    p = oracle.propose(event.id, "alice", True, EVIDENCE)
    clock.set(10)
    oracle.dispute(p.id, "bob", COUNTER_EVIDENCE)
    clock.set(7200)
    oracle.resolve(p.id, AUTHORITY, False)
    unsubscribe()

    kinds = [type(n.notification) for n in received]
    assert kinds == [ProposalDisputed, ProposalResolved]
    resolved = received[1].notification
    assert resolved.proposal_id == p.id
    assert resolved.event_id == event.id
    assert resolved.outcome is False
    assert resolved.proposer == "alice"
    assert resolved.disputed is True

    log = oracle.notifications()
    assert [n.seq for n in log] == [n.seq for n in received]
    assert log[0].emitted_at == 10
    assert oracle.notifications(kind="proposal_resolved")[0].notification == resolved


def test_failing_subscriber_does_not_undo_transition(oracle, event, clock):
    def boom(_):
        raise RuntimeError("subscriber down")

    oracle.subscribe(boom)
    p = oracle.propose(event.id, "alice", True, EVIDENCE)
    clock.set(1)
    oracle.dispute(p.id, "bob", COUNTER_EVIDENCE)
    assert oracle.get_proposal(p.id).disputed


def test_due_lists(oracle, clock):
    e1 = oracle.create_event("one", "alice")
    e2 = oracle.create_event("two", "alice")
    p1 = oracle.propose(e1.id, "alice", True, EVIDENCE)
    clock.set(3600)
    p2 = oracle.propose(e2.id, "bob", False, EVIDENCE)
    clock.set(7200)
    assert [p.id for p in oracle.disputable_proposals()] == [p2.id]
    assert [p.id for p in oracle.resolvable_proposals()] == [p1.id]


class _FailingReserveLedger(DuckDBBondLedger):
    def reserve(self, principal, amount, key):
        raise RuntimeError("ledger unavailable")


def test_failed_write_rolls_back(clock):
    svc = OracleService(
        get_connection(":memory:"),
        clock=clock,
        ledger_factory=lambda cur: _FailingReserveLedger(cur, clock=clock),
    )
    try:
        svc.initialize(AUTHORITY, BOND, 60)
        svc.deposit("alice", 1000)
        e = svc.create_event("rollback", "alice")
        with pytest.raises(RuntimeError):
            svc.propose(e.id, "alice", True, EVIDENCE)
        assert svc.proposal_for_event(e.id) is None
        config = svc.get_config()
        assert config.active_proposals == 0 and config.proposal_seq == 0
    finally:
        svc.close()


def test_concurrent_disputes_single_winner(tmp_path):
    clock = FakeClock(0)
    svc = OracleService(get_connection(tmp_path / "oracle.duckdb"), clock=clock)
    try:
        svc.initialize(AUTHORITY, BOND, 7200)
        svc.deposit("alice", 1000)
        disputers = [f"d{i}" for i in range(8)]
        for d in disputers:
            svc.deposit(d, 1000)
        e = svc.create_event("race", "alice")
        p = svc.propose(e.id, "alice", True, EVIDENCE)
        clock.set(10)

        def attempt(disputer):
            try:
                svc.dispute(p.id, disputer, COUNTER_EVIDENCE)
                return "ok"
            except AlreadyDisputed:
                return "conflict"

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, disputers))

        assert results.count("ok") == 1
        assert results.count("conflict") == len(disputers) - 1
        winner = svc.get_proposal(p.id).disputer
        assert results[disputers.index(winner)] == "ok"
        assert len(svc.notifications(kind="proposal_disputed")) == 1
        reserved = [d for d in disputers if svc.balances(d)["reserved"]]
        assert reserved == [winner]
    finally:
        svc.close()


def test_reservation_keys(oracle, event):
    p = oracle.propose(event.id, "alice", True, EVIDENCE)
    with oracle._cursor() as cur:
        reservation = DuckDBBondLedger(cur).get_reservation(reservation_key(p.id, "proposer"))
    assert reservation.principal == "alice" and reservation.amount == BOND and not reservation.released
