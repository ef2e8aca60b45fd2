"""Tests for the in-memory collaborators used by tests and scenario replay."""

import pytest

from lockwrap.core.math import MAX_LOCK_TIME, WEEK
from lockwrap.core.types import LockedBalance
from lockwrap.integration import (
    CallReverted,
    InMemoryEscrow,
    InMemoryToken,
    InMemoryWorld,
    ManualClock,
)

LEDGER = "ledger"


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def crv():
    t = InMemoryToken("crv", "CRV")
    t.mint(LEDGER, 1_000)
    return t


@pytest.fixture
def escrow(crv, clock):
    e = InMemoryEscrow(crv, clock, address="escrow")
    crv.approve(LEDGER, "escrow", 1_000)
    return e


class TestClock:
    def test_advance_and_set(self, clock):
        assert clock.advance(5) == 5
        clock.set(10)
        assert clock.now() == 10

    def test_cannot_go_backwards(self, clock):
        clock.set(10)
        with pytest.raises(ValueError):
            clock.set(9)
        with pytest.raises(ValueError):
            clock.advance(-1)


class TestToken:
    def test_transfer_from_needs_allowance(self, crv):
        with pytest.raises(CallReverted):
            crv.transfer_from("bob", LEDGER, "bob", 1)
        crv.approve(LEDGER, "bob", 3)
        assert crv.transfer_from("bob", LEDGER, "bob", 3)
        assert crv.balance_of("bob") == 3
        assert crv.allowance(LEDGER, "bob") == 0

    def test_failure_injection(self, crv):
        crv.false_calls.add("transfer")
        assert crv.transfer(LEDGER, "bob", 1) is False
        assert crv.balance_of("bob") == 0
        crv.fail_calls.add("approve")
        with pytest.raises(CallReverted):
            crv.approve(LEDGER, "bob", 1)

    def test_snapshot_restore(self, crv):
        snap = crv.snapshot()
        crv.transfer(LEDGER, "bob", 10)
        crv.restore(snap)
        assert crv.balance_of("bob") == 0
        assert crv.total_supply() == 1_000

    def test_bound_handle_acts_as_caller(self, crv):
        handle = crv.bind(LEDGER)
        assert handle.transfer("bob", 4)
        assert crv.balance_of("bob") == 4
        assert handle.balance_of(LEDGER) == 996


class TestEscrow:
    def test_create_lock_rounds_to_week(self, escrow, clock):
        escrow.create_lock(LEDGER, 100, 3 * WEEK + 5)
        assert escrow.locked(LEDGER) == LockedBalance(amount=100, end=3 * WEEK)
        assert escrow.total_locked() == 100

    @pytest.mark.parametrize(
        "value,unlock_time",
        [
            (0, 2 * WEEK),
            (10, WEEK - 1),  # rounds down to now
            (10, MAX_LOCK_TIME + WEEK),
        ],
    )
    def test_create_lock_rejects(self, escrow, value, unlock_time):
        with pytest.raises(CallReverted):
            escrow.create_lock(LEDGER, value, unlock_time)
        assert escrow.locked(LEDGER) == LockedBalance()

    def test_single_lock_per_account(self, escrow):
        escrow.create_lock(LEDGER, 10, 2 * WEEK)
        with pytest.raises(CallReverted):
            escrow.create_lock(LEDGER, 10, 4 * WEEK)

    def test_increase_amount(self, escrow, clock):
        with pytest.raises(CallReverted):
            escrow.increase_amount(LEDGER, 10)
        escrow.create_lock(LEDGER, 10, 2 * WEEK)
        escrow.increase_amount(LEDGER, 5)
        assert escrow.locked(LEDGER).amount == 15

        clock.set(2 * WEEK)
        with pytest.raises(CallReverted):
            escrow.increase_amount(LEDGER, 5)

    def test_increase_unlock_time(self, escrow, clock):
        escrow.create_lock(LEDGER, 10, 2 * WEEK)
        with pytest.raises(CallReverted):
            escrow.increase_unlock_time(LEDGER, 2 * WEEK)
        escrow.increase_unlock_time(LEDGER, 5 * WEEK)
        assert escrow.locked(LEDGER).end == 5 * WEEK

    def test_withdraw_only_after_expiry(self, escrow, crv, clock):
        escrow.create_lock(LEDGER, 100, 2 * WEEK)
        with pytest.raises(CallReverted):
            escrow.withdraw(LEDGER)

        clock.set(2 * WEEK)
        escrow.withdraw(LEDGER)
        assert escrow.locked(LEDGER) == LockedBalance()
        assert crv.balance_of(LEDGER) == 1_000

    def test_snapshot_restore(self, escrow):
        snap = escrow.snapshot()
        escrow.create_lock(LEDGER, 10, 2 * WEEK)
        escrow.restore(snap)
        assert escrow.locked(LEDGER) == LockedBalance()


class TestWorld:
    def test_gauge_and_minter(self):
        world = InMemoryWorld()
        gauge = world.add_gauge("g", "lp")
        lp = world.lp_tokens["lp"]
        lp.mint(LEDGER, 10)
        lp.approve(LEDGER, "g", 10)

        gauge.deposit(LEDGER, 10)
        assert gauge.balance_of(LEDGER) == 10
        with pytest.raises(CallReverted):
            gauge.withdraw(LEDGER, 11)
        gauge.withdraw(LEDGER, 4)
        assert lp.balance_of(LEDGER) == 4

        world.minter.accrue("g", LEDGER, 3)
        world.minter.mint(LEDGER, "g")
        world.minter.mint(LEDGER, "g")
        assert world.asset.balance_of(LEDGER) == 3

    def test_duplicate_gauge(self):
        world = InMemoryWorld()
        world.add_gauge("g", "lp")
        with pytest.raises(ValueError):
            world.add_gauge("g", "lp")

    def test_collaborators_share_lp_token(self):
        world = InMemoryWorld()
        world.add_gauge("g1", "lp")
        world.add_gauge("g2", "lp")
        collab = world.collaborators(LEDGER)
        assert set(collab.gauges) == {"g1", "g2"}
        assert set(collab.tokens) == {"lp"}
        # asset, escrow, minter, two gauges, one lp token
        assert len(collab.transactional()) == 6
