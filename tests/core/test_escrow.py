"""Tests for lockwrap/core/escrow.py through the ledger: deposit/withdraw and lock phases."""

import pytest

from lockwrap import (
    EscrowCallFailed,
    InvalidAmount,
    LedgerConfig,
    LockPhase,
    TransferFailed,
)
from lockwrap.core.escrow import lock_phase_at
from lockwrap.core.math import MAX_LOCK_TIME, WEEK, week_floor
from lockwrap.core.types import LockedBalance

LEDGER = LedgerConfig().address
ALICE = "alice"
BOB = "bob"

LOCK_END = week_floor(MAX_LOCK_TIME)


# ---------------------------------------------------------------------------
# lock phases
# ---------------------------------------------------------------------------

class TestLockPhase:
    def test_no_lock(self):
        assert lock_phase_at(LockedBalance(), 10) == LockPhase.NO_LOCK

    def test_zero_amount_is_no_lock(self):
        assert lock_phase_at(LockedBalance(amount=0, end=WEEK), 0) == LockPhase.NO_LOCK

    def test_active_before_end(self):
        assert lock_phase_at(LockedBalance(amount=5, end=WEEK), WEEK - 1) == LockPhase.LOCK_ACTIVE

    def test_expired_at_end(self):
        assert lock_phase_at(LockedBalance(amount=5, end=WEEK), WEEK) == LockPhase.LOCK_EXPIRED


# ---------------------------------------------------------------------------
# deposit
# ---------------------------------------------------------------------------

class TestDeposit:
    def test_first_deposit_creates_lock(self, world, ledger, fund):
        fund(ALICE, 100)
        ledger.deposit(ALICE, 100)

        assert ledger.balance_of(ALICE) == 100
        assert ledger.total_supply == 100
        assert world.escrow.locked(LEDGER) == LockedBalance(amount=100, end=LOCK_END)
        assert world.asset.balance_of(world.escrow.address) == 100
        assert ledger.lock_phase() == LockPhase.LOCK_ACTIVE

    def test_second_deposit_increases_lock(self, world, ledger, fund):
        fund(ALICE, 100)
        fund(BOB, 50)
        ledger.deposit(ALICE, 100)
        world.clock.advance(3 * WEEK)
        ledger.deposit(BOB, 50)

        lock = world.escrow.locked(LEDGER)
        assert lock.amount == 150
        # unlock time is not extended by later deposits
        assert lock.end == LOCK_END
        assert ledger.total_supply == 150
        assert ledger.balance_of(BOB) == 50

    def test_pull_failure_aborts(self, world, ledger):
        world.asset.mint(ALICE, 100)  # no approval for the ledger
        with pytest.raises(TransferFailed):
            ledger.deposit(ALICE, 100)
        assert ledger.total_supply == 0
        assert world.asset.balance_of(ALICE) == 100
        assert world.escrow.locked(LEDGER) == LockedBalance()

    def test_false_return_is_transfer_failed(self, world, ledger, fund):
        fund(ALICE, 100)
        world.asset.false_calls.add("transfer_from")
        with pytest.raises(TransferFailed):
            ledger.deposit(ALICE, 100)
        assert ledger.balance_of(ALICE) == 0

    def test_escrow_failure_aborts_without_mint(self, world, ledger, fund):
        fund(ALICE, 100)
        world.escrow.fail_calls.add("create_lock")
        with pytest.raises(EscrowCallFailed):
            ledger.deposit(ALICE, 100)

        assert ledger.total_supply == 0
        assert ledger.balance_of(ALICE) == 0
        # the pulled asset is returned by the rollback
        assert world.asset.balance_of(ALICE) == 100
        assert world.asset.balance_of(LEDGER) == 0
        assert ledger.events == ()

    def test_zero_deposit_rejected_by_escrow(self, ledger, fund):
        fund(ALICE, 1)
        with pytest.raises(EscrowCallFailed):
            ledger.deposit(ALICE, 0)

    def test_deposit_into_expired_lock_fails(self, world, ledger, fund):
        fund(ALICE, 100)
        fund(BOB, 50)
        ledger.deposit(ALICE, 100)
        world.clock.set(LOCK_END)
        assert ledger.lock_phase() == LockPhase.LOCK_EXPIRED

        with pytest.raises(EscrowCallFailed):
            ledger.deposit(BOB, 50)
        assert ledger.total_supply == 100
        assert world.asset.balance_of(BOB) == 50

    def test_negative_amount_rejected(self, ledger):
        with pytest.raises(InvalidAmount):
            ledger.deposit(ALICE, -1)

    def test_short_lock_config(self, world, fund):
        from lockwrap import WrapperLedger

        lw = WrapperLedger(world.collaborators(LEDGER), LedgerConfig(max_lock_time=4 * WEEK))
        fund(ALICE, 10)
        lw.deposit(ALICE, 10)
        assert world.escrow.locked(LEDGER).end == 4 * WEEK


# ---------------------------------------------------------------------------
# withdraw
# ---------------------------------------------------------------------------

class TestWithdraw:
    def test_before_maturity_fails_and_leaves_state(self, world, ledger, fund):
        fund(ALICE, 100)
        ledger.deposit(ALICE, 100)
        root = ledger.state_root()

        with pytest.raises(TransferFailed):
            ledger.withdraw(ALICE)

        assert ledger.balance_of(ALICE) == 100
        assert ledger.total_supply == 100
        assert ledger.state_root() == root
        assert world.escrow.locked(LEDGER).amount == 100

    def test_before_maturity_pays_from_free_asset(self, world, ledger, fund):
        fund(ALICE, 100)
        ledger.deposit(ALICE, 100)
        # free underlying held by the ledger (e.g. donated) covers the payout
        world.asset.mint(LEDGER, 100)

        assert ledger.withdraw(ALICE) == 100
        assert ledger.balance_of(ALICE) == 0
        assert ledger.total_supply == 0
        assert world.asset.balance_of(ALICE) == 100
        # the lock was not touched
        assert world.escrow.locked(LEDGER).amount == 100

    def test_after_maturity_releases_lock(self, world, ledger, fund):
        fund(ALICE, 100)
        fund(BOB, 50)
        ledger.deposit(ALICE, 100)
        ledger.deposit(BOB, 50)
        world.clock.set(LOCK_END)

        assert ledger.withdraw(ALICE) == 100
        assert world.escrow.locked(LEDGER) == LockedBalance()
        assert ledger.lock_phase() == LockPhase.NO_LOCK
        assert world.asset.balance_of(ALICE) == 100
        # bob's share stays in the ledger's free custody
        assert world.asset.balance_of(LEDGER) == 50

        assert ledger.withdraw(BOB) == 50
        assert ledger.total_supply == 0
        assert world.asset.balance_of(LEDGER) == 0

    def test_withdraw_with_zero_balance(self, world, ledger):
        assert ledger.withdraw(ALICE) == 0
        assert ledger.total_supply == 0

    def test_escrow_withdraw_failure(self, world, ledger, fund):
        fund(ALICE, 100)
        ledger.deposit(ALICE, 100)
        world.clock.set(LOCK_END)
        world.escrow.fail_calls.add("withdraw")

        with pytest.raises(EscrowCallFailed):
            ledger.withdraw(ALICE)
        assert ledger.balance_of(ALICE) == 100

    def test_cycle_restarts_with_new_lock(self, world, ledger, fund):
        fund(ALICE, 200)
        ledger.deposit(ALICE, 100)
        world.clock.set(LOCK_END)
        ledger.withdraw(ALICE)
        assert ledger.lock_phase() == LockPhase.NO_LOCK

        ledger.deposit(ALICE, 100)
        lock = world.escrow.locked(LEDGER)
        assert lock.amount == 100
        assert lock.end == week_floor(LOCK_END + MAX_LOCK_TIME)
        assert ledger.lock_phase() == LockPhase.LOCK_ACTIVE
