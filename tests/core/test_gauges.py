"""Tests for lockwrap/core/gauges.py through the ledger."""

import pytest

from lockwrap import EscrowCallFailed, Event, InsufficientBalance, LedgerConfig, TransferFailed
from lockwrap.core.math import MAX_LOCK_TIME, week_floor

LEDGER = LedgerConfig().address
ALICE = "alice"
BOB = "bob"
GAUGE = "gauge-a"
LP = "lp-a"


class TestGaugeDeposit:
    def test_credits_sub_ledger(self, world, ledger, fund):
        fund(ALICE, 40, token=LP)
        ledger.gauge_deposit(GAUGE, ALICE, 40)

        assert ledger.gauge_balance(GAUGE, ALICE) == 40
        assert world.gauges[GAUGE].balance_of(LEDGER) == 40
        assert world.lp_tokens[LP].balance_of(ALICE) == 0
        # the wrapper token ledger is unaffected
        assert ledger.total_supply == 0

    def test_sub_balances_are_per_user(self, world, ledger, fund):
        fund(ALICE, 40, token=LP)
        fund(BOB, 10, token=LP)
        ledger.gauge_deposit(GAUGE, ALICE, 40)
        ledger.gauge_deposit(GAUGE, BOB, 10)

        assert ledger.gauge_balance(GAUGE, ALICE) == 40
        assert ledger.gauge_balance(GAUGE, BOB) == 10
        assert ledger.gauge_total(GAUGE) == 50
        assert world.gauges[GAUGE].balance_of(LEDGER) == 50

    def test_unknown_gauge(self, ledger):
        with pytest.raises(TransferFailed):
            ledger.gauge_deposit("gauge-missing", ALICE, 1)

    def test_gauge_rejection_rolls_back(self, world, ledger, fund):
        fund(ALICE, 40, token=LP)
        world.gauges[GAUGE].fail_calls.add("deposit")

        with pytest.raises(TransferFailed):
            ledger.gauge_deposit(GAUGE, ALICE, 40)
        assert ledger.gauge_balance(GAUGE, ALICE) == 0
        assert world.lp_tokens[LP].balance_of(ALICE) == 40
        assert world.lp_tokens[LP].balance_of(LEDGER) == 0

    def test_emits_event(self, ledger, fund):
        fund(ALICE, 5, token=LP)
        ledger.gauge_deposit(GAUGE, ALICE, 5)
        assert ledger.events[-1].event == Event.GAUGE_DEPOSIT
        assert dict(ledger.events[-1].args) == {"gauge": GAUGE, "user": ALICE, "value": 5}


class TestGaugeWithdraw:
    def test_returns_position_token(self, world, ledger, fund):
        fund(ALICE, 40, token=LP)
        ledger.gauge_deposit(GAUGE, ALICE, 40)
        ledger.gauge_withdraw(GAUGE, ALICE, 15)

        assert ledger.gauge_balance(GAUGE, ALICE) == 25
        assert world.lp_tokens[LP].balance_of(ALICE) == 15
        assert world.gauges[GAUGE].balance_of(LEDGER) == 25

    def test_over_withdraw_fails_and_keeps_balance(self, world, ledger, fund):
        fund(ALICE, 40, token=LP)
        fund(BOB, 20, token=LP)
        ledger.gauge_deposit(GAUGE, ALICE, 40)
        ledger.gauge_deposit(GAUGE, BOB, 20)

        # the gauge holds 60 for the ledger, so only the sub-ledger can refuse
        with pytest.raises(InsufficientBalance):
            ledger.gauge_withdraw(GAUGE, ALICE, 50)
        assert ledger.gauge_balance(GAUGE, ALICE) == 40
        assert world.gauges[GAUGE].balance_of(LEDGER) == 60
        assert world.lp_tokens[LP].balance_of(LEDGER) == 0

    def test_over_withdraw_checked_before_gauge_call(self, world, ledger, fund):
        fund(ALICE, 40, token=LP)
        ledger.gauge_deposit(GAUGE, ALICE, 40)

        with pytest.raises(InsufficientBalance):
            ledger.gauge_withdraw(GAUGE, ALICE, 50)
        assert ledger.gauge_balance(GAUGE, ALICE) == 40
        assert world.gauges[GAUGE].balance_of(LEDGER) == 40

    def test_gauge_refusal_is_transfer_failed(self, world, ledger, fund):
        fund(ALICE, 40, token=LP)
        ledger.gauge_deposit(GAUGE, ALICE, 40)
        world.gauges[GAUGE].fail_calls.add("withdraw")

        with pytest.raises(TransferFailed):
            ledger.gauge_withdraw(GAUGE, ALICE, 10)
        assert ledger.gauge_balance(GAUGE, ALICE) == 40
        assert world.lp_tokens[LP].balance_of(ALICE) == 0

    def test_cannot_withdraw_other_users_deposit(self, world, ledger, fund):
        fund(ALICE, 40, token=LP)
        ledger.gauge_deposit(GAUGE, ALICE, 40)

        with pytest.raises(InsufficientBalance):
            ledger.gauge_withdraw(GAUGE, BOB, 1)
        assert world.lp_tokens[LP].balance_of(BOB) == 0


class TestGaugeMint:
    def test_rewards_locked_into_existing_lock(self, world, ledger, fund):
        fund(ALICE, 100)
        ledger.deposit(ALICE, 100)
        world.minter.accrue(GAUGE, LEDGER, 7)

        assert ledger.gauge_mint(GAUGE) == 7
        lock = world.escrow.locked(LEDGER)
        assert lock.amount == 107
        assert lock.end == week_floor(MAX_LOCK_TIME)
        # rewards are not attributed to holders
        assert ledger.total_supply == 100
        assert ledger.balance_of(ALICE) == 100
        assert ledger.events[-1].event == Event.GAUGE_MINT

    def test_locks_entire_free_balance(self, world, ledger, fund):
        fund(ALICE, 100)
        ledger.deposit(ALICE, 100)
        world.asset.mint(LEDGER, 3)
        world.minter.accrue(GAUGE, LEDGER, 7)

        assert ledger.gauge_mint(GAUGE) == 10
        assert world.escrow.locked(LEDGER).amount == 110

    def test_without_lock_fails(self, world, ledger):
        world.minter.accrue(GAUGE, LEDGER, 7)
        with pytest.raises(EscrowCallFailed):
            ledger.gauge_mint(GAUGE)
        # minted rewards are rolled back with the operation
        assert world.asset.balance_of(LEDGER) == 0
        assert world.minter.pending[(GAUGE, LEDGER)] == 7

    def test_nothing_to_lock_fails(self, world, ledger, fund):
        fund(ALICE, 100)
        ledger.deposit(ALICE, 100)
        with pytest.raises(EscrowCallFailed):
            ledger.gauge_mint(GAUGE)

    def test_minter_failure(self, world, ledger, fund):
        fund(ALICE, 100)
        ledger.deposit(ALICE, 100)
        world.minter.accrue(GAUGE, LEDGER, 7)
        world.minter.fail_calls.add("mint")
        with pytest.raises(TransferFailed):
            ledger.gauge_mint(GAUGE)
        assert world.escrow.locked(LEDGER).amount == 100
