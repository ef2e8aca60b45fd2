"""
Gauge sub-ledger: per-(gauge, user) balances for position tokens routed
through external gauges.

Position tokens move 1:1 with sub-ledger entries, so for every gauge the sum of
recorded sub-balances never exceeds what this ledger holds in that gauge.
Rewards minted for a gauge are locked into the escrow as a whole; they are not
attributed to individual depositors.
"""

from __future__ import annotations

import logging
from typing import Mapping

from ..integration.interfaces import Asset, Escrow, Gauge, Minter
from ..state.ledger_state import LedgerState
from .calls import asset_call, escrow_call, external_call
from .errors import InsufficientBalance, TransferFailed
from .math import checked_add, checked_sub, require_uint
from .token import EventSink
from .types import Event, LedgerEvent

logger = logging.getLogger(__name__)


class GaugeSubLedger:
    def __init__(
        self,
        *,
        address: str,
        state: LedgerState,
        emit: EventSink,
        gauges: Mapping[str, Gauge],
        tokens: Mapping[str, Asset],
        reward_asset: Asset,
        minter: Minter,
        escrow: Escrow,
    ) -> None:
        self.address = address
        self._state = state
        self._emit = emit
        self._gauges = gauges
        self._tokens = tokens
        self._reward_asset = reward_asset
        self._minter = minter
        self._escrow = escrow

    def balance(self, gauge: str, user: str) -> int:
        return self._state.gauge_balances.get(gauge, user)

    def total(self, gauge: str) -> int:
        return self._state.gauge_balances.total_for_gauge(gauge)

    def _gauge(self, gauge: str) -> Gauge:
        g = self._gauges.get(gauge)
        if g is None:
            raise TransferFailed(f"unknown gauge: {gauge}")
        return g

    def _position_token(self, g: Gauge) -> Asset:
        lp = external_call("gauge.lp_token", g.lp_token)
        token = self._tokens.get(lp)
        if token is None:
            raise TransferFailed(f"unknown position token: {lp}")
        return token

    def deposit(self, gauge: str, user: str, value: int) -> None:
        value = require_uint(value)
        g = self._gauge(gauge)
        lp = self._position_token(g)

        asset_call("lp.transfer_from", lp.transfer_from, user, self.address, value)
        asset_call("lp.approve", lp.approve, g.address, value)
        external_call("gauge.deposit", g.deposit, value)

        new_balance = checked_add(self._state.gauge_balances.get(gauge, user), value)
        self._state.gauge_balances.set(gauge, user, new_balance)
        self._emit(LedgerEvent(Event.GAUGE_DEPOSIT, {"gauge": gauge, "user": user, "value": value}))

    def withdraw(self, gauge: str, user: str, value: int) -> None:
        value = require_uint(value)
        g = self._gauge(gauge)
        new_balance = checked_sub(
            self._state.gauge_balances.get(gauge, user), value, error=InsufficientBalance
        )

        external_call("gauge.withdraw", g.withdraw, value)
        self._state.gauge_balances.set(gauge, user, new_balance)

        lp = self._position_token(g)
        asset_call("lp.transfer", lp.transfer, user, value)
        self._emit(LedgerEvent(Event.GAUGE_WITHDRAW, {"gauge": gauge, "user": user, "value": value}))

    def mint(self, gauge: str) -> int:
        """Claim rewards for *gauge* and lock this ledger's entire reward balance."""
        self._gauge(gauge)
        external_call("minter.mint", self._minter.mint, gauge)

        reward = external_call("reward.balance_of", self._reward_asset.balance_of, self.address)
        asset_call("reward.approve", self._reward_asset.approve, self._escrow.address, reward)
        escrow_call("escrow.increase_amount", self._escrow.increase_amount, reward)
        logger.info("locked %d reward units minted for gauge %s", reward, gauge)

        self._emit(LedgerEvent(Event.GAUGE_MINT, {"gauge": gauge, "value": reward}))
        return reward
