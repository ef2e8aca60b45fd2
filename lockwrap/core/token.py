"""
Wrapper-token ledger: balances, allowances and total supply.

All mutations go through checked uint256 arithmetic and validate every amount
before touching the tables, so a rejected call leaves the state unchanged.
`mint` and `burn` are internal: only the escrow coordinator calls them.
"""

from __future__ import annotations

from typing import Callable

from ..state.balances import ZERO_ADDRESS
from ..state.ledger_state import LedgerState
from .errors import InsufficientAllowance, InsufficientBalance, InvalidRecipient
from .math import checked_add, checked_sub, require_uint
from .types import Event, LedgerEvent

EventSink = Callable[[LedgerEvent], None]


class TokenLedger:
    def __init__(self, state: LedgerState, emit: EventSink) -> None:
        self._state = state
        self._emit = emit

    # -- views ----------------------------------------------------------------

    @property
    def total_supply(self) -> int:
        return self._state.total_supply

    def balance_of(self, account: str) -> int:
        return self._state.balances.get(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self._state.allowances.get(owner, spender)

    # -- transfers ------------------------------------------------------------

    def transfer(self, sender: str, to: str, value: int) -> bool:
        value = require_uint(value)
        self._move(sender, to, value)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, value: int) -> bool:
        """Move *value* from *owner* to *to*, spending *spender*'s allowance.

        The allowance is always decremented, including a MAX_UINT256 approval.
        """
        value = require_uint(value)
        if self._state.balances.get(owner) < value:
            raise InsufficientBalance(f"balance of {owner} below {value}")
        remaining = checked_sub(
            self._state.allowances.get(owner, spender), value, error=InsufficientAllowance
        )
        self._move(owner, to, value)
        self._state.allowances.set(owner, spender, remaining)
        return True

    def approve(self, owner: str, spender: str, value: int) -> bool:
        value = require_uint(value)
        self._state.allowances.set(owner, spender, value)
        self._emit(LedgerEvent(Event.APPROVAL, {"owner": owner, "spender": spender, "value": value}))
        return True

    def _move(self, sender: str, to: str, value: int) -> None:
        balances = self._state.balances
        new_sender = checked_sub(balances.get(sender), value, error=InsufficientBalance)
        if sender == to:
            new_to = checked_add(new_sender, value)
            balances.set(to, new_to)
        else:
            new_to = checked_add(balances.get(to), value)
            balances.set(sender, new_sender)
            balances.set(to, new_to)
        self._emit(LedgerEvent(Event.TRANSFER, {"sender": sender, "receiver": to, "value": value}))

    # -- supply ---------------------------------------------------------------

    def mint(self, to: str, value: int) -> None:
        value = require_uint(value)
        if to == ZERO_ADDRESS:
            raise InvalidRecipient("cannot mint to the zero address")
        new_supply = checked_add(self._state.total_supply, value)
        new_balance = checked_add(self._state.balances.get(to), value)
        self._state.total_supply = new_supply
        self._state.balances.set(to, new_balance)
        self._emit(LedgerEvent(Event.TRANSFER, {"sender": ZERO_ADDRESS, "receiver": to, "value": value}))

    def burn(self, owner: str, value: int) -> None:
        value = require_uint(value)
        if owner == ZERO_ADDRESS:
            raise InvalidRecipient("cannot burn from the zero address")
        new_balance = checked_sub(self._state.balances.get(owner), value, error=InsufficientBalance)
        new_supply = checked_sub(self._state.total_supply, value, error=InsufficientBalance)
        self._state.total_supply = new_supply
        self._state.balances.set(owner, new_balance)
        self._emit(LedgerEvent(Event.TRANSFER, {"sender": owner, "receiver": ZERO_ADDRESS, "value": value}))
