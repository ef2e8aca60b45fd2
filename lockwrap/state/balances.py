"""
Wrapper-token balances.

A sparse `account -> amount` table: accounts with a zero balance are not
stored, so two tables with the same non-zero holdings compare equal.
"""

from typing import Dict


# Type aliases
Address = str  # opaque account identifier
Amount = int  # non-negative; the uint256 bound is enforced by lockwrap.core.math

# Null account: mint source and burn sink
ZERO_ADDRESS = "0x" + "00" * 20


class BalanceTable:
    """
    Mapping of account to wrapper-token balance.

    Iteration order of the underlying dict is insertion order; anything that
    hashes a table sorts its entries first (see `lockwrap/state/ledger_state.py`).
    """

    def __init__(self):
        self._balances: Dict[Address, Amount] = {}

    def get(self, account: Address) -> Amount:
        """Balance of *account*; unknown accounts hold 0."""
        return self._balances.get(account, 0)

    def set(self, account: Address, amount: Amount) -> None:
        """
        Overwrite the balance of *account*.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"balance of {account} cannot be negative: {amount}")
        if amount:
            self._balances[account] = amount
        else:
            self._balances.pop(account, None)

    def add(self, account: Address, delta: int) -> None:
        """Apply a signed *delta*; raises ValueError if the result would go below 0."""
        updated = self.get(account) + delta
        if updated < 0:
            raise ValueError(f"balance of {account} would become {updated}")
        self.set(account, updated)

    def subtract(self, account: Address, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"subtracted amount must be non-negative: {delta}")
        self.add(account, -delta)

    def get_all_balances(self) -> Dict[Address, Amount]:
        """Copy of every non-zero balance."""
        return dict(self._balances)

    def total(self) -> Amount:
        return sum(self._balances.values())

    def verify_non_negative(self) -> bool:
        return all(v >= 0 for v in self._balances.values())

    def copy(self) -> "BalanceTable":
        dup = BalanceTable()
        dup._balances = dict(self._balances)
        return dup

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BalanceTable):
            return NotImplemented
        return self._balances == other._balances

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} accounts)"
