"""
Spender allowance tracking for the wrapper token.

Allowances are scoped per (owner, spender) and are overwritten, never merged.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .balances import Address, Amount


class AllowanceTable:
    """
    Deterministic allowance table mapping (owner, spender) -> amount.

    Notes:
    - Allowances are always non-negative.
    - Zero allowances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._allowances: Dict[Tuple[Address, Address], Amount] = {}

    def get(self, owner: Address, spender: Address) -> Amount:
        """Get allowance for (owner, spender). Returns 0 if not found."""
        return self._allowances.get((owner, spender), 0)

    def set(self, owner: Address, spender: Address, amount: Amount) -> None:
        """Overwrite the allowance for (owner, spender)."""
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def get_all_allowances(self) -> Dict[Tuple[Address, Address], Amount]:
        """Return all allowances."""
        return dict(self._allowances)

    def verify_non_negative(self) -> bool:
        return all(amount >= 0 for amount in self._allowances.values())

    def copy(self) -> AllowanceTable:
        out = AllowanceTable()
        out._allowances = dict(self._allowances)
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AllowanceTable):
            return NotImplemented
        return self._allowances == other._allowances

    def __repr__(self) -> str:
        return f"AllowanceTable({len(self._allowances)} entries)"
