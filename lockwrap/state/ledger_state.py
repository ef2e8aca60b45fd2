"""Locally owned ledger state and its plain-dict serialization.

`LedgerState` bundles the three tables the wrapper owns exclusively. Escrow and
gauge positions are never stored here; they are queried from collaborators.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .allowances import AllowanceTable
from .balances import BalanceTable
from .gauges import GaugeBalanceTable


@dataclass
class LedgerState:
    balances: BalanceTable = field(default_factory=BalanceTable)
    allowances: AllowanceTable = field(default_factory=AllowanceTable)
    gauge_balances: GaugeBalanceTable = field(default_factory=GaugeBalanceTable)
    total_supply: int = 0

    def snapshot(self) -> LedgerState:
        """Return an independent copy suitable for `restore()`."""
        return LedgerState(
            balances=self.balances.copy(),
            allowances=self.allowances.copy(),
            gauge_balances=self.gauge_balances.copy(),
            total_supply=self.total_supply,
        )

    def restore(self, snap: LedgerState) -> None:
        """Reset this state in place to a previous snapshot."""
        self.balances = snap.balances.copy()
        self.allowances = snap.allowances.copy()
        self.gauge_balances = snap.gauge_balances.copy()
        self.total_supply = snap.total_supply


def state_to_dict(state: LedgerState) -> dict[str, Any]:
    """Serialize a LedgerState to a plain dict with sorted entry lists."""
    return {
        "total_supply": state.total_supply,
        "balances": [
            {"account": account, "amount": amount}
            for account, amount in sorted(state.balances.get_all_balances().items())
        ],
        "allowances": [
            {"owner": owner, "spender": spender, "amount": amount}
            for (owner, spender), amount in sorted(state.allowances.get_all_allowances().items())
        ],
        "gauge_balances": [
            {"gauge": gauge, "user": user, "amount": amount}
            for gauge, user, amount in state.gauge_balances.entries()
        ],
    }


def state_from_dict(d: Mapping[str, Any]) -> LedgerState:
    """
    Deserialize a dict to a LedgerState.

    Raises:
        KeyError: If a field is missing
        InvalidAmount: If an amount is not an int in the uint256 domain
        LedgerInvariantError: If the decoded tables are inconsistent
    """
    # lockwrap.core imports this module
    from ..core.errors import LedgerInvariantError
    from ..core.invariants import check_all
    from ..core.math import require_uint

    state = LedgerState(total_supply=require_uint(d["total_supply"], name="total_supply"))
    for entry in d["balances"]:
        state.balances.set(str(entry["account"]), require_uint(entry["amount"], name="balance"))
    for entry in d["allowances"]:
        state.allowances.set(
            str(entry["owner"]),
            str(entry["spender"]),
            require_uint(entry["amount"], name="allowance"),
        )
    for entry in d["gauge_balances"]:
        state.gauge_balances.set(
            str(entry["gauge"]),
            str(entry["user"]),
            require_uint(entry["amount"], name="gauge balance"),
        )
    violations = check_all(state)
    if violations:
        raise LedgerInvariantError(violations)
    return state
