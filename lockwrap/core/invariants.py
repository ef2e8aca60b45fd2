"""Invariant checkers for the wrapper ledger.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).

These cover locally owned state only. Custody against collaborators (escrow
lock, gauge positions) is checked separately by `check_custody()`, because the
ledger treats those figures as authoritative but does not own them.
"""

from __future__ import annotations

from typing import Callable, Mapping

from ..state.ledger_state import LedgerState
from .math import MAX_UINT256


def inv_supply_equals_balances(s: LedgerState) -> bool:
    return s.balances.total() == s.total_supply


def inv_supply_in_range(s: LedgerState) -> bool:
    return 0 <= s.total_supply <= MAX_UINT256


def inv_balances_non_negative(s: LedgerState) -> bool:
    return s.balances.verify_non_negative()


def inv_allowances_non_negative(s: LedgerState) -> bool:
    return s.allowances.verify_non_negative()


def inv_gauge_balances_non_negative(s: LedgerState) -> bool:
    return s.gauge_balances.verify_non_negative()


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[LedgerState], bool]] = {
    "inv_supply_equals_balances": inv_supply_equals_balances,
    "inv_supply_in_range": inv_supply_in_range,
    "inv_balances_non_negative": inv_balances_non_negative,
    "inv_allowances_non_negative": inv_allowances_non_negative,
    "inv_gauge_balances_non_negative": inv_gauge_balances_non_negative,
}


def check_all(state: LedgerState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]


def check_custody(
    state: LedgerState,
    *,
    locked_amount: int,
    free_underlying: int,
    gauge_positions: Mapping[str, int],
) -> list[str]:
    """Compare local records against collaborator-reported custody.

    - locked plus free underlying must cover the wrapper supply (rewards locked
      by gauge_mint can only push the left side higher),
    - each gauge position must cover the sum of its recorded sub-balances.
    """
    violations: list[str] = []
    if locked_amount + free_underlying < state.total_supply:
        violations.append("custody_underlying_covers_supply")
    for gauge, position in sorted(gauge_positions.items()):
        if state.gauge_balances.total_for_gauge(gauge) > position:
            violations.append(f"custody_gauge_covers_sub_ledger:{gauge}")
    return violations
