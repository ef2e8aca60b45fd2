"""
State management for the lockwrap ledger
"""

from .allowances import AllowanceTable
from .balances import ZERO_ADDRESS, BalanceTable
from .gauges import GaugeBalanceTable
from .ledger_state import LedgerState, state_from_dict, state_to_dict
from .state_root import compute_state_root

__all__ = [
    "AllowanceTable",
    "BalanceTable",
    "GaugeBalanceTable",
    "LedgerState",
    "ZERO_ADDRESS",
    "compute_state_root",
    "state_from_dict",
    "state_to_dict",
]
