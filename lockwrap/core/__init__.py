"""
Core ledger algorithms

`escrow`, `gauges` and `ledger` depend on the collaborator interfaces and are
imported from their modules (or from the top-level `lockwrap` package).
"""

from .errors import (
    ArithmeticOverflow,
    EscrowCallFailed,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    InvalidRecipient,
    LedgerError,
    LedgerInvariantError,
    TransferFailed,
)
from .invariants import INVARIANT_REGISTRY, check_all, check_custody
from .math import MAX_LOCK_TIME, MAX_UINT256, WEEK, checked_add, checked_sub, require_uint
from .token import TokenLedger
from .types import Action, Command, Event, LedgerEvent, LockedBalance, LockPhase, StepResult

__all__ = [
    "ArithmeticOverflow",
    "EscrowCallFailed",
    "InsufficientAllowance",
    "InsufficientBalance",
    "InvalidAmount",
    "InvalidRecipient",
    "LedgerError",
    "LedgerInvariantError",
    "TransferFailed",
    "INVARIANT_REGISTRY",
    "check_all",
    "check_custody",
    "MAX_LOCK_TIME",
    "MAX_UINT256",
    "WEEK",
    "checked_add",
    "checked_sub",
    "require_uint",
    "TokenLedger",
    "Action",
    "Command",
    "Event",
    "LedgerEvent",
    "LockedBalance",
    "LockPhase",
    "StepResult",
]
