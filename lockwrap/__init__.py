"""`lockwrap`: liquid-wrapper ledger over a time-locked escrow.

Wrapper tokens are minted 1:1 against deposits locked in a single aggregate
escrow position and burned on withdrawal. Position tokens can additionally be
routed through gauges, tracked per (gauge, user).

Public API:
- `WrapperLedger(collaborators, config)` with `transfer`, `transfer_from`,
  `approve`, `deposit`, `withdraw`, `gauge_deposit`, `gauge_withdraw`,
  `gauge_mint`, and `execute(cmd) -> StepResult`
- `LedgerConfig`, `load_config`, `config_from_env`
- `InMemoryWorld` for wiring in-memory collaborators
"""

from .core import (
    Action,
    ArithmeticOverflow,
    Command,
    EscrowCallFailed,
    Event,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    InvalidRecipient,
    LedgerError,
    LedgerEvent,
    LedgerInvariantError,
    LockedBalance,
    LockPhase,
    StepResult,
    TransferFailed,
)
from .core.ledger import Collaborators, WrapperLedger
from .config import LedgerConfig, config_from_env, load_config
from .integration.memory import InMemoryWorld
from .state import ZERO_ADDRESS, LedgerState

__all__ = [
    "Action",
    "ArithmeticOverflow",
    "Command",
    "EscrowCallFailed",
    "Event",
    "InsufficientAllowance",
    "InsufficientBalance",
    "InvalidAmount",
    "InvalidRecipient",
    "LedgerError",
    "LedgerEvent",
    "LedgerInvariantError",
    "LockedBalance",
    "LockPhase",
    "StepResult",
    "TransferFailed",
    "Collaborators",
    "WrapperLedger",
    "LedgerConfig",
    "config_from_env",
    "load_config",
    "InMemoryWorld",
    "ZERO_ADDRESS",
    "LedgerState",
]
