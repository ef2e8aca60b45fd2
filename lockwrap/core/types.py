"""Data types for the wrapper ledger.

Units/conventions:
- amounts are uint256 ints in the underlying asset's base units (1 wrapper
  token == 1 base unit of locked asset),
- timestamps are integer seconds,
- accounts, gauges and tokens are opaque string identifiers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Mapping


@unique
class Event(Enum):
    """Observable ledger events, published only when an operation commits."""
    TRANSFER = "Transfer"
    APPROVAL = "Approval"
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"
    GAUGE_DEPOSIT = "GaugeDeposit"
    GAUGE_WITHDRAW = "GaugeWithdraw"
    GAUGE_MINT = "GaugeMint"


@unique
class LockPhase(Enum):
    """Phase of the single aggregate escrow lock."""
    NO_LOCK = "no_lock"
    LOCK_ACTIVE = "lock_active"
    LOCK_EXPIRED = "lock_expired"


@unique
class Action(Enum):
    """One member per user-facing ledger operation."""
    TRANSFER = "transfer"
    TRANSFER_FROM = "transfer_from"
    APPROVE = "approve"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    GAUGE_DEPOSIT = "gauge_deposit"
    GAUGE_WITHDRAW = "gauge_withdraw"
    GAUGE_MINT = "gauge_mint"


@dataclass(frozen=True)
class LockedBalance:
    """Escrow lock position as reported by ``Escrow.locked()``."""

    amount: int = 0
    end: int = 0

    @property
    def exists(self) -> bool:
        return self.amount != 0 and self.end != 0


@dataclass(frozen=True)
class LedgerEvent:
    event: Event
    args: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Command:
    """Parameters for an operation. Unused fields default to ""/0.

    ``sender`` is the caller: the token owner for transfer/approve, the spender
    for transfer_from, the depositor for deposit/withdraw and gauge calls.
    """

    action: Action
    sender: str = ""
    to: str = ""              # transfer / transfer_from
    owner: str = ""           # transfer_from
    spender: str = ""         # approve
    gauge: str = ""           # gauge_deposit / gauge_withdraw / gauge_mint
    value: int = 0


@dataclass(frozen=True)
class StepResult:
    """Result of a single dispatched command."""

    accepted: bool
    events: tuple[LedgerEvent, ...] = ()
    rejection: str | None = None
    message: str | None = None
