"""
In-memory collaborators.

Reference implementations of the asset, escrow, gauge and minter interfaces,
used by tests and scenario replay. Each keeps its own state in the same sparse
tables the ledger uses, can be snapshotted/restored, and supports failure
injection:

- `fail_calls`: method names that raise `CallReverted`,
- `false_calls`: asset method names that return False instead of acting.

Collaborators are shared objects; `bind(caller)` returns the handle a given
account (normally the ledger) calls through.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from ..core.math import MAX_LOCK_TIME, week_floor
from ..core.types import LockedBalance
from ..state.allowances import AllowanceTable
from ..state.balances import BalanceTable
from .interfaces import Asset, Clock, Escrow, Gauge, Minter, Transactional

if TYPE_CHECKING:
    from ..core.ledger import Collaborators


class CallReverted(Exception):
    """A collaborator rejected the call."""


class _FailureInjection:
    def __init__(self) -> None:
        self.fail_calls: set[str] = set()
        self.false_calls: set[str] = set()

    def _enter(self, method: str) -> bool:
        """Raise if *method* is set to revert; return False if it should report failure."""
        if method in self.fail_calls:
            raise CallReverted(f"{method} disabled")
        return method not in self.false_calls


class ManualClock(Clock):
    def __init__(self, now: int = 0) -> None:
        if now < 0:
            raise ValueError(f"timestamp must be non-negative: {now}")
        self._now = now

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"cannot move the clock backwards: {seconds}")
        self._now += seconds
        return self._now

    def set(self, ts: int) -> None:
        if ts < self._now:
            raise ValueError(f"cannot move the clock backwards: {ts} < {self._now}")
        self._now = ts


# ---------------------------------------------------------------------------
# Token
# ---------------------------------------------------------------------------


class InMemoryToken(_FailureInjection, Transactional):
    """Fungible token with strict balance and allowance checks."""

    def __init__(self, address: str, symbol: str = "TKN") -> None:
        super().__init__()
        self.address = address
        self.symbol = symbol
        self.balances = BalanceTable()
        self.allowances = AllowanceTable()

    def mint(self, to: str, value: int) -> None:
        """Create *value* new units for *to* (funding helper, not part of the Asset interface)."""
        self.balances.add(to, value)

    def balance_of(self, account: str) -> int:
        return self.balances.get(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get(owner, spender)

    def total_supply(self) -> int:
        return self.balances.total()

    def transfer(self, sender: str, to: str, value: int) -> bool:
        if not self._enter("transfer"):
            return False
        self._move(sender, to, value)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, value: int) -> bool:
        if not self._enter("transfer_from"):
            return False
        allowed = self.allowances.get(owner, spender)
        if allowed < value:
            raise CallReverted(f"allowance {allowed} < {value}")
        self._move(owner, to, value)
        self.allowances.set(owner, spender, allowed - value)
        return True

    def approve(self, owner: str, spender: str, value: int) -> bool:
        if not self._enter("approve"):
            return False
        self.allowances.set(owner, spender, value)
        return True

    def _move(self, sender: str, to: str, value: int) -> None:
        if value < 0:
            raise CallReverted(f"negative amount: {value}")
        if self.balances.get(sender) < value:
            raise CallReverted(f"balance of {sender} below {value}")
        self.balances.subtract(sender, value)
        self.balances.add(to, value)

    def bind(self, caller: str) -> BoundToken:
        return BoundToken(self, caller)

    def snapshot(self) -> Tuple[BalanceTable, AllowanceTable]:
        return self.balances.copy(), self.allowances.copy()

    def restore(self, snap: Tuple[BalanceTable, AllowanceTable]) -> None:
        balances, allowances = snap
        self.balances = balances.copy()
        self.allowances = allowances.copy()


class BoundToken(Asset, Transactional):
    def __init__(self, token: InMemoryToken, caller: str) -> None:
        self.token = token
        self.caller = caller

    @property
    def address(self) -> str:  # type: ignore[override]
        return self.token.address

    def transfer(self, to: str, value: int) -> bool:
        return self.token.transfer(self.caller, to, value)

    def transfer_from(self, owner: str, to: str, value: int) -> bool:
        return self.token.transfer_from(self.caller, owner, to, value)

    def approve(self, spender: str, value: int) -> bool:
        return self.token.approve(self.caller, spender, value)

    def balance_of(self, account: str) -> int:
        return self.token.balance_of(account)

    def snapshot(self) -> Any:
        return self.token.snapshot()

    def restore(self, snap: Any) -> None:
        self.token.restore(snap)


# ---------------------------------------------------------------------------
# Escrow
# ---------------------------------------------------------------------------


class InMemoryEscrow(_FailureInjection, Transactional):
    """
    Vote-escrow style lock keeper.

    Rules:
    - unlock times are rounded down to whole weeks,
    - a new lock must end in the future and at most `max_lock_time` ahead,
    - amounts can only be added to an unexpired lock,
    - a lock can only be withdrawn once expired, and then in full.
    """

    def __init__(
        self,
        token: InMemoryToken,
        clock: Clock,
        address: str = "0x" + "ee" * 20,
        max_lock_time: int = MAX_LOCK_TIME,
    ) -> None:
        super().__init__()
        self.token = token
        self.clock = clock
        self.address = address
        self.max_lock_time = max_lock_time
        self.locks: Dict[str, LockedBalance] = {}

    def locked(self, account: str) -> LockedBalance:
        if not self._enter("locked"):
            raise CallReverted("locked unavailable")
        return self.locks.get(account, LockedBalance())

    def _pull(self, caller: str, value: int) -> None:
        if not self.token.transfer_from(self.address, caller, self.address, value):
            raise CallReverted("token transfer_from returned false")

    def create_lock(self, caller: str, value: int, unlock_time: int) -> None:
        self._enter("create_lock")
        now = self.clock.now()
        end = week_floor(unlock_time)
        lock = self.locks.get(caller, LockedBalance())
        if value <= 0:
            raise CallReverted("need non-zero value")
        if lock.amount != 0:
            raise CallReverted("withdraw old tokens first")
        if end <= now:
            raise CallReverted("can only lock until time in the future")
        if end > now + self.max_lock_time:
            raise CallReverted("lock exceeds maximum duration")
        self._pull(caller, value)
        self.locks[caller] = LockedBalance(amount=value, end=end)

    def increase_amount(self, caller: str, value: int) -> None:
        self._enter("increase_amount")
        lock = self.locks.get(caller, LockedBalance())
        if value <= 0:
            raise CallReverted("need non-zero value")
        if lock.amount <= 0:
            raise CallReverted("no existing lock found")
        if lock.end <= self.clock.now():
            raise CallReverted("cannot add to expired lock, withdraw")
        self._pull(caller, value)
        self.locks[caller] = LockedBalance(amount=lock.amount + value, end=lock.end)

    def increase_unlock_time(self, caller: str, unlock_time: int) -> None:
        self._enter("increase_unlock_time")
        now = self.clock.now()
        end = week_floor(unlock_time)
        lock = self.locks.get(caller, LockedBalance())
        if lock.amount <= 0:
            raise CallReverted("nothing is locked")
        if lock.end <= now:
            raise CallReverted("lock expired")
        if end <= lock.end:
            raise CallReverted("can only increase lock duration")
        if end > now + self.max_lock_time:
            raise CallReverted("lock exceeds maximum duration")
        self.locks[caller] = LockedBalance(amount=lock.amount, end=end)

    def withdraw(self, caller: str) -> None:
        self._enter("withdraw")
        lock = self.locks.get(caller, LockedBalance())
        if self.clock.now() < lock.end:
            raise CallReverted("the lock didn't expire")
        self.locks.pop(caller, None)
        self.token.transfer(self.address, caller, lock.amount)

    def total_locked(self) -> int:
        return sum(lock.amount for lock in self.locks.values())

    def bind(self, caller: str) -> BoundEscrow:
        return BoundEscrow(self, caller)

    def snapshot(self) -> Dict[str, LockedBalance]:
        return dict(self.locks)

    def restore(self, snap: Dict[str, LockedBalance]) -> None:
        self.locks = dict(snap)


class BoundEscrow(Escrow, Transactional):
    def __init__(self, escrow: InMemoryEscrow, caller: str) -> None:
        self.escrow = escrow
        self.caller = caller

    @property
    def address(self) -> str:  # type: ignore[override]
        return self.escrow.address

    def locked(self, account: str) -> LockedBalance:
        return self.escrow.locked(account)

    def create_lock(self, value: int, unlock_time: int) -> None:
        self.escrow.create_lock(self.caller, value, unlock_time)

    def increase_amount(self, value: int) -> None:
        self.escrow.increase_amount(self.caller, value)

    def increase_unlock_time(self, unlock_time: int) -> None:
        self.escrow.increase_unlock_time(self.caller, unlock_time)

    def withdraw(self) -> None:
        self.escrow.withdraw(self.caller)

    def snapshot(self) -> Any:
        return self.escrow.snapshot()

    def restore(self, snap: Any) -> None:
        self.escrow.restore(snap)


# ---------------------------------------------------------------------------
# Gauge + minter
# ---------------------------------------------------------------------------


class InMemoryGauge(_FailureInjection, Transactional):
    """Gauge holding deposits of a single position token per depositor."""

    def __init__(self, lp: InMemoryToken, address: str) -> None:
        super().__init__()
        self.lp = lp
        self.address = address
        self.deposits = BalanceTable()

    def lp_token(self) -> str:
        self._enter("lp_token")
        return self.lp.address

    def deposit(self, caller: str, value: int) -> None:
        self._enter("deposit")
        if not self.lp.transfer_from(self.address, caller, self.address, value):
            raise CallReverted("lp transfer_from returned false")
        self.deposits.add(caller, value)

    def withdraw(self, caller: str, value: int) -> None:
        self._enter("withdraw")
        held = self.deposits.get(caller)
        if held < value:
            raise CallReverted(f"gauge balance {held} < {value}")
        self.deposits.subtract(caller, value)
        self.lp.transfer(self.address, caller, value)

    def balance_of(self, account: str) -> int:
        return self.deposits.get(account)

    def bind(self, caller: str) -> BoundGauge:
        return BoundGauge(self, caller)

    def snapshot(self) -> BalanceTable:
        return self.deposits.copy()

    def restore(self, snap: BalanceTable) -> None:
        self.deposits = snap.copy()


class BoundGauge(Gauge, Transactional):
    def __init__(self, gauge: InMemoryGauge, caller: str) -> None:
        self.gauge = gauge
        self.caller = caller

    @property
    def address(self) -> str:  # type: ignore[override]
        return self.gauge.address

    def lp_token(self) -> str:
        return self.gauge.lp_token()

    def deposit(self, value: int) -> None:
        self.gauge.deposit(self.caller, value)

    def withdraw(self, value: int) -> None:
        self.gauge.withdraw(self.caller, value)

    def balance_of(self, account: str) -> int:
        return self.gauge.balance_of(account)

    def snapshot(self) -> Any:
        return self.gauge.snapshot()

    def restore(self, snap: Any) -> None:
        self.gauge.restore(snap)


class InMemoryMinter(_FailureInjection, Transactional):
    """Pays out rewards accrued per (gauge, account) by minting the reward token."""

    def __init__(self, reward: InMemoryToken) -> None:
        super().__init__()
        self.reward = reward
        self.pending: Dict[Tuple[str, str], int] = {}

    def accrue(self, gauge: str, account: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"reward must be non-negative: {value}")
        key = (gauge, account)
        self.pending[key] = self.pending.get(key, 0) + value

    def mint(self, caller: str, gauge: str) -> None:
        self._enter("mint")
        value = self.pending.pop((gauge, caller), 0)
        if value:
            self.reward.mint(caller, value)

    def bind(self, caller: str) -> BoundMinter:
        return BoundMinter(self, caller)

    def snapshot(self) -> Dict[Tuple[str, str], int]:
        return dict(self.pending)

    def restore(self, snap: Dict[Tuple[str, str], int]) -> None:
        self.pending = dict(snap)


class BoundMinter(Minter, Transactional):
    def __init__(self, minter: InMemoryMinter, caller: str) -> None:
        self.minter = minter
        self.caller = caller

    def mint(self, gauge: str) -> None:
        self.minter.mint(self.caller, gauge)

    def snapshot(self) -> Any:
        return self.minter.snapshot()

    def restore(self, snap: Any) -> None:
        self.minter.restore(snap)


# ---------------------------------------------------------------------------
# World
# ---------------------------------------------------------------------------


@dataclass
class InMemoryWorld:
    """One underlying/reward token, one escrow, one minter and any number of gauges."""

    clock: ManualClock = field(default_factory=ManualClock)
    asset: InMemoryToken = field(default_factory=lambda: InMemoryToken("0x" + "c0" * 20, "CRV"))
    escrow: Optional[InMemoryEscrow] = None
    minter: Optional[InMemoryMinter] = None
    gauges: Dict[str, InMemoryGauge] = field(default_factory=dict)
    lp_tokens: Dict[str, InMemoryToken] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.escrow is None:
            self.escrow = InMemoryEscrow(self.asset, self.clock)
        if self.minter is None:
            self.minter = InMemoryMinter(self.asset)

    def add_gauge(self, gauge: str, lp: str) -> InMemoryGauge:
        """Register a gauge accepting position token *lp* (created on first use)."""
        if gauge in self.gauges:
            raise ValueError(f"gauge already registered: {gauge}")
        token = self.lp_tokens.get(lp)
        if token is None:
            token = InMemoryToken(lp, "LP")
            self.lp_tokens[lp] = token
        g = InMemoryGauge(token, gauge)
        self.gauges[gauge] = g
        return g

    def collaborators(self, caller: str) -> "Collaborators":
        """Collaborator handles bound to *caller* (the ledger's address)."""
        from ..core.ledger import Collaborators

        assert self.escrow is not None and self.minter is not None
        return Collaborators(
            asset=self.asset.bind(caller),
            escrow=self.escrow.bind(caller),
            minter=self.minter.bind(caller),
            clock=self.clock,
            gauges={gid: g.bind(caller) for gid, g in self.gauges.items()},
            tokens={lp: t.bind(caller) for lp, t in self.lp_tokens.items()},
        )
