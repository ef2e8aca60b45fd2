"""
Wrapper ledger orchestration.

This module wires the token ledger, escrow coordinator and gauge sub-ledger
into one component whose operations are all-or-nothing:

1. Local state and every transactional collaborator are snapshotted.
2. The operation runs, staging events.
3. Local invariants are checked on the post-state.
4. On success staged events are published; on any exception both local
   state and collaborators are restored and the exception propagates.

Steps 1 and 3 copy and scan every local table, so each top-level operation
costs time linear in the number of stored entries. Nested ``transaction()``
blocks pay it once for the whole batch, and ``LedgerConfig.check_invariants``
turns off step 3.

``execute(cmd)`` is the dispatch entry point for callers that prefer a
``StepResult`` over exceptions.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, Mapping, Optional

from ..config import LedgerConfig
from ..integration.interfaces import Asset, Clock, Escrow, Gauge, Minter, Transactional
from ..state.ledger_state import LedgerState
from ..state.state_root import compute_state_root
from .errors import LedgerError, LedgerInvariantError
from .escrow import EscrowCoordinator
from .gauges import GaugeSubLedger
from .invariants import check_all, check_custody
from .token import TokenLedger
from .types import Action, Command, Event, LedgerEvent, LockedBalance, LockPhase, StepResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Collaborators:
    """External services the ledger calls, each bound to the ledger's address."""

    asset: Asset
    escrow: Escrow
    minter: Minter
    clock: Clock
    gauges: Mapping[str, Gauge] = field(default_factory=dict)
    # Position tokens by identifier (as returned by `Gauge.lp_token()`).
    tokens: Mapping[str, Asset] = field(default_factory=dict)
    # Asset paid out by the minter; defaults to the locked asset.
    reward_asset: Optional[Asset] = None

    def transactional(self) -> list[Transactional]:
        candidates: list[object] = [self.asset, self.escrow, self.minter, self.clock, self.reward_asset]
        candidates.extend(self.gauges.values())
        candidates.extend(self.tokens.values())
        out: list[Transactional] = []
        seen: set[int] = set()
        for c in candidates:
            if isinstance(c, Transactional) and id(c) not in seen:
                seen.add(id(c))
                out.append(c)
        return out


class WrapperLedger:
    def __init__(
        self,
        collaborators: Collaborators,
        config: Optional[LedgerConfig] = None,
        state: Optional[LedgerState] = None,
    ) -> None:
        self.config = config or LedgerConfig()
        self.collaborators = collaborators
        self.state = state if state is not None else LedgerState()

        self._events: list[LedgerEvent] = []
        self._staged: Optional[list[LedgerEvent]] = None
        self._depth = 0

        self.token = TokenLedger(self.state, self._stage)
        self.coordinator = EscrowCoordinator(
            address=self.config.address,
            token=self.token,
            asset=collaborators.asset,
            escrow=collaborators.escrow,
            clock=collaborators.clock,
            max_lock_time=self.config.max_lock_time,
        )
        self.gauges = GaugeSubLedger(
            address=self.config.address,
            state=self.state,
            emit=self._stage,
            gauges=collaborators.gauges,
            tokens=collaborators.tokens,
            reward_asset=collaborators.reward_asset or collaborators.asset,
            minter=collaborators.minter,
            escrow=collaborators.escrow,
        )

    # -- transactions -----------------------------------------------------------

    def _stage(self, event: LedgerEvent) -> None:
        if self._staged is None:
            raise RuntimeError(f"{event.event.value} emitted outside a transaction")
        self._staged.append(event)

    @contextmanager
    def transaction(self, label: str) -> Iterator[None]:
        """Run the enclosed block atomically. Nested blocks join the outer one."""
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        local = self.state.snapshot()
        remote = [(c, c.snapshot()) for c in self.collaborators.transactional()]
        self._staged = []
        self._depth = 1
        try:
            yield
            if self.config.check_invariants:
                violations = check_all(self.state)
                if violations:
                    raise LedgerInvariantError(violations)
        except Exception as exc:
            self.state.restore(local)
            for c, snap in reversed(remote):
                c.restore(snap)
            logger.warning("%s aborted: %s: %s", label, type(exc).__name__, exc)
            raise
        else:
            self._events.extend(self._staged)
            logger.debug("%s committed (%d events)", label, len(self._staged))
        finally:
            self._staged = None
            self._depth = 0

    # -- views ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def symbol(self) -> str:
        return self.config.symbol

    @property
    def decimals(self) -> int:
        return self.config.decimals

    @property
    def total_supply(self) -> int:
        return self.token.total_supply

    def balance_of(self, account: str) -> int:
        return self.token.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self.token.allowance(owner, spender)

    def gauge_balance(self, gauge: str, user: str) -> int:
        return self.gauges.balance(gauge, user)

    def gauge_total(self, gauge: str) -> int:
        return self.gauges.total(gauge)

    def locked(self) -> LockedBalance:
        return self.coordinator.locked()

    def lock_phase(self) -> LockPhase:
        return self.coordinator.lock_phase()

    @property
    def events(self) -> tuple[LedgerEvent, ...]:
        return tuple(self._events)

    def state_root(self) -> str:
        return compute_state_root(self.state)

    def check_invariants(self) -> list[str]:
        return check_all(self.state)

    def check_custody(self) -> list[str]:
        """Compare local records with what the collaborators report holding."""
        c = self.collaborators
        return check_custody(
            self.state,
            locked_amount=self.locked().amount,
            free_underlying=c.asset.balance_of(self.config.address),
            gauge_positions={
                gauge_id: g.balance_of(self.config.address) for gauge_id, g in c.gauges.items()
            },
        )

    # -- token ledger -------------------------------------------------------------

    def transfer(self, sender: str, to: str, value: int) -> bool:
        with self.transaction("transfer"):
            return self.token.transfer(sender, to, value)

    def transfer_from(self, spender: str, owner: str, to: str, value: int) -> bool:
        with self.transaction("transfer_from"):
            return self.token.transfer_from(spender, owner, to, value)

    def approve(self, owner: str, spender: str, value: int) -> bool:
        with self.transaction("approve"):
            return self.token.approve(owner, spender, value)

    # -- escrow coordinator -------------------------------------------------------

    def deposit(self, user: str, value: int) -> None:
        with self.transaction("deposit"):
            self.coordinator.deposit(user, value)
            self._stage(LedgerEvent(Event.DEPOSIT, {"user": user, "value": value}))

    def withdraw(self, user: str) -> int:
        with self.transaction("withdraw"):
            value = self.coordinator.withdraw(user)
            self._stage(LedgerEvent(Event.WITHDRAW, {"user": user, "value": value}))
            return value

    # -- gauge sub-ledger ---------------------------------------------------------

    def gauge_deposit(self, gauge: str, user: str, value: int) -> None:
        with self.transaction("gauge_deposit"):
            self.gauges.deposit(gauge, user, value)

    def gauge_withdraw(self, gauge: str, user: str, value: int) -> None:
        with self.transaction("gauge_withdraw"):
            self.gauges.withdraw(gauge, user, value)

    def gauge_mint(self, gauge: str) -> int:
        with self.transaction("gauge_mint"):
            return self.gauges.mint(gauge)

    # -- dispatch -----------------------------------------------------------------

    def execute_or_raise(self, cmd: Command) -> StepResult:
        """Run *cmd*; raises the operation's LedgerError on rejection."""
        handler = _DISPATCH.get(cmd.action)
        if handler is None:
            raise ValueError(f"unknown action: {cmd.action}")
        before = len(self._events)
        handler(self, cmd)
        return StepResult(accepted=True, events=tuple(self._events[before:]))

    def execute(self, cmd: Command) -> StepResult:
        """Run *cmd*, returning a rejected ``StepResult`` instead of raising."""
        try:
            return self.execute_or_raise(cmd)
        except LedgerError as exc:
            return StepResult(accepted=False, rejection=exc.code, message=str(exc))


_DISPATCH: dict[Action, Callable[[WrapperLedger, Command], object]] = {
    Action.TRANSFER: lambda lw, c: lw.transfer(c.sender, c.to, c.value),
    Action.TRANSFER_FROM: lambda lw, c: lw.transfer_from(c.sender, c.owner, c.to, c.value),
    Action.APPROVE: lambda lw, c: lw.approve(c.sender, c.spender, c.value),
    Action.DEPOSIT: lambda lw, c: lw.deposit(c.sender, c.value),
    Action.WITHDRAW: lambda lw, c: lw.withdraw(c.sender),
    Action.GAUGE_DEPOSIT: lambda lw, c: lw.gauge_deposit(c.gauge, c.sender, c.value),
    Action.GAUGE_WITHDRAW: lambda lw, c: lw.gauge_withdraw(c.gauge, c.sender, c.value),
    Action.GAUGE_MINT: lambda lw, c: lw.gauge_mint(c.gauge),
}
