from __future__ import annotations

from typing import Callable, Optional

import pytest

from lockwrap import LedgerConfig, WrapperLedger
from lockwrap.integration import InMemoryWorld

LEDGER = LedgerConfig().address
GAUGE = "gauge-a"
LP = "lp-a"


@pytest.fixture
def world() -> InMemoryWorld:
    w = InMemoryWorld()
    w.add_gauge(GAUGE, LP)
    return w


@pytest.fixture
def ledger(world: InMemoryWorld) -> WrapperLedger:
    return WrapperLedger(world.collaborators(LEDGER), LedgerConfig())


@pytest.fixture
def fund(world: InMemoryWorld) -> Callable[..., None]:
    """Mint external tokens to an account and approve the ledger to pull them."""

    def _fund(account: str, amount: int, token: Optional[str] = None) -> None:
        t = world.asset if token is None else world.lp_tokens[token]
        t.mint(account, amount)
        t.approve(account, LEDGER, t.allowance(account, LEDGER) + amount)

    return _fund
