"""
Collaborator interfaces consumed by the wrapper ledger.

Each collaborator is already bound to the ledger's own address: calls are made
"as" the ledger, the way a contract calls another contract. Implementations
signal rejection by raising (any exception) or, for asset calls, by returning
False; the ledger maps both onto its own error taxonomy.
"""

from __future__ import annotations

from typing import Any

from ..core.types import LockedBalance


class Asset:
    """Fungible token (underlying asset, reward asset or gauge position token)."""

    address: str = ""

    def transfer(self, to: str, value: int) -> bool:
        raise NotImplementedError

    def transfer_from(self, owner: str, to: str, value: int) -> bool:
        raise NotImplementedError

    def approve(self, spender: str, value: int) -> bool:
        raise NotImplementedError

    def balance_of(self, account: str) -> int:
        raise NotImplementedError


class Escrow:
    """Time-lock escrow holding the aggregate position."""

    address: str = ""

    def locked(self, account: str) -> LockedBalance:
        raise NotImplementedError

    def create_lock(self, value: int, unlock_time: int) -> None:
        raise NotImplementedError

    def increase_amount(self, value: int) -> None:
        raise NotImplementedError

    def increase_unlock_time(self, unlock_time: int) -> None:
        raise NotImplementedError

    def withdraw(self) -> None:
        raise NotImplementedError


class Gauge:
    """Yield position accepting a single position token."""

    address: str = ""

    def lp_token(self) -> str:
        raise NotImplementedError

    def deposit(self, value: int) -> None:
        raise NotImplementedError

    def withdraw(self, value: int) -> None:
        raise NotImplementedError

    def balance_of(self, account: str) -> int:
        raise NotImplementedError


class Minter:
    """Reward-minting authority for gauges."""

    def mint(self, gauge: str) -> None:
        raise NotImplementedError


class Clock:
    def now(self) -> int:
        raise NotImplementedError


class Transactional:
    """Collaborator whose state can be captured and rolled back."""

    def snapshot(self) -> Any:
        raise NotImplementedError

    def restore(self, snap: Any) -> None:
        raise NotImplementedError
