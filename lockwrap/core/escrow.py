"""
Escrow coordinator: ties wrapper supply to the single aggregate escrow lock.

Lock phases cycle NO_LOCK -> LOCK_ACTIVE -> LOCK_EXPIRED -> NO_LOCK. Deposits
open the lock or grow it (never extending its unlock time); a withdraw
releases the whole position once it has matured, for every holder at once.
"""

from __future__ import annotations

import logging

from ..integration.interfaces import Asset, Clock, Escrow
from .calls import asset_call, escrow_call
from .math import MAX_LOCK_TIME, checked_add, require_uint
from .token import TokenLedger
from .types import LockedBalance, LockPhase

logger = logging.getLogger(__name__)


def lock_phase_at(lock: LockedBalance, now: int) -> LockPhase:
    if not lock.exists:
        return LockPhase.NO_LOCK
    if now < lock.end:
        return LockPhase.LOCK_ACTIVE
    return LockPhase.LOCK_EXPIRED


class EscrowCoordinator:
    def __init__(
        self,
        *,
        address: str,
        token: TokenLedger,
        asset: Asset,
        escrow: Escrow,
        clock: Clock,
        max_lock_time: int = MAX_LOCK_TIME,
    ) -> None:
        self.address = address
        self._token = token
        self._asset = asset
        self._escrow = escrow
        self._clock = clock
        self.max_lock_time = max_lock_time

    def locked(self) -> LockedBalance:
        return escrow_call("escrow.locked", self._escrow.locked, self.address)

    def lock_phase(self) -> LockPhase:
        return lock_phase_at(self.locked(), self._clock.now())

    def deposit(self, user: str, value: int) -> None:
        """Pull *value* of the asset from *user*, lock it, and mint wrapper tokens 1:1."""
        value = require_uint(value)
        asset_call("asset.transfer_from", self._asset.transfer_from, user, self.address, value)

        lock = self.locked()
        asset_call("asset.approve", self._asset.approve, self._escrow.address, value)
        if not lock.exists:
            unlock_time = checked_add(self._clock.now(), self.max_lock_time)
            escrow_call("escrow.create_lock", self._escrow.create_lock, value, unlock_time)
            logger.info("created lock amount=%d unlock_time=%d", value, unlock_time)
        else:
            escrow_call("escrow.increase_amount", self._escrow.increase_amount, value)
            logger.debug("increased lock by %d (was %d)", value, lock.amount)

        self._token.mint(user, value)

    def withdraw(self, user: str) -> int:
        """Burn *user*'s whole balance and pay it out in the underlying asset.

        A matured lock is released first. An immature lock is left alone and the
        payout still runs, so it fails unless enough free asset is held.
        """
        lock = self.locked()
        if lock.amount > 0 and self._clock.now() >= lock.end:
            escrow_call("escrow.withdraw", self._escrow.withdraw)
            logger.info("released matured lock amount=%d end=%d", lock.amount, lock.end)

        value = self._token.balance_of(user)
        self._token.burn(user, value)
        asset_call("asset.transfer", self._asset.transfer, user, value)
        return value
