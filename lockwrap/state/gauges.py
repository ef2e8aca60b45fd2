"""
Gauge sub-ledger storage.

Entries are grouped per gauge so that the per-gauge total, which custody
checks compare against the gauge's reported position, is kept alongside the
entries instead of being recomputed. Sub-balances never count toward the
wrapper token's total supply.
"""

from __future__ import annotations

from typing import Dict, Iterator, Tuple

from .balances import Address, Amount

GaugeId = str


class GaugeBalanceTable:
    """(gauge, user) -> position-token amount routed through that gauge."""

    def __init__(self) -> None:
        self._by_gauge: Dict[GaugeId, Dict[Address, Amount]] = {}
        self._totals: Dict[GaugeId, Amount] = {}

    def get(self, gauge: GaugeId, user: Address) -> Amount:
        return self._by_gauge.get(gauge, {}).get(user, 0)

    def set(self, gauge: GaugeId, user: Address, amount: Amount) -> None:
        """Overwrite one sub-balance; a zero amount removes the entry."""
        if amount < 0:
            raise ValueError(f"sub-balance of {user} in {gauge} cannot be negative: {amount}")
        users = self._by_gauge.setdefault(gauge, {})
        total = self._totals.get(gauge, 0) - users.pop(user, 0) + amount
        if amount:
            users[user] = amount
        if users:
            self._totals[gauge] = total
        else:
            del self._by_gauge[gauge]
            self._totals.pop(gauge, None)

    def total_for_gauge(self, gauge: GaugeId) -> Amount:
        return self._totals.get(gauge, 0)

    def gauges(self) -> list[GaugeId]:
        return sorted(self._by_gauge)

    def entries(self) -> Iterator[Tuple[GaugeId, Address, Amount]]:
        """Every non-zero entry, ordered by gauge then user."""
        for gauge in sorted(self._by_gauge):
            users = self._by_gauge[gauge]
            for user in sorted(users):
                yield gauge, user, users[user]

    def get_all_balances(self) -> Dict[Tuple[GaugeId, Address], Amount]:
        return {(g, u): a for g, u, a in self.entries()}

    def verify_non_negative(self) -> bool:
        return all(a >= 0 for _, _, a in self.entries())

    def copy(self) -> GaugeBalanceTable:
        dup = GaugeBalanceTable()
        dup._by_gauge = {g: dict(users) for g, users in self._by_gauge.items()}
        dup._totals = dict(self._totals)
        return dup

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GaugeBalanceTable):
            return NotImplemented
        return self._by_gauge == other._by_gauge

    def __repr__(self) -> str:
        return f"GaugeBalanceTable({len(self._by_gauge)} gauges)"
