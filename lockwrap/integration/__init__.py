"""
Collaborator interfaces and in-memory reference implementations

`scenario` builds a full ledger and is imported from its module.
"""

from .interfaces import Asset, Clock, Escrow, Gauge, Minter, Transactional
from .memory import (
    CallReverted,
    InMemoryEscrow,
    InMemoryGauge,
    InMemoryMinter,
    InMemoryToken,
    InMemoryWorld,
    ManualClock,
)

__all__ = [
    "Asset",
    "Clock",
    "Escrow",
    "Gauge",
    "Minter",
    "Transactional",
    "CallReverted",
    "InMemoryEscrow",
    "InMemoryGauge",
    "InMemoryMinter",
    "InMemoryToken",
    "InMemoryWorld",
    "ManualClock",
]
