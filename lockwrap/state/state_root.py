"""
Deterministic ledger state root (v1).

This is intended for:
- debugging / audit (stable hashes for the same logical state),
- comparing ledgers rebuilt from different operation orders,
- scenario reports.
"""

from __future__ import annotations

from .canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex
from .ledger_state import LedgerState, state_to_dict


STATE_ROOT_VERSION = 1


def compute_state_root(state: LedgerState) -> str:
    """
    Hash the ledger state.

    `state_to_dict` emits sorted entry lists, so two states holding the same
    balances hash equally regardless of insertion order.
    """
    payload = canonical_json_bytes(state_to_dict(state))
    return sha256_hex(domain_sep_bytes("ledger_state_root", version=STATE_ROOT_VERSION) + payload)
