"""
Ledger configuration.

`LedgerConfig` is validated on construction. It can be built directly, loaded
from a YAML mapping (`load_config`) or read from `LOCKWRAP_*` environment
variables (`config_from_env`).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .core.math import MAX_LOCK_TIME, WEEK
from .state.balances import ZERO_ADDRESS


@dataclass(frozen=True)
class LedgerConfig:
    """Static parameters of one wrapper ledger deployment."""

    # Identifier the ledger holds custody under (its "contract address").
    address: str = "0x" + "77" * 20
    name: str = "Locked Wrapper Token"
    symbol: str = "lwTKN"
    decimals: int = 18
    # New locks unlock this many seconds after creation.
    max_lock_time: int = MAX_LOCK_TIME
    # Run invariant checks before every commit.
    check_invariants: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.address, str) or not self.address:
            raise ValueError("address must be a non-empty str")
        if self.address == ZERO_ADDRESS:
            raise ValueError("address must not be the zero address")
        if not self.name or not self.symbol:
            raise ValueError("name and symbol must be non-empty")
        if not isinstance(self.decimals, int) or isinstance(self.decimals, bool) or not 0 <= self.decimals <= 255:
            raise ValueError(f"decimals must be an int in [0, 255]: {self.decimals!r}")
        if not isinstance(self.max_lock_time, int) or isinstance(self.max_lock_time, bool):
            raise ValueError("max_lock_time must be an int")
        if not WEEK <= self.max_lock_time <= MAX_LOCK_TIME:
            raise ValueError(f"max_lock_time must be in [{WEEK}, {MAX_LOCK_TIME}]: {self.max_lock_time}")


_FIELD_NAMES = frozenset(f.name for f in fields(LedgerConfig))


def config_from_mapping(raw: Mapping[str, Any]) -> LedgerConfig:
    unknown = sorted(set(raw) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(unknown)}")
    return LedgerConfig(**dict(raw))


def load_config(path: Path | str) -> LedgerConfig:
    """Load a LedgerConfig from a YAML file (top-level mapping, optional `ledger:` section)."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        return LedgerConfig()
    if not isinstance(obj, Mapping):
        raise TypeError("config YAML must be a mapping")
    section = obj.get("ledger", obj)
    if not isinstance(section, Mapping):
        raise TypeError("config `ledger` section must be a mapping")
    return config_from_mapping(section)


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def config_from_env(base: Optional[LedgerConfig] = None) -> LedgerConfig:
    """Overlay `LOCKWRAP_*` environment variables on *base* (defaults if None)."""
    cfg = base or LedgerConfig()
    return LedgerConfig(
        address=_env_str("LOCKWRAP_ADDRESS", cfg.address),
        name=_env_str("LOCKWRAP_NAME", cfg.name),
        symbol=_env_str("LOCKWRAP_SYMBOL", cfg.symbol),
        decimals=_env_int("LOCKWRAP_DECIMALS", cfg.decimals, lo=0, hi=255),
        max_lock_time=_env_int("LOCKWRAP_MAX_LOCK_TIME", cfg.max_lock_time, lo=WEEK, hi=MAX_LOCK_TIME),
        check_invariants=_env_bool("LOCKWRAP_CHECK_INVARIANTS", cfg.check_invariants),
    )
