"""Checked uint256 arithmetic for the wrapper ledger.

Every function operates on plain Python ints and fails instead of wrapping.
"""

from __future__ import annotations

from .errors import ArithmeticOverflow, InvalidAmount

MAX_UINT256: int = 2**256 - 1

# Lock durations (seconds)
DAY: int = 86_400
WEEK: int = 7 * DAY
YEAR: int = 365 * DAY
MAX_LOCK_TIME: int = 4 * YEAR


def require_uint(value: object, *, name: str = "value") -> int:
    """Return *value* if it is an int in ``[0, MAX_UINT256]``."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmount(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > MAX_UINT256:
        raise InvalidAmount(f"{name} out of uint256 range: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    out = a + b
    if out > MAX_UINT256:
        raise ArithmeticOverflow(f"uint256 overflow: {a} + {b}")
    return out


def checked_sub(a: int, b: int, *, error: type[Exception]) -> int:
    """``a - b``; raises *error* (a ledger error class) on underflow."""
    if b > a:
        raise error(f"uint256 underflow: {a} - {b}")
    return a - b


def week_floor(ts: int) -> int:
    """Round a timestamp down to the start of its week."""
    return (ts // WEEK) * WEEK
