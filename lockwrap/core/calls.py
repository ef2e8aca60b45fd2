"""Guarded collaborator calls.

Collaborator results are authoritative but untrusted: a rejected call (an
exception, or a False return from an asset) becomes the ledger's own error,
chained to the original cause.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from .errors import EscrowCallFailed, LedgerError, TransferFailed

T = TypeVar("T")


def asset_call(label: str, fn: Callable[..., Any], *args: Any) -> None:
    """Run an asset call; a False return or any exception raises TransferFailed."""
    try:
        ok = fn(*args)
    except LedgerError:
        raise
    except Exception as exc:
        raise TransferFailed(f"{label} reverted: {exc}") from exc
    if ok is False:
        raise TransferFailed(f"{label} returned false")


def external_call(label: str, fn: Callable[..., T], *args: Any) -> T:
    """Run a gauge/minter call or view; any exception raises TransferFailed."""
    try:
        return fn(*args)
    except LedgerError:
        raise
    except Exception as exc:
        raise TransferFailed(f"{label} reverted: {exc}") from exc


def escrow_call(label: str, fn: Callable[..., T], *args: Any) -> T:
    """Run an escrow call; any exception raises EscrowCallFailed."""
    try:
        return fn(*args)
    except LedgerError:
        raise
    except Exception as exc:
        raise EscrowCallFailed(f"{label} reverted: {exc}") from exc
