"""Exception types for the wrapper ledger.

Every error aborts the triggering operation as a whole. ``code`` is the stable
rejection string reported by ``WrapperLedger.execute()``.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all ledger rejections."""

    code = "ledger_error"


class InsufficientBalance(LedgerError):
    """Raised when a balance (token or gauge sub-balance) would underflow."""

    code = "insufficient_balance"


class InsufficientAllowance(LedgerError):
    """Raised when a spender's allowance would underflow."""

    code = "insufficient_allowance"


class InvalidRecipient(LedgerError):
    """Raised when mint or burn targets the null account."""

    code = "invalid_recipient"


class TransferFailed(LedgerError):
    """Raised when an asset, gauge or minter call is rejected."""

    code = "transfer_failed"


class EscrowCallFailed(LedgerError):
    """Raised when the escrow rejects a lock operation."""

    code = "escrow_call_failed"


class ArithmeticOverflow(LedgerError):
    """Raised when a uint256 result would exceed its bound."""

    code = "overflow"


class InvalidAmount(LedgerError, ValueError):
    """Raised when an amount is not an int in the uint256 domain."""

    code = "invalid_amount"


class LedgerInvariantError(LedgerError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
