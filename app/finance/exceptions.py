"""
Finance-specific exceptions for the ledger core.

Exception Hierarchy:
    FinanceError (base for finance domain)
    └── InsufficientFunds - Balance check failed before a debit

    NotFound - Entity lookup failures (inherits NotFoundError)
    NotFoundOrInactive - Missing or already inactive grant (inherits NotFoundError)
    InvalidAmount - Non-positive or non-integer amount (inherits ValidationError)
    InvalidTarget - Grant without exactly one target (inherits ValidationError)
    OverpaymentRejected - Installment above remaining amount (inherits ValidationError)
    Unauthorized - Role or project scope denial (inherits PermissionDeniedError)
    FundNotEmpty - Deleting a project whose fund holds money (inherits ConflictError)
    LockAcquisitionError - Distributed lock contention (inherits ConflictError)

Usage:
    from finance.exceptions import InsufficientFunds

    if not fund.can_cover(amount):
        raise InsufficientFunds(fund, required=amount)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any


class FinanceError(BaseApplicationError):
    """Base exception for finance operations that are not input or auth errors."""

    default_error_code: str = "FINANCE_ERROR"


class InsufficientFunds(FinanceError):
    """
    Raised when a fund cannot cover a debit.

    The message names the fund and its available balance so the caller
    can show it without a second request.

    Example:
        raise InsufficientFunds(project_fund, required=250_000)
        # [INSUFFICIENT_FUNDS] Insufficient balance in 'Project fund: Tower'
        #   (available 200000, required 250000)
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"

    def __init__(
        self,
        fund=None,
        required: int = 0,
        available: int | None = None,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        fund_name = fund.name if fund is not None else "admin fund"
        if available is None:
            available = fund.balance if fund is not None else 0
        self.fund_id = fund.id if fund is not None else None
        self.fund_name = fund_name
        self.required = required
        self.available = available
        details = {
            **(details or {}),
            "fund_id": self.fund_id,
            "fund_name": fund_name,
            "required": required,
            "available": available,
        }
        super().__init__(
            message
            or f"Insufficient balance in '{fund_name}' (available {available}, required {required})",
            details=details,
        )


class NotFound(NotFoundError):
    """Raised when a project, fund, transaction or payment does not exist."""


class NotFoundOrInactive(NotFoundError):
    """Raised when revoking a grant that does not exist or is no longer active."""

    default_error_code: str = "NOT_FOUND_OR_INACTIVE"


class InvalidAmount(ValidationError):
    """Raised when an amount is not a positive integer."""

    default_error_code: str = "INVALID_AMOUNT"


class InvalidTarget(ValidationError):
    """Raised when an edit permission grant names zero or two targets."""

    default_error_code: str = "INVALID_TARGET"


class OverpaymentRejected(ValidationError):
    """
    Raised when an installment exceeds what is still owed.

    Only raised under the "reject" over-payment policy.
    """

    default_error_code: str = "OVERPAYMENT_REJECTED"


class Unauthorized(PermissionDeniedError):
    """Raised when the caller's role or project scope does not allow the operation."""

    default_error_code: str = "UNAUTHORIZED"


class FundNotEmpty(ConflictError):
    """Raised when deleting a project whose fund balance is not zero."""

    default_error_code: str = "FUND_NOT_EMPTY"


class LockAcquisitionError(ConflictError):
    """Raised when a distributed lock is held by another worker."""

    default_error_code: str = "LOCK_ACQUISITION_FAILED"


__all__ = [
    "FinanceError",
    "FundNotEmpty",
    "InsufficientFunds",
    "InvalidAmount",
    "InvalidTarget",
    "LockAcquisitionError",
    "NotFound",
    "NotFoundOrInactive",
    "OverpaymentRejected",
    "Unauthorized",
]
