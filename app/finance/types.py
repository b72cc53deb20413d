"""
Result types returned by finance services.

Types:
    TransferResult: Outcome of a deposit, withdrawal or admin transaction
    InstallmentResult: Outcome of a deferred payment installment
    GrantResult: Outcome of the grant/revoke toggle
    ReclassifySummary: Counters from a ledger reclassification run
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from finance.models import (
        DeferredPayment,
        Fund,
        Transaction,
        TransactionEditPermission,
    )


@dataclass
class TransferResult:
    """
    Fund movement outcome.

    Attributes:
        transaction: Transaction row written for the movement
        admin_fund: Admin fund after the movement (None for withdrawals)
        project_fund: Project fund after the movement (None for admin transactions)
    """

    transaction: Transaction
    admin_fund: Fund | None = None
    project_fund: Fund | None = None


@dataclass
class InstallmentResult:
    """
    Installment outcome.

    The payment update is committed even when linkage_error is set; in
    that case transaction is None and the caller reports a partial success.
    """

    payment: DeferredPayment
    transaction: Transaction | None = None
    linkage_error: str | None = None

    @property
    def is_partial_success(self) -> bool:
        return self.linkage_error is not None


@dataclass
class GrantResult:
    """Grant toggle outcome; action is "granted" or "revoked"."""

    permission: TransactionEditPermission
    action: str


@dataclass
class ReclassifySummary:
    reclassified: int = 0
    skipped: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "reclassified": self.reclassified,
            "skipped": self.skipped,
            "total": self.total,
        }
