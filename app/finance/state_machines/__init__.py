"""
State machine enums for finance models.
"""

from finance.state_machines.states import (
    DeferredPaymentStatus,
    EditPermissionStatus,
    FundKind,
    LedgerEntryType,
    OverpaymentPolicy,
    TransactionType,
)

__all__ = [
    "DeferredPaymentStatus",
    "EditPermissionStatus",
    "FundKind",
    "LedgerEntryType",
    "OverpaymentPolicy",
    "TransactionType",
]
