"""
Finance models.

Models:
    Fund: Admin or project balance
    Transaction: Income or expense movement
    ExpenseType: Reporting bucket for expenses
    LedgerEntry: Classification of an expense transaction
    DeferredPayment: Obligation repaid in installments
    TransactionEditPermission: Time-boxed transaction edit grant
    ActivityLog: Audit trail
"""

from finance.models.activity_log import ActivityLog
from finance.models.deferred_payment import DeferredPayment
from finance.models.edit_permission import TransactionEditPermission
from finance.models.fund import Fund, FundQuerySet
from finance.models.transaction import ExpenseType, LedgerEntry, Transaction

__all__ = [
    "ActivityLog",
    "DeferredPayment",
    "ExpenseType",
    "Fund",
    "FundQuerySet",
    "LedgerEntry",
    "Transaction",
    "TransactionEditPermission",
]
