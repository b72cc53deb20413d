"""
Finance services.

This module provides:
- AccessGate: project and transaction authorization predicates
- FundTransferService: deposits, withdrawals and admin fund transactions
- TransactionService: transaction CRUD on top of the transfer engine
- DeferredPaymentService: deferred payments and installments
- EditPermissionService: transaction edit permission grants
- ExpenseClassificationService: ledger classification of expenses
- ActivityLogService: audit trail

Usage:
    from finance.services import DeferredPaymentService

    result = DeferredPaymentService.pay_installment(payment.id, 30_000, user)
    if result.is_partial_success:
        logger.warning(result.linkage_error)
"""

from finance.services.access import AccessGate
from finance.services.activity import ActivityLogService
from finance.services.classification import ExpenseClassificationService
from finance.services.deferred_payments import DeferredPaymentService
from finance.services.edit_permissions import EditPermissionService
from finance.services.funds import FundTransferService
from finance.services.transactions import TransactionService

__all__ = [
    "AccessGate",
    "ActivityLogService",
    "DeferredPaymentService",
    "EditPermissionService",
    "ExpenseClassificationService",
    "FundTransferService",
    "TransactionService",
]
