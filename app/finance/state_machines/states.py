"""
State and choice enums for finance models.

State Machines Overview:

DeferredPayment:
    pending → partial → completed
    pending → completed (single installment covering the total)
    partial → partial (further installments)

TransactionEditPermission:
    active → revoked (explicit revoke or toggle)
    active → expired (periodic sweep)
    Both targets are terminal; re-enabling editing needs a new grant.
"""

from django.db import models


class FundKind(models.TextChoices):
    """
    Owner category of a fund.

    ADMIN funds belong to a user (the bootstrap admin); PROJECT funds
    belong to a project.
    """

    ADMIN = "admin", "Admin"
    PROJECT = "project", "Project"


class TransactionType(models.TextChoices):
    """Direction of a transaction; the amount itself is always positive."""

    INCOME = "income", "Income"
    EXPENSE = "expense", "Expense"


class DeferredPaymentStatus(models.TextChoices):
    """
    States for the DeferredPayment lifecycle.

    COMPLETED means nothing remains to be paid (remaining_amount <= 0).
    """

    PENDING = "pending", "Pending"
    PARTIAL = "partial", "Partially Paid"
    COMPLETED = "completed", "Completed"


class EditPermissionStatus(models.TextChoices):
    """States for a TransactionEditPermission grant."""

    ACTIVE = "active", "Active"
    REVOKED = "revoked", "Revoked"
    EXPIRED = "expired", "Expired"


class LedgerEntryType(models.TextChoices):
    """
    How a ledger entry came to exist.

    Values:
        CLASSIFIED: Expense mapped to a named expense type
        GENERAL_EXPENSE: Expense without a matching type, booked to the general bucket
        DEFERRED_PAYMENT: Installment of a deferred payment
        MANUAL: Entered by hand
    """

    CLASSIFIED = "classified", "Classified"
    GENERAL_EXPENSE = "general_expense", "General Expense"
    DEFERRED_PAYMENT = "deferred_payment", "Deferred Payment"
    MANUAL = "manual", "Manual"


class OverpaymentPolicy(models.TextChoices):
    """
    What pay_installment does with an amount above what is still owed.

    REJECT refuses the installment; ALLOW records it and lets
    remaining_amount go negative.
    """

    REJECT = "reject", "Reject"
    ALLOW = "allow", "Allow"
