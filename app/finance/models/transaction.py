"""
Transaction, ExpenseType and LedgerEntry models.

- Transaction: a money movement (income or expense) with a positive amount
- ExpenseType: named reporting bucket, global or scoped to a project
- LedgerEntry: classification of an expense transaction into a bucket

Ledger entries are for reporting only. They never affect fund balances;
the system keeps single-sided balances, not double-entry books.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.models import BaseModel
from finance.state_machines import LedgerEntryType, TransactionType


class Transaction(BaseModel):
    """
    A record of money moving into or out of a fund.

    Fields:
        date: Business date of the movement
        type: INCOME or EXPENSE; direction is never carried by the amount
        amount: Positive amount in minor units
        description: Free text
        project: Project the transaction belongs to (null for admin-level)
        employee: Optional employee reference
        expense_type: Optional expense type label (free text)
        fund: Fund whose balance this transaction moved, null for pure records
        source_fund: Fund debited on the other side of a deposit
        deferred_payment: Deferred payment this installment belongs to
        created_by: User who created the transaction
        is_archived: Hidden from default listings

    Note:
        Rows are immutable except through TransactionService.update_transaction,
        which requires edit permission and never touches amount or type.
    """

    date = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="Business date of the transaction",
    )
    type = models.CharField(
        max_length=10,
        choices=TransactionType.choices,
        help_text="Income or expense",
    )
    amount = models.PositiveBigIntegerField(
        help_text="Amount in minor units (always positive)",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Free-text description",
    )
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
        help_text="Project this transaction belongs to",
    )
    employee = models.ForeignKey(
        "projects.Employee",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
        help_text="Employee this transaction is attributed to",
    )
    expense_type = models.CharField(
        max_length=200,
        blank=True,
        default="",
        help_text="Expense type label used for classification",
    )
    fund = models.ForeignKey(
        "finance.Fund",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
        help_text="Fund whose balance this transaction moved",
    )
    source_fund = models.ForeignKey(
        "finance.Fund",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="outgoing_transfers",
        help_text="Fund debited on the other side of a deposit",
    )
    deferred_payment = models.ForeignKey(
        "finance.DeferredPayment",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
        help_text="Deferred payment this installment belongs to",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
        help_text="User who created the transaction",
    )
    is_archived = models.BooleanField(
        default=False,
        help_text="Whether the transaction is archived",
    )

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["project", "date"], name="txn_project_date_idx"),
            models.Index(fields=["type", "date"], name="txn_type_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="transaction_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Transaction({self.id}, {self.type}, {self.amount})"

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


class ExpenseType(BaseModel):
    """
    Named reporting bucket for expenses.

    Names are unique within a project, and unique among global types
    (project is null).
    """

    name = models.CharField(
        max_length=200,
        help_text="Expense type name",
    )
    description = models.TextField(
        blank=True,
        default="",
    )
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="expense_types",
        help_text="Project scope; null for a global type",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Inactive types are ignored by classification",
    )

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["name", "project"],
                name="unique_expense_type_per_project",
            ),
            models.UniqueConstraint(
                fields=["name"],
                condition=Q(project__isnull=True),
                name="unique_global_expense_type",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class LedgerEntry(BaseModel):
    """
    Classification record of an expense transaction.

    One entry per transaction; reclassification updates it in place.
    """

    date = models.DateTimeField(
        default=timezone.now,
        help_text="Date of the classified movement",
    )
    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="ledger_entries",
        help_text="Classified transaction",
    )
    expense_type = models.ForeignKey(
        ExpenseType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_entries",
        help_text="Bucket the transaction was mapped to",
    )
    account_name = models.CharField(
        max_length=200,
        help_text="Name of the bucket at classification time",
    )
    amount = models.BigIntegerField(
        help_text="Amount in minor units",
    )
    debit_amount = models.BigIntegerField(default=0)
    credit_amount = models.BigIntegerField(default=0)
    description = models.TextField(blank=True, default="")
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_entries",
    )
    entry_type = models.CharField(
        max_length=30,
        choices=LedgerEntryType.choices,
        default=LedgerEntryType.CLASSIFIED,
        db_index=True,
    )

    class Meta:
        ordering = ["-date", "-id"]
        verbose_name_plural = "ledger entries"
        indexes = [
            models.Index(fields=["entry_type", "date"], name="ledger_entry_type_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.account_name}: {self.amount}"
