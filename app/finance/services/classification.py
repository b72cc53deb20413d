"""
Expense classification into ledger entries.

Every expense transaction gets one LedgerEntry naming the ExpenseType it
was booked to. The entry is reporting data only; balances live on Fund.

Lookup order for a transaction's expense_type label:
    1. Active type with that name scoped to the transaction's project
    2. Active global type (project is null) with that name
    3. The general expense bucket (GENERAL_EXPENSE_TYPE), created on first use
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db.models import Q

from core.exceptions import ConflictError, ValidationError
from core.services import BaseService
from finance.models import ExpenseType, LedgerEntry, Transaction
from finance.services.access import AccessGate
from finance.services.activity import ActivityLogService
from finance.state_machines import LedgerEntryType, TransactionType
from finance.types import ReclassifySummary

logger = logging.getLogger(__name__)


class ExpenseClassificationService(BaseService):
    """Maps expense transactions to expense types."""

    @staticmethod
    def resolve_expense_type(name: str | None, project_id: int | None = None) -> ExpenseType | None:
        if not name:
            return None
        active = ExpenseType.objects.filter(name=name.strip(), is_active=True)
        if project_id is not None:
            match = active.filter(project_id=project_id).first()
            if match is not None:
                return match
        return active.filter(project__isnull=True).first()

    @staticmethod
    def get_or_create_bucket(name: str, description: str = "") -> ExpenseType:
        """Global expense type used as a catch-all bucket."""
        expense_type, created = ExpenseType.objects.get_or_create(
            name=name,
            project=None,
            defaults={"description": description},
        )
        if created:
            logger.info("Created expense bucket", extra={"expense_type": name})
        return expense_type

    @classmethod
    def classify_transaction(cls, transaction: Transaction, force: bool = False) -> LedgerEntry | None:
        """
        Write (or with force, rewrite) the ledger entry of an expense.

        Returns:
            The ledger entry, or None for income transactions
        """
        if transaction.type != TransactionType.EXPENSE:
            return None

        existing = transaction.ledger_entries.order_by("id").first()
        if existing is not None and not force:
            return existing

        general_name = settings.GENERAL_EXPENSE_TYPE
        expense_type = cls.resolve_expense_type(transaction.expense_type, transaction.project_id)
        if expense_type is None:
            expense_type = cls.get_or_create_bucket(
                general_name, description="Expenses without a matching expense type"
            )

        if transaction.deferred_payment_id is not None:
            entry_type = LedgerEntryType.DEFERRED_PAYMENT
        elif expense_type.name == general_name:
            entry_type = LedgerEntryType.GENERAL_EXPENSE
        else:
            entry_type = LedgerEntryType.CLASSIFIED

        values = {
            "date": transaction.date,
            "expense_type": expense_type,
            "account_name": expense_type.name,
            "amount": transaction.amount,
            "debit_amount": transaction.amount,
            "credit_amount": 0,
            "description": transaction.description,
            "project_id": transaction.project_id,
            "entry_type": entry_type,
        }

        if existing is None:
            return LedgerEntry.objects.create(transaction=transaction, **values)

        for field, value in values.items():
            setattr(existing, field, value)
        existing.save()
        return existing

    @classmethod
    def reclassify_all(cls) -> ReclassifySummary:
        """
        Force classification of every expense transaction.

        Income transactions are counted as skipped.
        """
        summary = ReclassifySummary()
        with cls.atomic():
            for transaction in Transaction.objects.order_by("id").iterator():
                summary.total += 1
                if transaction.type == TransactionType.EXPENSE:
                    cls.classify_transaction(transaction, force=True)
                    summary.reclassified += 1
                else:
                    summary.skipped += 1

        cls.get_logger().info("Reclassified transactions", extra=summary.to_dict())
        return summary

    # ==========================================================================
    # Expense types
    # ==========================================================================

    @classmethod
    def create_expense_type(
        cls,
        user,
        name: str,
        description: str = "",
        project_id: int | None = None,
    ) -> ExpenseType:
        """
        Create a global or project-scoped expense type.

        Raises:
            ValidationError: blank name
            Unauthorized: project given and user cannot access it
            ConflictError: name already used in the same scope
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Expense type name is required", error_code="NAME_REQUIRED")
        if project_id is not None:
            AccessGate.require_project_access(user, project_id)

        same_scope = ExpenseType.objects.filter(name=name)
        if project_id is not None:
            same_scope = same_scope.filter(project_id=project_id)
        else:
            same_scope = same_scope.filter(project__isnull=True)
        if same_scope.exists():
            raise ConflictError(
                f"Expense type '{name}' already exists",
                error_code="EXPENSE_TYPE_EXISTS",
                details={"name": name, "project_id": project_id},
            )

        with cls.atomic():
            expense_type = ExpenseType.objects.create(
                name=name, description=description, project_id=project_id
            )
            ActivityLogService.record(
                user,
                "expenseType.create",
                "expense_type",
                expense_type.id,
                f"Created expense type '{name}'",
            )
        return expense_type

    @staticmethod
    def list_expense_types(user, project_id: int | None = None, include_inactive: bool = False):
        """Global types plus the project types the user can see."""
        queryset = ExpenseType.objects.select_related("project")
        project_ids = AccessGate.accessible_project_ids(user)
        if project_ids is not None:
            queryset = queryset.filter(Q(project__isnull=True) | Q(project_id__in=project_ids))
        if project_id is not None:
            queryset = queryset.filter(Q(project__isnull=True) | Q(project_id=project_id))
        if not include_inactive:
            queryset = queryset.filter(is_active=True)
        return queryset
