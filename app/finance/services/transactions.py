"""
Transaction service: create, edit and delete transactions.

Creation always goes through the Fund Transfer Engine so that a
transaction row never exists without its balance effect. Edits are limited
to descriptive fields and need an effective edit permission; deletion
reverses the balance effect and is limited to admins and the creator.
"""

from __future__ import annotations

import logging

from core.exceptions import ValidationError
from core.services import BaseService
from finance.exceptions import InsufficientFunds, NotFound, Unauthorized
from finance.models import Transaction
from finance.services.access import AccessGate
from finance.services.activity import ActivityLogService
from finance.services.classification import ExpenseClassificationService
from finance.services.funds import FundTransferService
from finance.state_machines import TransactionType
from finance.types import TransferResult

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("description", "date", "expense_type", "employee_id", "is_archived")


class TransactionService(BaseService):
    """Entry point for transaction CRUD from the API."""

    @classmethod
    def create_transaction(
        cls,
        user,
        type: str,
        amount: int,
        project_id: int | None = None,
        description: str = "",
        expense_type: str | None = None,
        employee_id: int | None = None,
        date=None,
    ) -> TransferResult:
        """
        Dispatch to the matching fund operation.

            project income  -> FundTransferService.deposit
            project expense -> FundTransferService.withdraw
            no project      -> FundTransferService.admin_transaction
        """
        if project_id is None:
            return FundTransferService.admin_transaction(
                user, type, amount, description=description, expense_type=expense_type, date=date
            )
        if type == TransactionType.INCOME:
            return FundTransferService.deposit(
                user, project_id, amount, description=description, date=date
            )
        if type == TransactionType.EXPENSE:
            return FundTransferService.withdraw(
                user,
                project_id,
                amount,
                description=description,
                expense_type=expense_type,
                employee_id=employee_id,
                date=date,
            )
        raise ValidationError(
            f"Unknown transaction type '{type}'",
            error_code="INVALID_TRANSACTION_TYPE",
            details={"type": type},
        )

    @staticmethod
    def get_transaction(user, transaction_id: int) -> Transaction:
        txn = (
            Transaction.objects.select_related("project", "fund", "created_by")
            .filter(id=transaction_id)
            .first()
        )
        if txn is None:
            raise NotFound(
                f"Transaction {transaction_id} not found",
                error_code="TRANSACTION_NOT_FOUND",
                details={"transaction_id": transaction_id},
            )
        if not AccessGate.can_access_transaction(user, transaction_id):
            raise Unauthorized(
                "You do not have access to this transaction",
                details={"transaction_id": transaction_id},
            )
        return txn

    @staticmethod
    def list_transactions(
        user,
        project_id: int | None = None,
        type: str | None = None,
        include_archived: bool = False,
    ):
        queryset = Transaction.objects.select_related("project", "created_by")
        queryset = AccessGate.scope_by_project(user, queryset)
        if project_id is not None:
            queryset = queryset.filter(project_id=project_id)
        if type:
            queryset = queryset.filter(type=type)
        if not include_archived:
            queryset = queryset.filter(is_archived=False)
        return queryset

    @classmethod
    def update_transaction(cls, user, transaction_id: int, **changes) -> Transaction:
        """
        Edit descriptive fields of a transaction.

        amount, type, project and fund links never change after creation;
        asking to change them is a ValidationError.

        Raises:
            NotFound, Unauthorized (no access or no edit permission),
            ValidationError
        """
        immutable = sorted(set(changes) - set(EDITABLE_FIELDS))
        if immutable:
            raise ValidationError(
                "These transaction fields cannot be changed",
                error_code="IMMUTABLE_FIELDS",
                details={"fields": immutable},
            )

        with cls.atomic():
            txn = Transaction.objects.select_for_update().filter(id=transaction_id).first()
            if txn is None:
                raise NotFound(
                    f"Transaction {transaction_id} not found",
                    error_code="TRANSACTION_NOT_FOUND",
                    details={"transaction_id": transaction_id},
                )
            if not AccessGate.can_access_transaction(user, transaction_id):
                raise Unauthorized(
                    "You do not have access to this transaction",
                    details={"transaction_id": transaction_id},
                )
            if not AccessGate.can_edit_transactions(user, txn.project_id):
                raise Unauthorized(
                    "Editing transactions requires an active edit permission",
                    error_code="EDIT_PERMISSION_REQUIRED",
                    details={"transaction_id": transaction_id},
                )
            if "employee_id" in changes:
                FundTransferService.require_employee(changes["employee_id"])

            for field, value in changes.items():
                setattr(txn, field, value)
            txn.save(update_fields=[*changes, "updated_at"])

            if txn.is_expense and {"expense_type", "date", "description"} & set(changes):
                ExpenseClassificationService.classify_transaction(txn, force=True)

            ActivityLogService.record(
                user,
                "transaction.update",
                "transaction",
                txn.id,
                f"Updated fields: {', '.join(sorted(changes))}",
            )

        return txn

    @classmethod
    def delete_transaction(cls, user, transaction_id: int) -> None:
        """
        Hard-delete a transaction and reverse its balance effect.

        Income reversal takes the amount back out of the receiving fund
        (and returns it to the source fund for deposits); expense reversal
        puts it back. Transactions without a fund (deferred payment
        installments) carry no balance effect.

        Raises:
            NotFound, Unauthorized, InsufficientFunds
        """
        with cls.atomic():
            txn = Transaction.objects.select_for_update().filter(id=transaction_id).first()
            if txn is None:
                raise NotFound(
                    f"Transaction {transaction_id} not found",
                    error_code="TRANSACTION_NOT_FOUND",
                    details={"transaction_id": transaction_id},
                )
            if not AccessGate.can_access_transaction(
                user, transaction_id
            ) or not AccessGate.can_delete_transaction(user, txn):
                raise Unauthorized(
                    "Only administrators or the creator may delete this transaction",
                    details={"transaction_id": transaction_id},
                )

            fund_ids = [fund_id for fund_id in (txn.fund_id, txn.source_fund_id) if fund_id]
            funds = FundTransferService.lock_funds(*fund_ids) if fund_ids else {}
            fund = funds.get(txn.fund_id)
            source_fund = funds.get(txn.source_fund_id)

            if fund is not None:
                if txn.type == TransactionType.INCOME:
                    if not fund.can_cover(txn.amount):
                        raise InsufficientFunds(fund, required=txn.amount)
                    fund.balance -= txn.amount
                    if source_fund is not None:
                        source_fund.balance += txn.amount
                        source_fund.save(update_fields=["balance"])
                else:
                    fund.balance += txn.amount
                fund.save(update_fields=["balance"])

            details = f"Deleted {txn.type} of {txn.amount}"
            txn.delete()
            ActivityLogService.record(user, "transaction.delete", "transaction", transaction_id, details)

        logger.info(
            "Transaction deleted",
            extra={"transaction_id": transaction_id, "user_id": getattr(user, "id", None)},
        )
