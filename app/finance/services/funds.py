"""
Fund Transfer Engine: moves money between the admin fund and project funds.

Operations:
    deposit: admin fund -> project fund, recorded as project income
    withdraw: project fund -> outside, recorded as project expense
    admin_transaction: income to / expense from the admin fund

Every operation runs in one atomic block. Owning rows (User, Project) are
locked before their funds are looked up or created, and fund rows are
locked in ascending id order. Balance checks happen before any write, so a
rejected operation leaves nothing behind.

Usage:
    from finance.services import FundTransferService

    result = FundTransferService.deposit(admin, project_id=7, amount=200_000)
    result.admin_fund.balance    # 800_000
    result.project_fund.balance  # 200_000
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import get_user_model

from core.exceptions import ValidationError
from core.services import BaseService
from finance.exceptions import InsufficientFunds, InvalidAmount, NotFound
from finance.models import Fund, Transaction
from finance.services.access import AccessGate
from finance.services.activity import ActivityLogService
from finance.services.classification import ExpenseClassificationService
from finance.state_machines import FundKind, TransactionType
from finance.types import TransferResult
from projects.models import Employee, Project

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

ADMIN_FUND_NAME = "Admin fund"

PROJECT_FUND_NAME_TEMPLATE = "Project fund: {name}"


class FundTransferService(BaseService):
    """Balance-changing operations on funds."""

    # ==========================================================================
    # Validation and lookups
    # ==========================================================================

    @classmethod
    def validate_amount(cls, amount) -> None:
        if not cls.is_positive_amount(amount):
            raise InvalidAmount(
                "Amount must be a positive integer",
                details={"amount": str(amount)},
            )

    @staticmethod
    def _lock_project(project_id: int) -> Project:
        project = Project.objects.select_for_update().filter(id=project_id).first()
        if project is None:
            raise NotFound(
                f"Project {project_id} not found",
                error_code="PROJECT_NOT_FOUND",
                details={"project_id": project_id},
            )
        return project

    @staticmethod
    def require_employee(employee_id: int | None) -> None:
        """Raise NotFound unless the employee row exists (None is allowed)."""
        if employee_id is None:
            return
        if not Employee.objects.filter(id=employee_id).exists():
            raise NotFound(
                f"Employee {employee_id} not found",
                error_code="EMPLOYEE_NOT_FOUND",
                details={"employee_id": employee_id},
            )

    @staticmethod
    def lock_funds(*fund_ids: int) -> dict[int, Fund]:
        """Lock fund rows in ascending id order."""
        funds = Fund.objects.select_for_update().filter(id__in=fund_ids).order_by("id")
        return {fund.id: fund for fund in funds}

    @staticmethod
    def get_admin_fund() -> Fund | None:
        return Fund.objects.admin_fund()

    @classmethod
    def get_or_create_admin_fund(cls) -> Fund:
        """
        Return the locked admin fund, creating it for the bootstrap admin.

        Must run inside an atomic block. The bootstrap admin's user row is
        locked first so concurrent callers cannot both create a fund.

        Raises:
            NotFound: No active admin user exists
        """
        User = get_user_model()
        owner = User.objects.admins().select_for_update().order_by("id").first()
        if owner is None:
            raise NotFound(
                "No administrator account exists to own the admin fund",
                error_code="ADMIN_NOT_FOUND",
            )

        fund = Fund.objects.admin_funds().select_for_update().order_by("id").first()
        if fund is None:
            fund = Fund.objects.create(kind=FundKind.ADMIN, owner=owner, name=ADMIN_FUND_NAME)
            logger.info(
                "Created admin fund",
                extra={"fund_id": fund.id, "owner_id": owner.id},
            )
        return fund

    @classmethod
    def get_or_create_project_fund(cls, project: Project, lock: bool = True) -> Fund:
        """
        Return the project's fund, creating it with a zero balance.

        Must run inside an atomic block with the project row already locked.
        """
        queryset = Fund.objects.filter(project=project)
        if lock:
            queryset = queryset.select_for_update()
        fund = queryset.first()
        if fund is None:
            fund = Fund.objects.create(
                kind=FundKind.PROJECT,
                project=project,
                name=PROJECT_FUND_NAME_TEMPLATE.format(name=project.name),
            )
            logger.info(
                "Created project fund",
                extra={"fund_id": fund.id, "project_id": project.id},
            )
        return fund

    @staticmethod
    def list_funds(user):
        """Funds visible to the user: everything for admins, assigned projects otherwise."""
        queryset = Fund.objects.select_related("project", "owner")
        project_ids = AccessGate.accessible_project_ids(user)
        if project_ids is None:
            return queryset
        return queryset.filter(kind=FundKind.PROJECT, project_id__in=project_ids)

    # ==========================================================================
    # Operations
    # ==========================================================================

    @classmethod
    def deposit(
        cls,
        user,
        project_id: int,
        amount: int,
        description: str = "",
        date=None,
    ) -> TransferResult:
        """
        Move money from the admin fund into a project fund.

        Raises:
            InvalidAmount: amount is not a positive integer
            Unauthorized: user cannot access the project
            NotFound: project does not exist
            InsufficientFunds: admin fund missing or below amount
        """
        cls.validate_amount(amount)
        AccessGate.require_project_access(user, project_id)

        with cls.atomic():
            project = cls._lock_project(project_id)

            admin_fund = cls.get_admin_fund()
            if admin_fund is None:
                raise InsufficientFunds(
                    required=amount,
                    available=0,
                    message="The admin fund does not exist yet",
                )
            project_fund = cls.get_or_create_project_fund(project, lock=False)

            funds = cls.lock_funds(admin_fund.id, project_fund.id)
            admin_fund = funds[admin_fund.id]
            project_fund = funds[project_fund.id]

            if not admin_fund.can_cover(amount):
                raise InsufficientFunds(admin_fund, required=amount)

            admin_fund.balance -= amount
            admin_fund.save(update_fields=["balance"])
            project_fund.balance += amount
            project_fund.save(update_fields=["balance"])

            txn = Transaction.objects.create(
                type=TransactionType.INCOME,
                amount=amount,
                description=description or f"Deposit to {project.name}",
                project=project,
                fund=project_fund,
                source_fund=admin_fund,
                created_by=user,
                **({"date": date} if date else {}),
            )
            ActivityLogService.record(
                user,
                "fund.deposit",
                "transaction",
                txn.id,
                f"Deposited {amount} from '{admin_fund.name}' to '{project_fund.name}'",
            )

        logger.info(
            "Deposit completed",
            extra={
                "transaction_id": txn.id,
                "project_id": project.id,
                "amount": amount,
                "admin_balance": admin_fund.balance,
                "project_balance": project_fund.balance,
            },
        )
        return TransferResult(transaction=txn, admin_fund=admin_fund, project_fund=project_fund)

    @classmethod
    def withdraw(
        cls,
        user,
        project_id: int,
        amount: int,
        description: str = "",
        expense_type: str | None = None,
        employee_id: int | None = None,
        date=None,
    ) -> TransferResult:
        """
        Spend money from a project fund.

        The expense transaction is classified into a ledger entry in the
        same atomic block.

        Raises:
            InvalidAmount, Unauthorized, NotFound, InsufficientFunds
        """
        cls.validate_amount(amount)
        AccessGate.require_project_access(user, project_id)

        with cls.atomic():
            project = cls._lock_project(project_id)
            cls.require_employee(employee_id)
            project_fund = cls.get_or_create_project_fund(project)

            if not project_fund.can_cover(amount):
                raise InsufficientFunds(project_fund, required=amount)

            project_fund.balance -= amount
            project_fund.save(update_fields=["balance"])

            txn = Transaction.objects.create(
                type=TransactionType.EXPENSE,
                amount=amount,
                description=description or f"Expense for {project.name}",
                project=project,
                employee_id=employee_id,
                expense_type=expense_type or settings.GENERAL_EXPENSE_TYPE,
                fund=project_fund,
                created_by=user,
                **({"date": date} if date else {}),
            )
            ExpenseClassificationService.classify_transaction(txn)
            ActivityLogService.record(
                user,
                "fund.withdraw",
                "transaction",
                txn.id,
                f"Withdrew {amount} from '{project_fund.name}'",
            )

        logger.info(
            "Withdrawal completed",
            extra={
                "transaction_id": txn.id,
                "project_id": project.id,
                "amount": amount,
                "project_balance": project_fund.balance,
            },
        )
        return TransferResult(transaction=txn, project_fund=project_fund)

    @classmethod
    def admin_transaction(
        cls,
        user,
        type: str,
        amount: int,
        description: str = "",
        expense_type: str | None = None,
        date=None,
    ) -> TransferResult:
        """
        Income to, or expense from, the admin fund.

        Admin role only. Income creates the admin fund on first use.

        Raises:
            Unauthorized, InvalidAmount, ValidationError (unknown type),
            NotFound (no admin user), InsufficientFunds
        """
        AccessGate.require_admin(user, "admin fund transactions")
        cls.validate_amount(amount)
        if type not in TransactionType.values:
            raise ValidationError(
                f"Unknown transaction type '{type}'",
                error_code="INVALID_TRANSACTION_TYPE",
                details={"type": type, "allowed": list(TransactionType.values)},
            )

        with cls.atomic():
            admin_fund = cls.get_or_create_admin_fund()

            if type == TransactionType.EXPENSE:
                if not admin_fund.can_cover(amount):
                    raise InsufficientFunds(admin_fund, required=amount)
                admin_fund.balance -= amount
            else:
                admin_fund.balance += amount
            admin_fund.save(update_fields=["balance"])

            txn = Transaction.objects.create(
                type=type,
                amount=amount,
                description=description,
                project=None,
                expense_type=(expense_type or "") if type == TransactionType.EXPENSE else "",
                fund=admin_fund,
                created_by=user,
                **({"date": date} if date else {}),
            )
            if type == TransactionType.EXPENSE:
                ExpenseClassificationService.classify_transaction(txn)
            ActivityLogService.record(
                user,
                "fund.adminTransaction",
                "transaction",
                txn.id,
                f"Admin {type} of {amount}",
            )

        logger.info(
            "Admin fund transaction completed",
            extra={
                "transaction_id": txn.id,
                "type": type,
                "amount": amount,
                "admin_balance": admin_fund.balance,
            },
        )
        return TransferResult(transaction=txn, admin_fund=admin_fund)
