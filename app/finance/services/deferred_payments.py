"""
Deferred Payment Installment Engine.

An installment is two steps:
    1. Update the payment (paid/remaining/status) under a row lock and
       commit it.
    2. Record a linked expense transaction and classify it.

Step 2 is best-effort. If it fails the installment still counts and the
caller gets an InstallmentResult with linkage_error set, which the API
reports as a partial success (HTTP 207).

Over-payment (an installment above remaining_amount) follows
settings.DEFERRED_PAYMENT_OVERPAYMENT_POLICY:
    reject: OverpaymentRejected, nothing written
    allow:  recorded, remaining_amount goes negative, status stays completed
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Q

from core.exceptions import BaseApplicationError, ValidationError
from core.services import BaseService
from finance.exceptions import InvalidAmount, NotFound, OverpaymentRejected
from finance.models import DeferredPayment, Transaction
from finance.services.access import AccessGate
from finance.services.activity import ActivityLogService
from finance.services.classification import ExpenseClassificationService
from finance.state_machines import OverpaymentPolicy, TransactionType
from finance.types import InstallmentResult
from projects.models import Project

logger = logging.getLogger(__name__)


class DeferredPaymentService(BaseService):
    """Create, pay and delete deferred payments."""

    @staticmethod
    def _not_found(payment_id: int) -> NotFound:
        return NotFound(
            f"Deferred payment {payment_id} not found",
            error_code="DEFERRED_PAYMENT_NOT_FOUND",
            details={"payment_id": payment_id},
        )

    @staticmethod
    def overpayment_policy() -> str:
        return getattr(settings, "DEFERRED_PAYMENT_OVERPAYMENT_POLICY", OverpaymentPolicy.REJECT)

    # ==========================================================================
    # Queries
    # ==========================================================================

    @staticmethod
    def list_deferred_payments(user, status: str | None = None):
        """Admins see everything; others see their projects' payments and their own."""
        queryset = DeferredPayment.objects.select_related("project", "user")
        project_ids = AccessGate.accessible_project_ids(user)
        if project_ids is not None:
            queryset = queryset.filter(Q(project_id__in=project_ids) | Q(user=user))
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    @classmethod
    def get_deferred_payment(cls, user, payment_id: int) -> DeferredPayment:
        payment = cls.list_deferred_payments(user).filter(id=payment_id).first()
        if payment is None:
            raise cls._not_found(payment_id)
        return payment

    @classmethod
    def get_payment_history(cls, payment_id: int, user=None):
        """Linked installment transactions, oldest first."""
        if user is not None:
            payment = cls.get_deferred_payment(user, payment_id)
        else:
            payment = DeferredPayment.objects.filter(id=payment_id).first()
            if payment is None:
                raise cls._not_found(payment_id)
        return payment.transactions.order_by("date", "id")

    # ==========================================================================
    # Mutations
    # ==========================================================================

    @classmethod
    def create_deferred_payment(
        cls,
        user,
        beneficiary_name: str,
        total_amount: int,
        project_id: int | None = None,
        description: str = "",
        due_date=None,
        installments: int = 1,
        payment_frequency: str = "monthly",
        notes: str = "",
    ) -> DeferredPayment:
        """
        Record a new obligation in PENDING state.

        Raises:
            InvalidAmount, ValidationError (blank beneficiary),
            Unauthorized, NotFound (project)
        """
        if not cls.is_positive_amount(total_amount):
            raise InvalidAmount(
                "Total amount must be a positive integer",
                details={"total_amount": str(total_amount)},
            )
        if not beneficiary_name or not beneficiary_name.strip():
            raise ValidationError(
                "Beneficiary name is required",
                error_code="BENEFICIARY_REQUIRED",
            )
        if project_id is not None:
            AccessGate.require_project_access(user, project_id)
            if not Project.objects.filter(id=project_id).exists():
                raise NotFound(
                    f"Project {project_id} not found",
                    error_code="PROJECT_NOT_FOUND",
                    details={"project_id": project_id},
                )

        with cls.atomic():
            payment = DeferredPayment.objects.create(
                beneficiary_name=beneficiary_name.strip(),
                total_amount=total_amount,
                paid_amount=0,
                remaining_amount=total_amount,
                project_id=project_id,
                user=user,
                description=description,
                due_date=due_date,
                installments=installments,
                payment_frequency=payment_frequency,
                notes=notes,
            )
            ActivityLogService.record(
                user,
                "deferredPayment.create",
                "deferred_payment",
                payment.id,
                f"Deferred payment of {total_amount} to {payment.beneficiary_name}",
            )

        logger.info(
            "Deferred payment created",
            extra={"payment_id": payment.id, "total_amount": total_amount},
        )
        return payment

    @classmethod
    def pay_installment(cls, payment_id: int, amount: int, user) -> InstallmentResult:
        """
        Pay one installment.

        Returns:
            InstallmentResult; transaction is None and linkage_error is set
            when the linked transaction could not be recorded

        Raises:
            NotFound, InvalidAmount, Unauthorized, OverpaymentRejected
        """
        with cls.atomic():
            payment = DeferredPayment.objects.select_for_update().filter(id=payment_id).first()
            if payment is None:
                raise cls._not_found(payment_id)
            if not cls.is_positive_amount(amount):
                raise InvalidAmount(
                    "Installment amount must be a positive integer",
                    details={"amount": str(amount)},
                )
            if payment.project_id is not None:
                AccessGate.require_project_access(user, payment.project_id)

            if (
                cls.overpayment_policy() == OverpaymentPolicy.REJECT
                and amount > payment.remaining_amount
            ):
                raise OverpaymentRejected(
                    "Installment exceeds the remaining amount",
                    details={
                        "payment_id": payment.id,
                        "amount": amount,
                        "remaining_amount": payment.remaining_amount,
                    },
                )

            payment.apply_installment(amount)
            payment.save()
            ActivityLogService.record(
                user,
                "deferredPayment.pay",
                "deferred_payment",
                payment.id,
                f"Installment of {amount} to {payment.beneficiary_name}, "
                f"remaining {payment.remaining_amount}",
            )

        logger.info(
            "Installment recorded",
            extra={
                "payment_id": payment.id,
                "amount": amount,
                "remaining_amount": payment.remaining_amount,
                "status": payment.status,
            },
        )

        try:
            with cls.atomic():
                txn = cls._record_installment_transaction(payment, amount, user)
        except (DatabaseError, BaseApplicationError) as e:
            logger.exception(
                "Failed to record installment transaction",
                extra={"payment_id": payment.id, "amount": amount},
            )
            return InstallmentResult(payment=payment, transaction=None, linkage_error=str(e))

        return InstallmentResult(payment=payment, transaction=txn)

    @classmethod
    def _record_installment_transaction(cls, payment: DeferredPayment, amount: int, user) -> Transaction:
        expense_type = ExpenseClassificationService.resolve_expense_type(
            payment.beneficiary_name, payment.project_id
        )
        if expense_type is None:
            expense_type = ExpenseClassificationService.get_or_create_bucket(
                settings.DEFERRED_PAYMENTS_EXPENSE_TYPE,
                description="Installments of deferred payments",
            )

        description = f"Installment for {payment.beneficiary_name}"
        if payment.description:
            description = f"{description}: {payment.description}"

        txn = Transaction.objects.create(
            type=TransactionType.EXPENSE,
            amount=amount,
            description=description,
            project_id=payment.project_id,
            expense_type=expense_type.name,
            deferred_payment=payment,
            created_by=user,
        )
        ExpenseClassificationService.classify_transaction(txn)
        return txn

    @classmethod
    def delete_deferred_payment(cls, payment_id: int, user) -> None:
        """
        Delete a deferred payment. Admins and managers only.

        Linked installment transactions are kept and lose their link.
        """
        AccessGate.require_operation(user, "deferredPayment.delete")

        with cls.atomic():
            payment = DeferredPayment.objects.select_for_update().filter(id=payment_id).first()
            if payment is None:
                raise cls._not_found(payment_id)
            details = f"Deleted deferred payment to {payment.beneficiary_name}"
            payment.delete()
            ActivityLogService.record(user, "deferredPayment.delete", "deferred_payment", payment_id, details)

        logger.info("Deferred payment deleted", extra={"payment_id": payment_id})
