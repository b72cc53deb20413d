"""
DeferredPayment model: an obligation repaid in installments.

Usage:
    payment = DeferredPayment.objects.create(
        beneficiary_name="Concrete supplier",
        total_amount=90_000,
        remaining_amount=90_000,
        user=user,
    )

    payment.apply_installment(30_000)  # pending -> partial
    payment.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_fsm import FSMField, transition

from core.models import BaseModel
from finance.state_machines import DeferredPaymentStatus


class DeferredPayment(BaseModel):
    """
    Obligation to a beneficiary tracked through partial payments.

    Invariants (enforced by a check constraint and by apply_installment):
        paid_amount + remaining_amount == total_amount
        status == COMPLETED iff remaining_amount <= 0

    remaining_amount is denormalised and may go below zero only when the
    over-payment policy allows it.
    """

    # ==========================================================================
    # Obligation
    # ==========================================================================

    beneficiary_name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Who is owed the money",
    )
    total_amount = models.BigIntegerField(
        help_text="Total owed in minor units",
    )
    paid_amount = models.BigIntegerField(
        default=0,
        help_text="Sum of installments paid so far",
    )
    remaining_amount = models.BigIntegerField(
        help_text="total_amount - paid_amount",
    )
    status = FSMField(
        default=DeferredPaymentStatus.PENDING,
        choices=DeferredPaymentStatus.choices,
        db_index=True,
        help_text="Repayment state (managed by FSM)",
    )

    # ==========================================================================
    # Context
    # ==========================================================================

    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deferred_payments",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deferred_payments",
        help_text="User who recorded the obligation",
    )
    description = models.TextField(blank=True, default="")
    due_date = models.DateField(null=True, blank=True)
    installments = models.PositiveSmallIntegerField(
        default=1,
        help_text="Planned number of installments",
    )
    payment_frequency = models.CharField(
        max_length=20,
        default="monthly",
        help_text="Planned installment frequency",
    )
    notes = models.TextField(blank=True, default="")
    completed_at = models.DateTimeField(null=True, blank=True)

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each save",
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_amount__gt=0),
                name="deferred_payment_total_positive",
            ),
            models.CheckConstraint(
                condition=Q(total_amount=F("paid_amount") + F("remaining_amount")),
                name="deferred_payment_amounts_balance",
            ),
        ]

    def __str__(self) -> str:
        return f"DeferredPayment({self.id}, {self.beneficiary_name}, {self.status})"

    def save(self, *args, **kwargs):
        """Save with version auto-increment on updates."""
        is_update = self.pk and not kwargs.get("force_insert", False)
        if is_update:
            self.version = F("version") + 1
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])

    @property
    def is_settled(self) -> bool:
        return self.remaining_amount <= 0

    def apply_installment(self, amount: int) -> None:
        """
        Add an installment and move the state machine.

        Does not validate the amount or the over-payment policy; callers
        (DeferredPaymentService) do that before touching the row.
        """
        self.paid_amount += amount
        self.remaining_amount = self.total_amount - self.paid_amount
        if self.remaining_amount <= 0:
            self.complete()
        else:
            self.record_partial_payment()

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=[DeferredPaymentStatus.PENDING, DeferredPaymentStatus.PARTIAL],
        target=DeferredPaymentStatus.PARTIAL,
    )
    def record_partial_payment(self):
        """Transition: PENDING/PARTIAL -> PARTIAL."""

    @transition(
        field=status,
        source=[
            DeferredPaymentStatus.PENDING,
            DeferredPaymentStatus.PARTIAL,
            DeferredPaymentStatus.COMPLETED,
        ],
        target=DeferredPaymentStatus.COMPLETED,
    )
    def complete(self):
        """
        Transition: any -> COMPLETED.

        COMPLETED -> COMPLETED is only reachable when over-payment is
        allowed; completed_at keeps the first completion time.
        """
        if self.completed_at is None:
            self.completed_at = timezone.now()
