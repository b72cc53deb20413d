"""
DRF serializers for the finance app.

Read serializers render model rows; request serializers only check the
shape of the payload. Business rules (positive amounts, balances, access)
are enforced by finance.services so that the API and other callers share
one set of error codes.

Related files:
    - services/: Business logic
    - views.py: API views
"""

from __future__ import annotations

from rest_framework import serializers

from finance.models import (
    ActivityLog,
    DeferredPayment,
    ExpenseType,
    Fund,
    LedgerEntry,
    Transaction,
    TransactionEditPermission,
)
from finance.state_machines import TransactionType


# =============================================================================
# Read serializers
# =============================================================================


class FundSerializer(serializers.ModelSerializer):
    """Fund with its current balance."""

    class Meta:
        model = Fund
        fields = [
            "id",
            "name",
            "kind",
            "balance",
            "owner",
            "project",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source="project.name", read_only=True, default=None)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "date",
            "type",
            "amount",
            "description",
            "project",
            "project_name",
            "employee",
            "expense_type",
            "fund",
            "source_fund",
            "deferred_payment",
            "created_by",
            "is_archived",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ExpenseTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExpenseType
        fields = ["id", "name", "description", "project", "is_active", "created_at"]
        read_only_fields = fields


class LedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "date",
            "transaction",
            "expense_type",
            "account_name",
            "amount",
            "debit_amount",
            "credit_amount",
            "description",
            "project",
            "entry_type",
        ]
        read_only_fields = fields


class DeferredPaymentSerializer(serializers.ModelSerializer):
    """Deferred payment with its repayment progress."""

    class Meta:
        model = DeferredPayment
        fields = [
            "id",
            "beneficiary_name",
            "total_amount",
            "paid_amount",
            "remaining_amount",
            "status",
            "project",
            "user",
            "description",
            "due_date",
            "installments",
            "payment_frequency",
            "notes",
            "completed_at",
            "version",
            "created_at",
        ]
        read_only_fields = fields


class TransactionEditPermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = TransactionEditPermission
        fields = [
            "id",
            "user",
            "project",
            "granted_by",
            "granted_at",
            "expires_at",
            "is_active",
            "status",
            "revoked_by",
            "revoked_at",
            "reason",
            "notes",
        ]
        read_only_fields = fields


class ActivityLogSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True, default=None)

    class Meta:
        model = ActivityLog
        fields = [
            "id",
            "action",
            "entity_type",
            "entity_id",
            "details",
            "user",
            "user_email",
            "created_at",
        ]
        read_only_fields = fields


# =============================================================================
# Request serializers
# =============================================================================


class DepositSerializer(serializers.Serializer):
    """
    Deposit request.

    Usage:
        serializer = DepositSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        FundTransferService.deposit(request.user, **serializer.validated_data)
    """

    project_id = serializers.IntegerField()
    amount = serializers.IntegerField(help_text="Amount in minor units")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    date = serializers.DateTimeField(required=False, allow_null=True, default=None)


class WithdrawSerializer(DepositSerializer):
    expense_type = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=200, default=None
    )
    employee_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class AdminTransactionSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=TransactionType.choices)
    amount = serializers.IntegerField(help_text="Amount in minor units")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    expense_type = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=200, default=None
    )
    date = serializers.DateTimeField(required=False, allow_null=True, default=None)


class TransactionCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=TransactionType.choices)
    amount = serializers.IntegerField(help_text="Amount in minor units")
    project_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    expense_type = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=200, default=None
    )
    employee_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    date = serializers.DateTimeField(required=False, allow_null=True, default=None)


class TransactionUpdateSerializer(serializers.Serializer):
    """Only descriptive fields; amount and type are immutable."""

    description = serializers.CharField(required=False, allow_blank=True)
    date = serializers.DateTimeField(required=False)
    expense_type = serializers.CharField(required=False, allow_blank=True, max_length=200)
    employee_id = serializers.IntegerField(required=False, allow_null=True)
    is_archived = serializers.BooleanField(required=False)


class DeferredPaymentCreateSerializer(serializers.Serializer):
    beneficiary_name = serializers.CharField(max_length=200)
    total_amount = serializers.IntegerField(help_text="Total owed in minor units")
    project_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    installments = serializers.IntegerField(required=False, min_value=1, max_value=32767, default=1)
    payment_frequency = serializers.CharField(required=False, max_length=20, default="monthly")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class InstallmentSerializer(serializers.Serializer):
    amount = serializers.IntegerField(help_text="Installment amount in minor units")


class GrantEditPermissionSerializer(serializers.Serializer):
    """Exactly one of user_id / project_id; checked by the service."""

    user_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    project_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class RevokeEditPermissionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class ExpenseTypeCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    project_id = serializers.IntegerField(required=False, allow_null=True, default=None)
