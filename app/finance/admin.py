"""
Finance admin configuration.

Balances and amounts are read-only here; they only change through
finance.services so that every movement has a transaction and an audit row.
"""

from django.contrib import admin

from finance.models import (
    ActivityLog,
    DeferredPayment,
    ExpenseType,
    Fund,
    LedgerEntry,
    Transaction,
    TransactionEditPermission,
)


@admin.register(Fund)
class FundAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "kind", "balance", "owner", "project", "updated_at"]
    list_filter = ["kind"]
    search_fields = ["name", "project__name", "owner__email"]
    readonly_fields = ["balance", "version", "created_at", "updated_at"]
    ordering = ["id"]


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ["id", "date", "type", "amount", "project", "expense_type", "created_by", "is_archived"]
    list_filter = ["type", "is_archived"]
    search_fields = ["description", "expense_type", "project__name"]
    readonly_fields = ["type", "amount", "fund", "source_fund", "deferred_payment", "created_at", "updated_at"]
    date_hierarchy = "date"


@admin.register(ExpenseType)
class ExpenseTypeAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "project", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name"]


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = ["id", "date", "account_name", "amount", "entry_type", "project"]
    list_filter = ["entry_type"]
    search_fields = ["account_name", "description"]
    readonly_fields = ["transaction", "amount", "debit_amount", "credit_amount"]


@admin.register(DeferredPayment)
class DeferredPaymentAdmin(admin.ModelAdmin):
    """
    Admin configuration for DeferredPayment.

    Amounts and status are read-only; installments go through the API.
    """

    list_display = [
        "id",
        "beneficiary_name",
        "total_amount",
        "paid_amount",
        "remaining_amount",
        "status",
        "project",
        "due_date",
    ]
    list_filter = ["status"]
    search_fields = ["beneficiary_name", "description"]
    readonly_fields = [
        "total_amount",
        "paid_amount",
        "remaining_amount",
        "status",
        "completed_at",
        "version",
        "created_at",
        "updated_at",
    ]


@admin.register(TransactionEditPermission)
class TransactionEditPermissionAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "project", "granted_by", "granted_at", "expires_at", "status"]
    list_filter = ["status", "is_active"]
    search_fields = ["user__email", "project__name", "reason"]
    readonly_fields = ["status", "is_active", "granted_at", "revoked_by", "revoked_at"]


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ["id", "created_at", "action", "entity_type", "entity_id", "user"]
    list_filter = ["action", "entity_type"]
    search_fields = ["details", "user__email"]
    readonly_fields = ["action", "entity_type", "entity_id", "details", "user", "created_at"]
