"""
ViewSets for the finance API.

URL Structure:
    /api/v1/finance/funds/                              GET
    /api/v1/finance/funds/deposit/                      POST
    /api/v1/finance/funds/withdraw/                     POST
    /api/v1/finance/funds/admin-transaction/            POST
    /api/v1/finance/transactions/                       GET, POST
    /api/v1/finance/transactions/{id}/                  GET, PATCH, DELETE
    /api/v1/finance/deferred-payments/                  GET, POST
    /api/v1/finance/deferred-payments/{id}/             GET, DELETE
    /api/v1/finance/deferred-payments/{id}/pay/         POST
    /api/v1/finance/deferred-payments/{id}/history/     GET
    /api/v1/finance/edit-permissions/                   GET, POST
    /api/v1/finance/edit-permissions/{id}/revoke/       POST
    /api/v1/finance/edit-permissions/check/             GET
    /api/v1/finance/expense-types/                      GET, POST
    /api/v1/finance/ledger/                             GET
    /api/v1/finance/ledger/reclassify/                  POST
    /api/v1/finance/activity-logs/                      GET

Every action is mapped to an operations catalog entry (operation_map) and
checked by HasOperationPermission; project scope and balances are checked
by the services, whose errors are rendered by application_error_response.
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from authentication.permissions import HasOperationPermission, IsAdminRole
from core.exceptions import BaseApplicationError
from core.views import application_error_response
from finance.models import LedgerEntry
from finance.serializers import (
    ActivityLogSerializer,
    AdminTransactionSerializer,
    DeferredPaymentCreateSerializer,
    DeferredPaymentSerializer,
    DepositSerializer,
    ExpenseTypeCreateSerializer,
    ExpenseTypeSerializer,
    FundSerializer,
    GrantEditPermissionSerializer,
    InstallmentSerializer,
    LedgerEntrySerializer,
    RevokeEditPermissionSerializer,
    TransactionCreateSerializer,
    TransactionEditPermissionSerializer,
    TransactionSerializer,
    TransactionUpdateSerializer,
    WithdrawSerializer,
)
from finance.services import (
    AccessGate,
    ActivityLogService,
    DeferredPaymentService,
    EditPermissionService,
    ExpenseClassificationService,
    FundTransferService,
    TransactionService,
)


def _transfer_payload(result) -> dict:
    return {
        "transaction": TransactionSerializer(result.transaction).data,
        "admin_fund": FundSerializer(result.admin_fund).data if result.admin_fund else None,
        "project_fund": FundSerializer(result.project_fund).data if result.project_fund else None,
    }


def _optional_int(value):
    """Query-string integer, or None when absent or malformed."""
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


class FinanceViewSet(viewsets.GenericViewSet):
    """Shared configuration: authentication plus the operations catalog."""

    permission_classes = [IsAuthenticated, HasOperationPermission]
    operation_map: dict[str, str] = {}

    def paginated(self, queryset, serializer_class):
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(serializer_class(page, many=True).data)
        return Response(serializer_class(queryset, many=True).data)


# =============================================================================
# Funds
# =============================================================================


@extend_schema_view(
    list=extend_schema(operation_id="list_funds", summary="List funds", tags=["Finance - Funds"]),
)
class FundViewSet(FinanceViewSet):
    """
    Funds and balance movements.

    list:
        Funds visible to the user (all for admins, assigned projects otherwise).

    deposit:
        Move money from the admin fund into a project fund.

    withdraw:
        Spend money from a project fund.

    admin_transaction:
        Income to or expense from the admin fund (admin only).
    """

    serializer_class = FundSerializer
    operation_map = {
        "list": "fund.list",
        "deposit": "fund.deposit",
        "withdraw": "fund.withdraw",
        "admin_transaction": "fund.adminTransaction",
    }

    def list(self, request):
        return self.paginated(FundTransferService.list_funds(request.user), FundSerializer)

    @extend_schema(
        operation_id="deposit_to_project",
        summary="Deposit into a project fund",
        tags=["Finance - Funds"],
        request=DepositSerializer,
    )
    @action(detail=False, methods=["post"])
    def deposit(self, request):
        serializer = DepositSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = FundTransferService.deposit(request.user, **serializer.validated_data)
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(_transfer_payload(result), status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="withdraw_from_project",
        summary="Withdraw from a project fund",
        tags=["Finance - Funds"],
        request=WithdrawSerializer,
    )
    @action(detail=False, methods=["post"])
    def withdraw(self, request):
        serializer = WithdrawSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = FundTransferService.withdraw(request.user, **serializer.validated_data)
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(_transfer_payload(result), status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="admin_fund_transaction",
        summary="Admin fund transaction",
        tags=["Finance - Funds"],
        request=AdminTransactionSerializer,
    )
    @action(detail=False, methods=["post"], url_path="admin-transaction")
    def admin_transaction(self, request):
        serializer = AdminTransactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = FundTransferService.admin_transaction(request.user, **serializer.validated_data)
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(_transfer_payload(result), status=status.HTTP_201_CREATED)


# =============================================================================
# Transactions
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_transactions",
        summary="List transactions",
        tags=["Finance - Transactions"],
        parameters=[
            OpenApiParameter("project_id", OpenApiTypes.INT, required=False),
            OpenApiParameter("type", OpenApiTypes.STR, required=False),
            OpenApiParameter("include_archived", OpenApiTypes.BOOL, required=False),
        ],
    ),
    create=extend_schema(
        operation_id="create_transaction",
        summary="Create transaction",
        tags=["Finance - Transactions"],
        request=TransactionCreateSerializer,
    ),
    retrieve=extend_schema(
        operation_id="get_transaction", summary="Get transaction", tags=["Finance - Transactions"]
    ),
    partial_update=extend_schema(
        operation_id="update_transaction",
        summary="Update transaction",
        tags=["Finance - Transactions"],
        request=TransactionUpdateSerializer,
    ),
    destroy=extend_schema(
        operation_id="delete_transaction", summary="Delete transaction", tags=["Finance - Transactions"]
    ),
)
class TransactionViewSet(FinanceViewSet):
    """
    Transactions.

    create:
        Dispatches to deposit / withdraw / admin transaction.

    partial_update:
        Descriptive fields only; needs an active edit permission for non-admins.

    destroy:
        Admin or creator; the balance effect is reversed.
    """

    serializer_class = TransactionSerializer
    operation_map = {
        "list": "transaction.list",
        "retrieve": "transaction.list",
        "create": "transaction.create",
        "partial_update": "transaction.update",
        "destroy": "transaction.delete",
    }

    def list(self, request):
        params = request.query_params
        queryset = TransactionService.list_transactions(
            request.user,
            project_id=_optional_int(params.get("project_id")),
            type=params.get("type") or None,
            include_archived=params.get("include_archived") in ("1", "true", "True"),
        )
        return self.paginated(queryset, TransactionSerializer)

    def create(self, request):
        serializer = TransactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = TransactionService.create_transaction(request.user, **serializer.validated_data)
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(_transfer_payload(result), status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        try:
            txn = TransactionService.get_transaction(request.user, int(pk))
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(TransactionSerializer(txn).data)

    def partial_update(self, request, pk=None):
        serializer = TransactionUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            txn = TransactionService.update_transaction(
                request.user, int(pk), **serializer.validated_data
            )
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(TransactionSerializer(txn).data)

    def destroy(self, request, pk=None):
        try:
            TransactionService.delete_transaction(request.user, int(pk))
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Deferred payments
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_deferred_payments",
        summary="List deferred payments",
        tags=["Finance - Deferred Payments"],
    ),
    create=extend_schema(
        operation_id="create_deferred_payment",
        summary="Create deferred payment",
        tags=["Finance - Deferred Payments"],
        request=DeferredPaymentCreateSerializer,
    ),
    retrieve=extend_schema(
        operation_id="get_deferred_payment",
        summary="Get deferred payment",
        tags=["Finance - Deferred Payments"],
    ),
    destroy=extend_schema(
        operation_id="delete_deferred_payment",
        summary="Delete deferred payment",
        tags=["Finance - Deferred Payments"],
    ),
)
class DeferredPaymentViewSet(FinanceViewSet):
    """
    Deferred payments.

    pay:
        Pay an installment. Responds 207 when the installment was recorded
        but its linked transaction could not be.

    history:
        Installment transactions linked to the payment.
    """

    serializer_class = DeferredPaymentSerializer
    operation_map = {
        "list": "deferredPayment.list",
        "retrieve": "deferredPayment.list",
        "history": "deferredPayment.list",
        "create": "deferredPayment.create",
        "pay": "deferredPayment.pay",
        "destroy": "deferredPayment.delete",
    }

    def list(self, request):
        queryset = DeferredPaymentService.list_deferred_payments(
            request.user, status=request.query_params.get("status") or None
        )
        return self.paginated(queryset, DeferredPaymentSerializer)

    def create(self, request):
        serializer = DeferredPaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            payment = DeferredPaymentService.create_deferred_payment(
                request.user, **serializer.validated_data
            )
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(DeferredPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        try:
            payment = DeferredPaymentService.get_deferred_payment(request.user, int(pk))
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(DeferredPaymentSerializer(payment).data)

    def destroy(self, request, pk=None):
        try:
            DeferredPaymentService.delete_deferred_payment(int(pk), request.user)
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="pay_deferred_payment_installment",
        summary="Pay installment",
        tags=["Finance - Deferred Payments"],
        request=InstallmentSerializer,
    )
    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):
        serializer = InstallmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = DeferredPaymentService.pay_installment(
                int(pk), serializer.validated_data["amount"], request.user
            )
        except BaseApplicationError as e:
            return application_error_response(e)

        payload = {
            "payment": DeferredPaymentSerializer(result.payment).data,
            "transaction": TransactionSerializer(result.transaction).data if result.transaction else None,
        }
        if result.is_partial_success:
            payload["linkage_error"] = result.linkage_error
            return Response(payload, status=status.HTTP_207_MULTI_STATUS)
        return Response(payload)

    @extend_schema(
        operation_id="deferred_payment_history",
        summary="Installment history",
        tags=["Finance - Deferred Payments"],
    )
    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        try:
            transactions = DeferredPaymentService.get_payment_history(int(pk), user=request.user)
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(TransactionSerializer(transactions, many=True).data)


# =============================================================================
# Transaction edit permissions
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_edit_permissions",
        summary="List edit permissions",
        tags=["Finance - Edit Permissions"],
        parameters=[
            OpenApiParameter("user_id", OpenApiTypes.INT, required=False),
            OpenApiParameter("project_id", OpenApiTypes.INT, required=False),
        ],
    ),
    create=extend_schema(
        operation_id="grant_edit_permission",
        summary="Grant or toggle off an edit permission",
        tags=["Finance - Edit Permissions"],
        request=GrantEditPermissionSerializer,
    ),
)
class EditPermissionViewSet(FinanceViewSet):
    """
    Transaction edit permissions.

    create:
        Toggle: grants a 42-hour permission, or revokes the active one.
        The response's "action" says which happened.

    check:
        Whether the current user may edit transactions (optionally for a project).
    """

    serializer_class = TransactionEditPermissionSerializer
    operation_map = {
        "list": "transactionEditPermission.view",
        "create": "transactionEditPermission.grant",
        "revoke": "transactionEditPermission.revoke",
    }

    def list(self, request):
        user_id = _optional_int(request.query_params.get("user_id"))
        project_id = _optional_int(request.query_params.get("project_id"))
        if user_id is not None:
            queryset = EditPermissionService.list_for_user(user_id, viewer=request.user)
        elif project_id is not None:
            queryset = EditPermissionService.list_for_project(project_id, viewer=request.user)
        else:
            queryset = EditPermissionService.list_active(viewer=request.user)
        return self.paginated(queryset, TransactionEditPermissionSerializer)

    def create(self, request):
        serializer = GrantEditPermissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = EditPermissionService.grant(request.user, **serializer.validated_data)
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(
            {
                "action": result.action,
                "permission": TransactionEditPermissionSerializer(result.permission).data,
            },
            status=status.HTTP_201_CREATED if result.action == "granted" else status.HTTP_200_OK,
        )

    @extend_schema(
        operation_id="revoke_edit_permission",
        summary="Revoke edit permission",
        tags=["Finance - Edit Permissions"],
        request=RevokeEditPermissionSerializer,
    )
    @action(detail=True, methods=["post"])
    def revoke(self, request, pk=None):
        serializer = RevokeEditPermissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            permission = EditPermissionService.revoke(
                int(pk), request.user, reason=serializer.validated_data["reason"]
            )
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(TransactionEditPermissionSerializer(permission).data)

    @extend_schema(
        operation_id="check_edit_permission",
        summary="Check own edit permission",
        tags=["Finance - Edit Permissions"],
        parameters=[OpenApiParameter("project_id", OpenApiTypes.INT, required=False)],
    )
    @action(detail=False, methods=["get"])
    def check(self, request):
        project_id = _optional_int(request.query_params.get("project_id"))
        permission = EditPermissionService.check(request.user, project_id=project_id)
        return Response(
            {
                "can_edit": AccessGate.can_edit_transactions(request.user, project_id),
                "permission": (
                    TransactionEditPermissionSerializer(permission).data if permission else None
                ),
            }
        )


# =============================================================================
# Expense types, ledger and activity log
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_expense_types", summary="List expense types", tags=["Finance - Ledger"]
    ),
    create=extend_schema(
        operation_id="create_expense_type",
        summary="Create expense type",
        tags=["Finance - Ledger"],
        request=ExpenseTypeCreateSerializer,
    ),
)
class ExpenseTypeViewSet(FinanceViewSet):
    serializer_class = ExpenseTypeSerializer
    operation_map = {
        "list": "expenseType.view",
        "create": "expenseType.manage",
    }

    def list(self, request):
        queryset = ExpenseClassificationService.list_expense_types(
            request.user, project_id=_optional_int(request.query_params.get("project_id"))
        )
        return self.paginated(queryset, ExpenseTypeSerializer)

    def create(self, request):
        serializer = ExpenseTypeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            expense_type = ExpenseClassificationService.create_expense_type(
                request.user, **serializer.validated_data
            )
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(ExpenseTypeSerializer(expense_type).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_ledger_entries", summary="List ledger entries", tags=["Finance - Ledger"]
    ),
)
class LedgerViewSet(FinanceViewSet):
    serializer_class = LedgerEntrySerializer
    operation_map = {
        "list": "ledger.view",
        "reclassify": "ledger.reclassify",
    }

    def list(self, request):
        queryset = AccessGate.scope_by_project(
            request.user, LedgerEntry.objects.select_related("expense_type")
        )
        entry_type = request.query_params.get("entry_type")
        if entry_type:
            queryset = queryset.filter(entry_type=entry_type)
        return self.paginated(queryset, LedgerEntrySerializer)

    @extend_schema(
        operation_id="reclassify_ledger",
        summary="Reclassify all expense transactions",
        tags=["Finance - Ledger"],
        request=None,
    )
    @action(detail=False, methods=["post"])
    def reclassify(self, request):
        summary = ExpenseClassificationService.reclassify_all()
        return Response({"summary": summary.to_dict()})


@extend_schema_view(
    list=extend_schema(
        operation_id="list_activity_logs",
        summary="List activity logs",
        tags=["Finance - Activity"],
        parameters=[
            OpenApiParameter("entity_type", OpenApiTypes.STR, required=False),
            OpenApiParameter("user_id", OpenApiTypes.INT, required=False),
        ],
    ),
)
class ActivityLogViewSet(FinanceViewSet):
    """Audit trail (admin only)."""

    permission_classes = [IsAuthenticated, IsAdminRole, HasOperationPermission]
    serializer_class = ActivityLogSerializer
    operation_map = {"list": "activityLog.view"}

    def list(self, request):
        queryset = ActivityLogService.list_logs(
            entity_type=request.query_params.get("entity_type") or None,
            user_id=_optional_int(request.query_params.get("user_id")),
        )
        return self.paginated(queryset, ActivityLogSerializer)
