"""
URL configuration for the finance API.

All routes are prefixed with /api/v1/finance/ in the main URL configuration.
See finance.views for the full route list.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from finance.views import (
    ActivityLogViewSet,
    DeferredPaymentViewSet,
    EditPermissionViewSet,
    ExpenseTypeViewSet,
    FundViewSet,
    LedgerViewSet,
    TransactionViewSet,
)

router = DefaultRouter()
router.register(r"funds", FundViewSet, basename="fund")
router.register(r"transactions", TransactionViewSet, basename="transaction")
router.register(r"deferred-payments", DeferredPaymentViewSet, basename="deferred-payment")
router.register(r"edit-permissions", EditPermissionViewSet, basename="edit-permission")
router.register(r"expense-types", ExpenseTypeViewSet, basename="expense-type")
router.register(r"ledger", LedgerViewSet, basename="ledger")
router.register(r"activity-logs", ActivityLogViewSet, basename="activity-log")

app_name = "finance"

urlpatterns = [
    path("", include(router.urls)),
]
