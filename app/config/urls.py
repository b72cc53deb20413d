"""
Root URL configuration for the accounting service.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - JWT token pair, refresh, current user
    /api/v1/projects/              - Projects and assignments
    /api/v1/finance/               - Finance endpoints
        funds/                     - Fund list, deposit, withdraw, admin-transaction
        transactions/              - Transaction CRUD
        deferred-payments/         - Deferred payments, pay, history
        edit-permissions/          - Grant toggle, revoke, check
        expense-types/             - Expense type list/create
        ledger/                    - Ledger entries, reclassify
        activity-logs/             - Audit trail (admin only)
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("projects/", include("projects.urls")),
    path("finance/", include("finance.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Accounting Admin"
admin.site.site_title = "Accounting Admin"
admin.site.index_title = "Funds, projects and transactions"
