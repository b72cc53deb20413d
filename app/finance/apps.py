"""
Finance app configuration.

This app provides the ledger core:
- Fund transfers between the admin fund and project funds
- Deferred payment installments
- Transaction edit permissions
"""

from django.apps import AppConfig


class FinanceConfig(AppConfig):
    """Configuration for the finance application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "finance"
    verbose_name = "Finance"
