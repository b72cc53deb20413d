"""
Fund model: a balance bucket owned by the administrator or by a project.

Balances are plain integers in minor units and are only ever changed by
finance.services.funds under a row lock. The administrator fund belongs to
the bootstrap admin user; each project has at most one fund.

Usage:
    from finance.models import Fund
    from finance.state_machines import FundKind

    admin_fund = Fund.objects.admin_fund()
    project_fund = project.fund
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.models import BaseModel
from finance.state_machines import FundKind


class FundQuerySet(models.QuerySet):
    """QuerySet helpers for looking up funds by owner."""

    def admin_funds(self):
        return self.filter(kind=FundKind.ADMIN)

    def project_funds(self):
        return self.filter(kind=FundKind.PROJECT)

    def admin_fund(self):
        """The system administrator fund (oldest admin fund), or None."""
        return self.admin_funds().order_by("id").first()


class Fund(BaseModel):
    """
    A named balance owned by exactly one of a user or a project.

    Fields:
        name: Display name ("Admin fund", "Project fund: <project>")
        kind: ADMIN or PROJECT
        balance: Current balance in minor units, never negative
        owner: Owning admin user (ADMIN funds only)
        project: Owning project (PROJECT funds only)
        version: Optimistic locking version, incremented on every save

    Constraints:
        - kind and owner reference agree, exactly one owner set
        - balance >= 0
    """

    name = models.CharField(
        max_length=255,
        help_text="Display name of the fund",
    )
    kind = models.CharField(
        max_length=20,
        choices=FundKind.choices,
        db_index=True,
        help_text="Whether the fund belongs to an admin user or a project",
    )
    balance = models.BigIntegerField(
        default=0,
        help_text="Current balance in minor units",
    )
    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="admin_fund",
        help_text="Owning admin user (admin funds only)",
    )
    project = models.OneToOneField(
        "projects.Project",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="fund",
        help_text="Owning project (project funds only)",
    )
    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each save",
    )

    objects = FundQuerySet.as_manager()

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(kind=FundKind.ADMIN, owner__isnull=False, project__isnull=True)
                    | Q(kind=FundKind.PROJECT, project__isnull=False, owner__isnull=True)
                ),
                name="fund_single_owner",
            ),
            models.CheckConstraint(
                condition=Q(balance__gte=0),
                name="fund_balance_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.balance})"

    def save(self, *args, **kwargs):
        """Save with version auto-increment on updates."""
        is_update = self.pk and not kwargs.get("force_insert", False)
        if is_update:
            self.version = F("version") + 1
            update_fields = kwargs.get("update_fields")
            if update_fields is not None:
                kwargs["update_fields"] = {*update_fields, "version", "updated_at"}
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])

    def can_cover(self, amount: int) -> bool:
        return self.balance >= amount
