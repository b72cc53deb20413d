"""
TransactionEditPermission model: time-boxed exception to the admin-only
transaction editing rule.

A grant targets exactly one user or one project. At most one active grant
exists per target (partial unique constraints on is_active). Grants leave
the ACTIVE state through revoke() or expire() and never come back.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from django_fsm import FSMField, transition

from core.models import BaseModel
from finance.state_machines import EditPermissionStatus


class TransactionEditPermission(BaseModel):
    """
    Edit permission grant for a user or a project.

    Fields:
        user / project: The single target of the grant
        granted_by: Admin or manager who granted it
        granted_at: Grant time
        expires_at: granted_at + TRANSACTION_EDIT_PERMISSION_HOURS
        is_active: False once revoked or expired
        status: ACTIVE, REVOKED or EXPIRED (managed by FSM)
        revoked_by / revoked_at / reason: Revocation audit
        notes: Free text
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="edit_permissions",
        help_text="User allowed to edit transactions",
    )
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="edit_permissions",
        help_text="Project whose transactions may be edited",
    )
    granted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="User who granted the permission",
    )
    granted_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the permission was granted",
    )
    expires_at = models.DateTimeField(
        db_index=True,
        help_text="When the permission stops being effective",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="False once revoked or expired",
    )
    status = FSMField(
        default=EditPermissionStatus.ACTIVE,
        choices=EditPermissionStatus.choices,
        db_index=True,
        help_text="Grant state (managed by FSM)",
    )
    revoked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="User who revoked the permission",
    )
    revoked_at = models.DateTimeField(null=True, blank=True)
    reason = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-granted_at"]
        indexes = [
            models.Index(fields=["is_active", "expires_at"], name="edit_perm_active_expiry_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(user__isnull=False, project__isnull=True)
                    | Q(user__isnull=True, project__isnull=False)
                ),
                name="edit_permission_single_target",
            ),
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(is_active=True, user__isnull=False),
                name="unique_active_edit_permission_per_user",
            ),
            models.UniqueConstraint(
                fields=["project"],
                condition=Q(is_active=True, project__isnull=False),
                name="unique_active_edit_permission_per_project",
            ),
        ]

    def __str__(self) -> str:
        target = f"user={self.user_id}" if self.user_id else f"project={self.project_id}"
        return f"EditPermission({self.id}, {target}, {self.status})"

    def is_expired(self, now=None) -> bool:
        return self.expires_at <= (now or timezone.now())

    def is_effective(self, now=None) -> bool:
        return self.is_active and not self.is_expired(now)

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=EditPermissionStatus.ACTIVE,
        target=EditPermissionStatus.REVOKED,
    )
    def revoke(self, revoked_by=None, reason: str = "") -> None:
        """Transition: ACTIVE -> REVOKED."""
        self.is_active = False
        self.revoked_by = revoked_by
        self.revoked_at = timezone.now()
        if reason:
            self.reason = reason

    @transition(
        field=status,
        source=EditPermissionStatus.ACTIVE,
        target=EditPermissionStatus.EXPIRED,
    )
    def expire(self) -> None:
        """Transition: ACTIVE -> EXPIRED."""
        self.is_active = False
