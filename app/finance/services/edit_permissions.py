"""
Transaction Edit Permission Engine.

A grant lets a non-admin (or everyone working on a project) edit
transactions for TRANSACTION_EDIT_PERMISSION_HOURS. Granting for a target
that already has an effective grant revokes it instead (toggle).

State machine per grant:
    active -> revoked   (revoke, or grant toggle)
    active -> expired   (expire_sweep, or grant finding a stale row)
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone

from core.services import BaseService
from finance.exceptions import InvalidTarget, NotFound, NotFoundOrInactive
from finance.models import TransactionEditPermission
from finance.services.access import AccessGate
from finance.services.activity import ActivityLogService
from finance.state_machines import EditPermissionStatus
from finance.types import GrantResult
from projects.models import Project

logger = logging.getLogger(__name__)


class EditPermissionService(BaseService):
    """Grant, revoke, check and expire transaction edit permissions."""

    @staticmethod
    def grant_duration() -> timedelta:
        return timedelta(hours=settings.TRANSACTION_EDIT_PERMISSION_HOURS)

    @staticmethod
    def _lock_target(user_id: int | None, project_id: int | None) -> None:
        """Lock the User or Project row that the grant targets."""
        if user_id is not None:
            exists = get_user_model().objects.select_for_update().filter(id=user_id).first()
            if exists is None:
                raise NotFound(
                    f"User {user_id} not found",
                    error_code="USER_NOT_FOUND",
                    details={"user_id": user_id},
                )
        else:
            exists = Project.objects.select_for_update().filter(id=project_id).first()
            if exists is None:
                raise NotFound(
                    f"Project {project_id} not found",
                    error_code="PROJECT_NOT_FOUND",
                    details={"project_id": project_id},
                )

    @staticmethod
    def _find_active_for_target(user_id: int | None, project_id: int | None):
        queryset = TransactionEditPermission.objects.select_for_update().filter(is_active=True)
        if user_id is not None:
            return queryset.filter(user_id=user_id).first()
        return queryset.filter(project_id=project_id).first()

    @classmethod
    def grant(
        cls,
        granted_by,
        user_id: int | None = None,
        project_id: int | None = None,
        reason: str | None = None,
        notes: str | None = None,
    ) -> GrantResult:
        """
        Toggle the edit permission of a user or a project.

        Returns:
            GrantResult with action "granted" or "revoked"

        Raises:
            InvalidTarget: not exactly one of user_id / project_id
            Unauthorized: caller is not an admin or manager
            NotFound: target does not exist
        """
        if (user_id is None) == (project_id is None):
            raise InvalidTarget(
                "Exactly one of user_id or project_id must be given",
                details={"user_id": user_id, "project_id": project_id},
            )
        AccessGate.require_operation(granted_by, "transactionEditPermission.grant")

        with cls.atomic():
            cls._lock_target(user_id, project_id)
            now = timezone.now()
            active = cls._find_active_for_target(user_id, project_id)

            if active is not None and not active.is_expired(now):
                active.revoke(revoked_by=granted_by, reason=reason or "")
                active.save()
                ActivityLogService.record(
                    granted_by,
                    "transactionEditPermission.revoke",
                    "transaction_edit_permission",
                    active.id,
                    "Edit permission toggled off",
                )
                result = GrantResult(permission=active, action="revoked")
            else:
                if active is not None:
                    active.expire()
                    active.save()

                permission = TransactionEditPermission.objects.create(
                    user_id=user_id,
                    project_id=project_id,
                    granted_by=granted_by,
                    granted_at=now,
                    expires_at=now + cls.grant_duration(),
                    reason=reason or "",
                    notes=notes or "",
                )
                ActivityLogService.record(
                    granted_by,
                    "transactionEditPermission.grant",
                    "transaction_edit_permission",
                    permission.id,
                    f"Edit permission granted until {permission.expires_at.isoformat()}",
                )
                result = GrantResult(permission=permission, action="granted")

        logger.info(
            "Edit permission %s",
            result.action,
            extra={
                "permission_id": result.permission.id,
                "target_user_id": user_id,
                "target_project_id": project_id,
            },
        )
        return result

    @classmethod
    def revoke(cls, permission_id: int, revoked_by, reason: str | None = None) -> TransactionEditPermission:
        """
        Revoke an active grant.

        Raises:
            Unauthorized: caller is not an admin or manager
            NotFoundOrInactive: grant missing, revoked or expired
        """
        AccessGate.require_operation(revoked_by, "transactionEditPermission.revoke")

        with cls.atomic():
            permission = (
                TransactionEditPermission.objects.select_for_update()
                .filter(id=permission_id, is_active=True)
                .first()
            )
            if permission is None:
                raise NotFoundOrInactive(
                    f"Edit permission {permission_id} not found or no longer active",
                    details={"permission_id": permission_id},
                )
            permission.revoke(revoked_by=revoked_by, reason=reason or "")
            permission.save()
            ActivityLogService.record(
                revoked_by,
                "transactionEditPermission.revoke",
                "transaction_edit_permission",
                permission.id,
                reason or "Edit permission revoked",
            )

        return permission

    @staticmethod
    def check(user, project_id: int | None = None) -> TransactionEditPermission | None:
        """Effective grant for the user or the project, or None."""
        if user is None:
            return None
        target = Q(user_id=user.id)
        if project_id is not None:
            target |= Q(project_id=project_id)
        return (
            TransactionEditPermission.objects.filter(target)
            .filter(is_active=True, expires_at__gt=timezone.now())
            .order_by("-granted_at")
            .first()
        )

    @staticmethod
    def expire_sweep() -> int:
        """
        Expire every active grant past its expiry time.

        A single UPDATE, so re-running it (or running it concurrently) is
        harmless.

        Returns:
            Number of grants expired by this call
        """
        now = timezone.now()
        return TransactionEditPermission.objects.filter(is_active=True, expires_at__lte=now).update(
            is_active=False,
            status=EditPermissionStatus.EXPIRED,
            updated_at=now,
        )

    @staticmethod
    def visible_to(viewer, queryset):
        """
        Restrict grants to what the viewer may see.

        Non-admins see grants for themselves, grants they issued, and
        grants on projects they are assigned to.
        """
        project_ids = AccessGate.accessible_project_ids(viewer)
        if project_ids is None:
            return queryset
        return queryset.filter(
            Q(user_id=viewer.id) | Q(granted_by_id=viewer.id) | Q(project_id__in=project_ids)
        )

    @classmethod
    def list_active(cls, viewer=None):
        queryset = TransactionEditPermission.objects.filter(is_active=True).select_related(
            "user", "project", "granted_by"
        )
        return queryset if viewer is None else cls.visible_to(viewer, queryset)

    @classmethod
    def list_for_user(cls, user_id: int, viewer=None):
        queryset = TransactionEditPermission.objects.filter(user_id=user_id).select_related(
            "granted_by", "revoked_by"
        )
        return queryset if viewer is None else cls.visible_to(viewer, queryset)

    @classmethod
    def list_for_project(cls, project_id: int, viewer=None):
        queryset = TransactionEditPermission.objects.filter(project_id=project_id).select_related(
            "granted_by", "revoked_by"
        )
        return queryset if viewer is None else cls.visible_to(viewer, queryset)
