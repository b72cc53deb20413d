"""
Access Gate: authorization predicates for project-scoped finance data.

The predicates only read; they never write. Services call the require_*
helpers, which raise Unauthorized, before any mutation.

Rules:
    - Admins are allowed everything
    - Non-admins need an active account and a ProjectAssignment row
    - Project-less transactions belong to the admin and are hidden from others
    - Editing transactions needs an effective TransactionEditPermission
      (for the user, or for the project being edited)
"""

from __future__ import annotations

import logging

from django.db.models import Q
from django.utils import timezone

from authentication.permissions import user_can_execute
from authentication.roles import OPERATIONS_CATALOG
from core.services import BaseService
from finance.exceptions import Unauthorized
from finance.models import Transaction, TransactionEditPermission
from projects.models import Project, ProjectAssignment

logger = logging.getLogger(__name__)


class AccessGate(BaseService):
    """Read-and-decide checks shared by every finance service and view."""

    @staticmethod
    def is_admin(user) -> bool:
        """Active admin-role user; a deactivated admin gets nothing."""
        return bool(
            user is not None
            and getattr(user, "is_admin", False)
            and getattr(user, "is_active", False)
        )

    @staticmethod
    def _is_usable(user) -> bool:
        return bool(user is not None and user.is_authenticated and user.is_active)

    # ==========================================================================
    # Predicates
    # ==========================================================================

    @classmethod
    def can_access_project(cls, user, project_id: int | None) -> bool:
        if cls.is_admin(user):
            return True
        if project_id is None or not cls._is_usable(user):
            return False
        return ProjectAssignment.objects.filter(user=user, project_id=project_id).exists()

    @classmethod
    def can_access_transaction(cls, user, transaction_id: int) -> bool:
        if cls.is_admin(user):
            return True
        if not cls._is_usable(user):
            return False
        transaction = Transaction.objects.filter(id=transaction_id).only("project_id").first()
        if transaction is None or transaction.project_id is None:
            return False
        return cls.can_access_project(user, transaction.project_id)

    @classmethod
    def can_edit_transactions(cls, user, project_id: int | None = None) -> bool:
        if cls.is_admin(user):
            return True
        if not cls._is_usable(user):
            return False
        target = Q(user=user)
        if project_id is not None:
            target |= Q(project_id=project_id)
        return (
            TransactionEditPermission.objects.filter(target)
            .filter(is_active=True, expires_at__gt=timezone.now())
            .exists()
        )

    @classmethod
    def can_delete_transaction(cls, user, transaction: Transaction) -> bool:
        """Admins, or the user who created the transaction."""
        if cls.is_admin(user):
            return True
        return (
            cls._is_usable(user)
            and transaction.created_by_id is not None
            and transaction.created_by_id == user.id
        )

    @classmethod
    def accessible_project_ids(cls, user) -> set[int] | None:
        """Project ids visible to the user; None means unrestricted (admin)."""
        if cls.is_admin(user):
            return None
        if not cls._is_usable(user):
            return set()
        return set(
            ProjectAssignment.objects.filter(user=user).values_list("project_id", flat=True)
        )

    @classmethod
    def scope_projects(cls, user, queryset=None):
        """Restrict a Project queryset to what the user may see."""
        queryset = Project.objects.all() if queryset is None else queryset
        project_ids = cls.accessible_project_ids(user)
        if project_ids is None:
            return queryset
        return queryset.filter(id__in=project_ids)

    @classmethod
    def scope_by_project(cls, user, queryset, field: str = "project"):
        """
        Restrict any queryset with a project foreign key.

        Rows without a project are only visible to admins.
        """
        project_ids = cls.accessible_project_ids(user)
        if project_ids is None:
            return queryset
        return queryset.filter(**{f"{field}_id__in": project_ids})

    # ==========================================================================
    # Enforcement
    # ==========================================================================

    @classmethod
    def require_admin(cls, user, action: str = "this operation") -> None:
        if not cls.is_admin(user):
            raise Unauthorized(
                f"Only administrators may perform {action}",
                details={"user_id": getattr(user, "id", None)},
            )

    @classmethod
    def require_project_access(cls, user, project_id: int | None) -> None:
        if not cls.can_access_project(user, project_id):
            logger.info(
                "Project access denied",
                extra={"user_id": getattr(user, "id", None), "project_id": project_id},
            )
            raise Unauthorized(
                "You do not have access to this project",
                details={"project_id": project_id},
            )

    @classmethod
    def require_operation(cls, user, operation: str) -> None:
        if not user_can_execute(user, operation):
            rule = OPERATIONS_CATALOG.get(operation)
            raise Unauthorized(
                f"Operation '{operation}' is not allowed"
                + (f": {rule.description}" if rule else ""),
                details={"operation": operation},
            )
