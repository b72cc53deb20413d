"""
DRF permission classes backed by the operations catalog.

Views declare which catalog operation each action maps to:

    class DeferredPaymentViewSet(viewsets.ViewSet):
        permission_classes = [IsAuthenticated, HasOperationPermission]
        operation_map = {
            "list": "deferredPayment.list",
            "create": "deferredPayment.create",
            "destroy": "deferredPayment.delete",
        }

Actions missing from operation_map are only subject to the other permission
classes on the view (usually IsAuthenticated).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

from authentication.roles import OPERATIONS_CATALOG, can_role_execute

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


def user_can_execute(user, operation: str) -> bool:
    """Catalog check for a user instance; admins are always allowed."""
    if not user or not user.is_authenticated or not user.is_active:
        return False
    if user.is_admin:
        return True
    return can_role_execute(operation, user.role, user.effective_permissions)


class HasOperationPermission(permissions.BasePermission):
    """Allows an action only if the user may run its catalog operation."""

    message = "You do not have permission to perform this operation."

    def has_permission(self, request: Request, view: APIView) -> bool:
        operation = self._operation_for(view)
        if operation is None:
            return True
        allowed = user_can_execute(request.user, operation)
        if not allowed:
            rule = OPERATIONS_CATALOG.get(operation)
            self.message = (
                f"Operation '{operation}' is not allowed"
                + (f": {rule.description}" if rule else "")
            )
        return allowed

    @staticmethod
    def _operation_for(view: APIView) -> str | None:
        operation_map = getattr(view, "operation_map", {}) or {}
        action = getattr(view, "action", None)
        if action is None:
            action = view.request.method.lower() if getattr(view, "request", None) else None
        return operation_map.get(action)


class IsAdminRole(permissions.BasePermission):
    """Allows access only to users with the admin role."""

    message = "Admin role required."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)
