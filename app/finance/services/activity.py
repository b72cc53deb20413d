"""Activity log service: one audit row per mutating finance operation."""

from __future__ import annotations

from core.services import BaseService
from finance.models import ActivityLog


class ActivityLogService(BaseService):
    """Writes and reads the audit trail."""

    @classmethod
    def record(
        cls,
        user,
        action: str,
        entity_type: str,
        entity_id: int | None = None,
        details: str = "",
    ) -> ActivityLog:
        """
        Append an audit entry.

        Called inside the caller's atomic block so the entry commits or
        rolls back together with the change it describes.
        """
        if user is not None and not user.is_authenticated:
            user = None
        return ActivityLog.objects.create(
            user=user,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )

    @staticmethod
    def list_logs(entity_type: str | None = None, user_id: int | None = None):
        queryset = ActivityLog.objects.select_related("user")
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type)
        if user_id:
            queryset = queryset.filter(user_id=user_id)
        return queryset
