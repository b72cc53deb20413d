"""ActivityLog model: append-only audit trail of mutating operations."""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel


class ActivityLog(BaseModel):
    """One audited action (fund movement, installment, grant, deletion, ...)."""

    action = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Action identifier, e.g. 'fund.deposit'",
    )
    entity_type = models.CharField(
        max_length=50,
        help_text="Kind of entity acted on",
    )
    entity_id = models.BigIntegerField(
        null=True,
        blank=True,
        help_text="Primary key of the entity acted on",
    )
    details = models.TextField(
        blank=True,
        default="",
        help_text="Human-readable description of what happened",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
        help_text="User who performed the action",
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="activity_entity_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.entity_type}:{self.entity_id}"
