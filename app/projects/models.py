"""
Project models.

- Project: unit of budgeting and access scoping, owns exactly one Fund
- ProjectAssignment: membership of a user in a project
- Employee: person a transaction may be attributed to

The project's fund lives in finance.models (Fund.project one-to-one);
ProjectService creates both together.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import BaseModel


class ProjectStatus(models.TextChoices):
    """Lifecycle status of a project."""

    ACTIVE = "active", "Active"
    ON_HOLD = "on_hold", "On Hold"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class Project(BaseModel):
    """
    A project with its budget counters.

    Fields:
        name: Project name (used in the fund name)
        description: Free text
        start_date: When work started
        status: Lifecycle status
        progress: Completion percentage (0-100)
        budget: Planned budget in minor units
        spent: Amount spent so far in minor units
        created_by: User who created the project
    """

    name = models.CharField(
        max_length=200,
        help_text="Project name",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Free-text description",
    )
    start_date = models.DateField(
        default=timezone.localdate,
        help_text="Date the project started",
    )
    status = models.CharField(
        max_length=20,
        choices=ProjectStatus.choices,
        default=ProjectStatus.ACTIVE,
        db_index=True,
        help_text="Lifecycle status",
    )
    progress = models.PositiveSmallIntegerField(
        default=0,
        help_text="Completion percentage (0-100)",
    )
    budget = models.BigIntegerField(
        default=0,
        help_text="Planned budget in minor units",
    )
    spent = models.BigIntegerField(
        default=0,
        help_text="Amount spent so far in minor units",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_projects",
        help_text="User who created the project",
    )

    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="projects.ProjectAssignment",
        through_fields=("project", "user"),
        related_name="projects",
        blank=True,
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(progress__lte=100),
                name="project_progress_max_100",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class ProjectAssignment(BaseModel):
    """
    Membership of a user in a project.

    The row's existence is what grants a non-admin access to the project.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="project_assignments",
        help_text="Assigned user",
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name="assignments",
        help_text="Project the user is assigned to",
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="User who made the assignment",
    )
    assigned_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the assignment was made",
    )

    class Meta:
        ordering = ["-assigned_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "project"],
                name="unique_project_assignment",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} -> {self.project_id}"


class Employee(BaseModel):
    """Employee that transactions (e.g. salary payments) can reference."""

    name = models.CharField(
        max_length=200,
        help_text="Employee name",
    )
    salary = models.BigIntegerField(
        default=0,
        help_text="Monthly salary in minor units",
    )
    assigned_project = models.ForeignKey(
        Project,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employees",
        help_text="Project the employee works on",
    )
    active = models.BooleanField(
        default=True,
        help_text="Whether the employee is currently employed",
    )
    notes = models.TextField(
        blank=True,
        default="",
    )

    def __str__(self) -> str:
        return self.name
