"""
Project lifecycle service.

A project and its fund are created together, and a project may only be
deleted while its fund balance is exactly zero. Assignments decide which
non-admin users can see and move a project's money.

Usage:
    from projects.services import ProjectService

    project = ProjectService.create_project(admin, name="Tower B")
    ProjectService.assign_user(admin, project.id, engineer.id)
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model

from core.services import BaseService
from finance.exceptions import FundNotEmpty, NotFound
from finance.models import Fund
from finance.services import AccessGate, ActivityLogService, FundTransferService
from projects.models import Project, ProjectAssignment

logger = logging.getLogger(__name__)


class ProjectService(BaseService):
    """Create, delete and staff projects."""

    @staticmethod
    def _not_found(project_id: int) -> NotFound:
        return NotFound(
            f"Project {project_id} not found",
            error_code="PROJECT_NOT_FOUND",
            details={"project_id": project_id},
        )

    @staticmethod
    def list_for_user(user):
        return AccessGate.scope_projects(user, Project.objects.select_related("fund"))

    @classmethod
    def get_project(cls, user, project_id: int) -> Project:
        project = Project.objects.filter(id=project_id).first()
        if project is None:
            raise cls._not_found(project_id)
        AccessGate.require_project_access(user, project_id)
        return project

    @classmethod
    def create_project(cls, user, name: str, **fields) -> Project:
        """
        Create a project with an empty fund.

        Non-admin creators are assigned to the new project so they keep
        access to it.
        """
        AccessGate.require_operation(user, "project.create")

        with cls.atomic():
            project = Project.objects.create(name=name, created_by=user, **fields)
            fund = FundTransferService.get_or_create_project_fund(project)
            if not AccessGate.is_admin(user):
                ProjectAssignment.objects.create(user=user, project=project, assigned_by=user)
            ActivityLogService.record(user, "project.create", "project", project.id, f"Created project '{name}'")

        logger.info(
            "Project created",
            extra={"project_id": project.id, "fund_id": fund.id, "user_id": user.id},
        )
        return project

    @classmethod
    def delete_project(cls, user, project_id: int) -> None:
        """
        Delete a project and its fund.

        Raises:
            Unauthorized: caller is not an admin
            NotFound: project does not exist
            FundNotEmpty: the project fund still holds money
        """
        AccessGate.require_operation(user, "project.delete")

        with cls.atomic():
            project = Project.objects.select_for_update().filter(id=project_id).first()
            if project is None:
                raise cls._not_found(project_id)

            fund = Fund.objects.select_for_update().filter(project=project).first()
            if fund is not None and fund.balance != 0:
                raise FundNotEmpty(
                    f"Project fund '{fund.name}' still holds {fund.balance}",
                    details={"project_id": project_id, "fund_id": fund.id, "balance": fund.balance},
                )

            name = project.name
            if fund is not None:
                fund.delete()
            project.delete()
            ActivityLogService.record(user, "project.delete", "project", project_id, f"Deleted project '{name}'")

        logger.info("Project deleted", extra={"project_id": project_id, "user_id": user.id})

    @classmethod
    def assign_user(cls, actor, project_id: int, user_id: int) -> tuple[ProjectAssignment, bool]:
        """
        Assign a user to a project. Idempotent.

        Returns:
            (assignment, created)
        """
        AccessGate.require_operation(actor, "user.assignProject")

        with cls.atomic():
            project = Project.objects.filter(id=project_id).first()
            if project is None:
                raise cls._not_found(project_id)
            user = get_user_model().objects.filter(id=user_id).first()
            if user is None:
                raise NotFound(
                    f"User {user_id} not found",
                    error_code="USER_NOT_FOUND",
                    details={"user_id": user_id},
                )
            assignment, created = ProjectAssignment.objects.get_or_create(
                user=user,
                project=project,
                defaults={"assigned_by": actor},
            )
            if created:
                ActivityLogService.record(
                    actor,
                    "user.assignProject",
                    "project",
                    project.id,
                    f"Assigned {user.email} to '{project.name}'",
                )
        return assignment, created

    @classmethod
    def unassign_user(cls, actor, project_id: int, user_id: int) -> None:
        """Remove a user from a project. NotFound when they were not assigned."""
        AccessGate.require_operation(actor, "user.removeProject")

        with cls.atomic():
            deleted, _ = ProjectAssignment.objects.filter(
                user_id=user_id, project_id=project_id
            ).delete()
            if not deleted:
                raise NotFound(
                    f"User {user_id} is not assigned to project {project_id}",
                    error_code="ASSIGNMENT_NOT_FOUND",
                    details={"user_id": user_id, "project_id": project_id},
                )
            ActivityLogService.record(
                actor,
                "user.removeProject",
                "project",
                project_id,
                f"Removed user {user_id} from project",
            )
