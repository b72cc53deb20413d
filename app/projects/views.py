"""
ViewSets for the projects API.

URL Structure:
    /api/v1/projects/                       GET, POST
    /api/v1/projects/{id}/                  GET, DELETE
    /api/v1/projects/{id}/assignments/      POST, DELETE
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from authentication.permissions import HasOperationPermission
from core.exceptions import BaseApplicationError
from core.views import application_error_response
from projects.serializers import (
    AssignUserSerializer,
    ProjectAssignmentSerializer,
    ProjectCreateSerializer,
    ProjectSerializer,
)
from projects.services import ProjectService


@extend_schema_view(
    list=extend_schema(operation_id="list_projects", summary="List projects", tags=["Projects"]),
    create=extend_schema(
        operation_id="create_project",
        summary="Create project",
        tags=["Projects"],
        request=ProjectCreateSerializer,
    ),
    retrieve=extend_schema(operation_id="get_project", summary="Get project", tags=["Projects"]),
    destroy=extend_schema(
        operation_id="delete_project",
        summary="Delete project (fund must be empty)",
        tags=["Projects"],
    ),
)
class ProjectViewSet(viewsets.GenericViewSet):
    """
    Projects.

    list:
        Projects the user is assigned to (all for admins).

    create:
        Create a project together with its empty fund.

    destroy:
        Admin only; refused with 409 while the fund holds money.

    assignments:
        POST assigns a user, DELETE removes them (admin only).
    """

    permission_classes = [IsAuthenticated, HasOperationPermission]
    serializer_class = ProjectSerializer
    operation_map = {
        "list": "project.list",
        "retrieve": "project.list",
        "create": "project.create",
        "destroy": "project.delete",
    }

    def list(self, request):
        queryset = ProjectService.list_for_user(request.user)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ProjectSerializer(page, many=True).data)
        return Response(ProjectSerializer(queryset, many=True).data)

    def create(self, request):
        serializer = ProjectCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            project = ProjectService.create_project(request.user, **serializer.validated_data)
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        try:
            project = ProjectService.get_project(request.user, int(pk))
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(ProjectSerializer(project).data)

    def destroy(self, request, pk=None):
        try:
            ProjectService.delete_project(request.user, int(pk))
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="manage_project_assignment",
        summary="Assign or remove a user",
        tags=["Projects"],
        request=AssignUserSerializer,
    )
    @action(detail=True, methods=["post", "delete"])
    def assignments(self, request, pk=None):
        serializer = AssignUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user_id = serializer.validated_data["user_id"]
        try:
            if request.method == "DELETE":
                ProjectService.unassign_user(request.user, int(pk), user_id)
                return Response(status=status.HTTP_204_NO_CONTENT)
            assignment, created = ProjectService.assign_user(request.user, int(pk), user_id)
        except BaseApplicationError as e:
            return application_error_response(e)
        return Response(
            ProjectAssignmentSerializer(assignment).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
