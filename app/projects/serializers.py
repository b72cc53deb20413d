"""
DRF serializers for the projects app.

Related files:
    - services.py: ProjectService
    - views.py: Project API views
"""

from __future__ import annotations

from rest_framework import serializers

from projects.models import Project, ProjectAssignment


class ProjectSerializer(serializers.ModelSerializer):
    """Project with its fund balance (null until the fund exists)."""

    fund_balance = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            "id",
            "name",
            "description",
            "start_date",
            "status",
            "progress",
            "budget",
            "spent",
            "created_by",
            "fund_balance",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_fund_balance(self, obj) -> int | None:
        fund = getattr(obj, "fund", None)
        return fund.balance if fund is not None else None


class ProjectCreateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = ["name", "description", "start_date", "status", "progress", "budget"]
        extra_kwargs = {
            "progress": {"min_value": 0, "max_value": 100},
        }


class ProjectAssignmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProjectAssignment
        fields = ["id", "user", "project", "assigned_by", "assigned_at"]
        read_only_fields = fields


class AssignUserSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
