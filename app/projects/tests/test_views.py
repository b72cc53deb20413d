"""API tests for /api/v1/projects/."""

import pytest
from rest_framework import status

from finance.models import Fund

PROJECTS_URL = "/api/v1/projects/"


@pytest.mark.django_db
class TestProjectEndpoints:
    def test_create(self, api_client, admin):
        api_client.force_authenticate(user=admin)

        response = api_client.post(PROJECTS_URL, {"name": "Quay", "budget": 10_000}, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["fund_balance"] == 0
        assert Fund.objects.filter(project_id=response.data["id"]).exists()

    def test_progress_above_100_rejected(self, api_client, admin):
        api_client.force_authenticate(user=admin)

        response = api_client.post(PROJECTS_URL, {"name": "Quay", "progress": 101}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_member_lists_assigned_projects(self, api_client, member, project):
        api_client.force_authenticate(user=member)

        response = api_client.get(PROJECTS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [row["name"] for row in response.data["results"]] == ["Riverside"]

    def test_delete_requires_admin(self, api_client, manager, project):
        api_client.force_authenticate(user=manager)

        response = api_client.delete(f"{PROJECTS_URL}{project.id}/")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_assign_and_remove(self, api_client, admin, manager, project):
        api_client.force_authenticate(user=admin)
        url = f"{PROJECTS_URL}{project.id}/assignments/"

        assigned = api_client.post(url, {"user_id": manager.id}, format="json")
        removed = api_client.delete(url, {"user_id": manager.id}, format="json")

        assert assigned.status_code == status.HTTP_201_CREATED
        assert removed.status_code == status.HTTP_204_NO_CONTENT
