"""
Tests for core views.
"""

import pytest
from rest_framework import status

from core.exceptions import NotFoundError
from core.views import application_error_response


@pytest.mark.django_db
def test_health_check_reports_database_and_cache(client):
    response = client.get("/health/")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "database": "connected",
        "cache": "connected",
    }


def test_application_error_response_uses_error_status():
    response = application_error_response(
        NotFoundError("Project 7 not found", error_code="PROJECT_NOT_FOUND")
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.data["error_code"] == "PROJECT_NOT_FOUND"
