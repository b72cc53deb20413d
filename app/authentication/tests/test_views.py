"""API tests for /api/v1/auth/."""

import pytest
from rest_framework import status

TOKEN_URL = "/api/v1/auth/token/"
ME_URL = "/api/v1/auth/me/"


@pytest.mark.django_db
class TestAuthEndpoints:
    def test_obtain_token_and_fetch_me(self, api_client, user):
        token = api_client.post(
            TOKEN_URL, {"email": "clerk@example.com", "password": "ClerkPass123!"}, format="json"
        )
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.data['access']}")

        response = api_client.get(ME_URL)

        assert token.status_code == status.HTTP_200_OK
        assert response.status_code == status.HTTP_200_OK
        assert response.data["email"] == "clerk@example.com"
        assert response.data["role"] == "user"
        assert "manage_project_transactions" in response.data["effective_permissions"]

    def test_wrong_password(self, api_client, user):
        response = api_client.post(TOKEN_URL, {"email": "clerk@example.com", "password": "nope"}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_me_requires_authentication(self, api_client):
        assert api_client.get(ME_URL).status_code == status.HTTP_401_UNAUTHORIZED
