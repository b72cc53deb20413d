"""Fixtures for authentication tests."""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import AdminFactory, UserFactory


@pytest.fixture
def user(db):
    return UserFactory(email="clerk@example.com", password="ClerkPass123!")


@pytest.fixture
def admin(db):
    return AdminFactory()


@pytest.fixture
def api_client():
    return APIClient()
