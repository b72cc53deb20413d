"""Fixtures for project tests."""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import AdminFactory, ManagerFactory, UserFactory
from projects.tests.factories import ProjectAssignmentFactory, ProjectFactory


@pytest.fixture
def admin(db):
    return AdminFactory()


@pytest.fixture
def manager(db):
    return ManagerFactory()


@pytest.fixture
def member(db):
    return UserFactory()


@pytest.fixture
def project(db, member):
    project = ProjectFactory(name="Riverside")
    ProjectAssignmentFactory(project=project, user=member)
    return project


@pytest.fixture
def api_client():
    return APIClient()
