"""
Pytest fixtures for finance tests.

Provides users in each role, a project with an assigned member, and the
admin/project funds in the states the scenarios start from.

Usage:
    def test_deposit(admin, admin_fund, project):
        FundTransferService.deposit(admin, project.id, 200_000)
"""

from unittest.mock import MagicMock, patch

import pytest
from rest_framework.test import APIClient

from authentication.models import UserRole
from authentication.tests.factories import AdminFactory, ManagerFactory, UserFactory
from finance.tests.factories import AdminFundFactory, ProjectFundFactory
from projects.tests.factories import ProjectAssignmentFactory, ProjectFactory


# =============================================================================
# Users
# =============================================================================


@pytest.fixture
def admin(db):
    """Bootstrap admin; owns the admin fund."""
    return AdminFactory()


@pytest.fixture
def manager(db):
    return ManagerFactory()


@pytest.fixture
def member(db):
    """Regular user, assigned to `project` via the project fixture."""
    return UserFactory()


@pytest.fixture
def outsider(db):
    """Regular user with no project assignments."""
    return UserFactory()


@pytest.fixture
def viewer(db):
    return UserFactory(role=UserRole.VIEWER)


# =============================================================================
# Projects and funds
# =============================================================================


@pytest.fixture
def project(db, member):
    project = ProjectFactory(name="Tower B")
    ProjectAssignmentFactory(project=project, user=member)
    return project


@pytest.fixture
def other_project(db):
    return ProjectFactory(name="Bridge")


@pytest.fixture
def admin_fund(admin):
    """Admin fund holding 1,000,000."""
    return AdminFundFactory(owner=admin, balance=1_000_000)


@pytest.fixture
def project_fund(project):
    return ProjectFundFactory(project=project)


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def mock_redis():
    """Mock Redis connection used by DistributedLock."""
    mock_redis = MagicMock()
    mock_redis.set.return_value = True
    mock_redis.eval.return_value = 1

    with patch("finance.locks.get_redis_connection", return_value=mock_redis):
        yield mock_redis


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(api_client, admin):
    api_client.force_authenticate(user=admin)
    return api_client


@pytest.fixture
def member_client(api_client, member):
    api_client.force_authenticate(user=member)
    return api_client
