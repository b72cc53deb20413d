"""Tests for the catalog-backed DRF permission classes."""

from unittest.mock import MagicMock

import pytest
from django.contrib.auth.models import AnonymousUser

from authentication.models import UserRole
from authentication.permissions import HasOperationPermission, IsAdminRole, user_can_execute
from authentication.tests.factories import UserFactory


def _view(action, operation_map):
    view = MagicMock()
    view.action = action
    view.operation_map = operation_map
    return view


def _request(user):
    request = MagicMock()
    request.user = user
    return request


class TestUserCanExecute:
    def test_anonymous_denied(self):
        assert user_can_execute(AnonymousUser(), "transaction.list") is False

    def test_inactive_denied(self):
        user = UserFactory.build(is_active=False)

        assert user_can_execute(user, "transaction.list") is False

    def test_admin_allowed_everything(self):
        admin = UserFactory.build(role=UserRole.ADMIN, permissions=["view_dashboard"])

        assert user_can_execute(admin, "ledger.reclassify") is True


class TestHasOperationPermission:
    def test_unmapped_action_allowed(self):
        permission = HasOperationPermission()

        assert permission.has_permission(_request(UserFactory.build()), _view("check", {})) is True

    def test_mapped_action_checked(self):
        permission = HasOperationPermission()
        viewer = UserFactory.build(role=UserRole.VIEWER)

        allowed = permission.has_permission(_request(viewer), _view("create", {"create": "fund.deposit"}))

        assert allowed is False
        assert "fund.deposit" in permission.message


class TestIsAdminRole:
    @pytest.mark.parametrize("role, expected", [(UserRole.ADMIN, True), (UserRole.MANAGER, False)])
    def test_roles(self, role, expected):
        user = UserFactory.build(role=role)

        assert IsAdminRole().has_permission(_request(user), None) is expected
