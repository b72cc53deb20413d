"""Tests for the User model and its manager."""

import pytest

from authentication.models import User, UserRole
from authentication.tests.factories import AdminFactory, UserFactory


@pytest.mark.django_db
class TestUserManager:
    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email="Clerk@EXAMPLE.com", password="pw12345678")

        assert user.email == "Clerk@example.com"
        assert user.role == UserRole.USER
        assert user.check_password("pw12345678")

    def test_create_user_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email="")

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(email="root@example.com", password="pw")

        assert user.is_admin is True
        assert user.is_staff is True

    def test_bootstrap_admin_is_first_active_admin(self):
        first = AdminFactory()
        AdminFactory()
        AdminFactory(is_active=False)

        assert User.objects.bootstrap_admin() == first

    def test_bootstrap_admin_none_without_admins(self):
        UserFactory()

        assert User.objects.bootstrap_admin() is None


class TestEffectivePermissions:
    def test_role_defaults_when_empty(self):
        user = UserFactory.build(role=UserRole.VIEWER, permissions=[])

        assert "view_transactions" in user.effective_permissions
        assert "manage_transactions" not in user.effective_permissions

    def test_explicit_permissions_replace_defaults(self):
        user = UserFactory.build(role=UserRole.MANAGER, permissions=["view_documents"])

        assert user.effective_permissions == ["view_documents"]
        assert user.has_app_permission("view_projects") is False
