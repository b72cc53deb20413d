"""Tests for AccessGate predicates and scoping."""

import pytest

from authentication.tests.factories import UserFactory
from finance.exceptions import Unauthorized
from finance.models import Transaction
from finance.services import AccessGate
from finance.tests.factories import TransactionEditPermissionFactory, TransactionFactory


@pytest.mark.django_db
class TestProjectAccess:
    def test_admin_can_access_any_project(self, admin, other_project):
        assert AccessGate.can_access_project(admin, other_project.id) is True

    def test_assigned_user(self, member, project, other_project):
        assert AccessGate.can_access_project(member, project.id) is True
        assert AccessGate.can_access_project(member, other_project.id) is False

    def test_inactive_user_loses_access(self, member, project):
        member.is_active = False
        member.save()

        assert AccessGate.can_access_project(member, project.id) is False

    def test_inactive_admin_loses_access(self, admin, project):
        admin.is_active = False
        admin.save()

        assert AccessGate.can_access_project(admin, project.id) is False
        assert AccessGate.can_edit_transactions(admin) is False
        with pytest.raises(Unauthorized):
            AccessGate.require_admin(admin)

    def test_none_project_is_admin_only(self, admin, member):
        assert AccessGate.can_access_project(admin, None) is True
        assert AccessGate.can_access_project(member, None) is False

    def test_require_project_access_raises(self, outsider, project):
        with pytest.raises(Unauthorized) as exc_info:
            AccessGate.require_project_access(outsider, project.id)

        assert exc_info.value.details == {"project_id": project.id}
        assert exc_info.value.http_status == 403


@pytest.mark.django_db
class TestTransactionAccess:
    def test_project_transaction_follows_project_access(self, member, outsider, project):
        txn = TransactionFactory(project=project)

        assert AccessGate.can_access_transaction(member, txn.id) is True
        assert AccessGate.can_access_transaction(outsider, txn.id) is False

    def test_admin_level_transaction_hidden_from_non_admins(self, admin, member):
        txn = TransactionFactory(project=None)

        assert AccessGate.can_access_transaction(admin, txn.id) is True
        assert AccessGate.can_access_transaction(member, txn.id) is False

    def test_missing_transaction(self, member):
        assert AccessGate.can_access_transaction(member, 123_456) is False

    def test_delete_rights(self, admin, member, project):
        own = TransactionFactory(project=project, created_by=member)
        foreign = TransactionFactory(project=project)

        assert AccessGate.can_delete_transaction(member, own) is True
        assert AccessGate.can_delete_transaction(member, foreign) is False
        assert AccessGate.can_delete_transaction(admin, foreign) is True


@pytest.mark.django_db
class TestEditAccess:
    def test_admin_always_edits(self, admin):
        assert AccessGate.can_edit_transactions(admin) is True

    def test_user_needs_grant(self, member):
        assert AccessGate.can_edit_transactions(member) is False

        TransactionEditPermissionFactory(user=member)

        assert AccessGate.can_edit_transactions(member) is True

    def test_project_grant_covers_project_members(self, member, project, other_project):
        TransactionEditPermissionFactory(user=None, project=project)

        assert AccessGate.can_edit_transactions(member, project.id) is True
        assert AccessGate.can_edit_transactions(member, other_project.id) is False

    def test_inactive_grant_is_ignored(self, member):
        TransactionEditPermissionFactory(user=member, is_active=False)

        assert AccessGate.can_edit_transactions(member) is False


@pytest.mark.django_db
class TestScoping:
    def test_accessible_project_ids(self, admin, member, project, other_project):
        assert AccessGate.accessible_project_ids(admin) is None
        assert AccessGate.accessible_project_ids(member) == {project.id}

    def test_scope_by_project_hides_admin_rows(self, member, project, other_project):
        visible = TransactionFactory(project=project)
        TransactionFactory(project=other_project)
        TransactionFactory(project=None)

        scoped = AccessGate.scope_by_project(member, Transaction.objects.all())

        assert list(scoped) == [visible]

    def test_require_operation_uses_catalog(self):
        viewer = UserFactory.build(role="viewer")

        with pytest.raises(Unauthorized) as exc_info:
            AccessGate.require_operation(viewer, "fund.deposit")

        assert exc_info.value.details == {"operation": "fund.deposit"}
