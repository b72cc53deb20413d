"""
Tests for EditPermissionService.

Grant is a toggle per target; at most one active grant exists per user
and per project, and grants lapse after TRANSACTION_EDIT_PERMISSION_HOURS.
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from finance.exceptions import InvalidTarget, NotFound, NotFoundOrInactive, Unauthorized
from finance.models import TransactionEditPermission
from finance.services import AccessGate, EditPermissionService
from finance.state_machines import EditPermissionStatus
from finance.tests.factories import TransactionEditPermissionFactory


@pytest.mark.django_db
class TestGrant:
    def test_grants_for_42_hours(self, admin, member):
        with freeze_time("2026-03-02 08:00:00"):
            result = EditPermissionService.grant(admin, user_id=member.id, reason="Fix typos")

        permission = result.permission
        assert result.action == "granted"
        assert permission.is_active is True
        assert permission.status == EditPermissionStatus.ACTIVE
        assert permission.granted_by == admin
        assert permission.expires_at - permission.granted_at == timedelta(hours=42)
        assert permission.reason == "Fix typos"

    def test_second_grant_toggles_off(self, admin, member):
        granted = EditPermissionService.grant(admin, user_id=member.id).permission

        result = EditPermissionService.grant(admin, user_id=member.id)

        assert result.action == "revoked"
        assert result.permission.id == granted.id
        granted.refresh_from_db()
        assert granted.is_active is False
        assert granted.status == EditPermissionStatus.REVOKED
        assert granted.revoked_by == admin
        assert granted.revoked_at is not None
        assert TransactionEditPermission.objects.filter(user=member, is_active=True).count() == 0

    def test_third_grant_creates_new_row(self, admin, member):
        EditPermissionService.grant(admin, user_id=member.id)
        EditPermissionService.grant(admin, user_id=member.id)

        result = EditPermissionService.grant(admin, user_id=member.id)

        assert result.action == "granted"
        assert TransactionEditPermission.objects.filter(user=member).count() == 2
        assert TransactionEditPermission.objects.filter(user=member, is_active=True).count() == 1

    def test_stale_active_grant_is_expired_then_replaced(self, admin, member):
        with freeze_time("2026-03-01 00:00:00"):
            stale = EditPermissionService.grant(admin, user_id=member.id).permission

        with freeze_time("2026-03-03 00:00:00"):
            result = EditPermissionService.grant(admin, user_id=member.id)

        stale.refresh_from_db()
        assert result.action == "granted"
        assert result.permission.id != stale.id
        assert stale.status == EditPermissionStatus.EXPIRED
        assert stale.is_active is False

    def test_project_grant(self, manager, project):
        result = EditPermissionService.grant(manager, project_id=project.id)

        assert result.permission.project == project
        assert result.permission.user is None

    @pytest.mark.parametrize("target", [{}, {"user_id": 1, "project_id": 1}])
    def test_requires_exactly_one_target(self, admin, target):
        with pytest.raises(InvalidTarget):
            EditPermissionService.grant(admin, **target)

    def test_regular_user_cannot_grant(self, member, outsider):
        with pytest.raises(Unauthorized):
            EditPermissionService.grant(member, user_id=outsider.id)

    def test_unknown_user(self, admin):
        with pytest.raises(NotFound) as exc_info:
            EditPermissionService.grant(admin, user_id=555_555)

        assert exc_info.value.error_code == "USER_NOT_FOUND"


@pytest.mark.django_db
class TestRevoke:
    def test_revokes_active_grant(self, admin, member):
        permission = EditPermissionService.grant(admin, user_id=member.id).permission

        revoked = EditPermissionService.revoke(permission.id, admin, reason="Done")

        assert revoked.status == EditPermissionStatus.REVOKED
        assert revoked.reason == "Done"
        assert AccessGate.can_edit_transactions(member) is False

    def test_revoking_twice_is_not_found_or_inactive(self, admin, member):
        permission = EditPermissionService.grant(admin, user_id=member.id).permission
        EditPermissionService.revoke(permission.id, admin)

        with pytest.raises(NotFoundOrInactive):
            EditPermissionService.revoke(permission.id, admin)

    def test_unknown_grant(self, admin):
        with pytest.raises(NotFoundOrInactive):
            EditPermissionService.revoke(31_337, admin)


@pytest.mark.django_db
class TestCheckAndExpiry:
    def test_check_finds_user_or_project_grant(self, admin, member, project):
        assert EditPermissionService.check(member, project_id=project.id) is None

        project_grant = EditPermissionService.grant(admin, project_id=project.id).permission

        assert EditPermissionService.check(member, project_id=project.id) == project_grant
        assert EditPermissionService.check(member) is None

    def test_grant_stops_working_after_expiry(self, admin, member):
        with freeze_time("2026-03-02 08:00:00"):
            EditPermissionService.grant(admin, user_id=member.id)
            assert AccessGate.can_edit_transactions(member) is True

        with freeze_time("2026-03-04 02:00:01"):
            assert AccessGate.can_edit_transactions(member) is False

    def test_expire_sweep_counts_and_is_idempotent(self, member, outsider):
        now = timezone.now()
        TransactionEditPermissionFactory(
            user=member, granted_at=now - timedelta(hours=50), expires_at=now - timedelta(hours=8)
        )
        TransactionEditPermissionFactory(
            user=outsider, granted_at=now - timedelta(hours=43), expires_at=now - timedelta(hours=1)
        )
        fresh = TransactionEditPermissionFactory()

        assert EditPermissionService.expire_sweep() == 2
        assert EditPermissionService.expire_sweep() == 0

        assert TransactionEditPermission.objects.filter(status=EditPermissionStatus.EXPIRED).count() == 2
        fresh.refresh_from_db()
        assert fresh.is_active is True

    def test_list_helpers(self, admin, member, project):
        user_grant = EditPermissionService.grant(admin, user_id=member.id).permission
        project_grant = EditPermissionService.grant(admin, project_id=project.id).permission

        assert set(EditPermissionService.list_active()) == {user_grant, project_grant}
        assert list(EditPermissionService.list_for_user(member.id)) == [user_grant]
        assert list(EditPermissionService.list_for_project(project.id)) == [project_grant]

    def test_non_admin_sees_own_and_assigned_project_grants(self, admin, member, outsider, project, other_project):
        own = EditPermissionService.grant(admin, user_id=member.id).permission
        on_project = EditPermissionService.grant(admin, project_id=project.id).permission
        EditPermissionService.grant(admin, user_id=outsider.id)
        EditPermissionService.grant(admin, project_id=other_project.id)

        assert set(EditPermissionService.list_active(viewer=member)) == {own, on_project}
        assert list(EditPermissionService.list_for_user(outsider.id, viewer=member)) == []
        assert list(EditPermissionService.list_for_project(other_project.id, viewer=member)) == []
        assert len(EditPermissionService.list_active(viewer=admin)) == 4

    def test_granter_sees_grants_they_issued(self, manager, outsider):
        issued = EditPermissionService.grant(manager, user_id=outsider.id).permission

        assert list(EditPermissionService.list_active(viewer=manager)) == [issued]
