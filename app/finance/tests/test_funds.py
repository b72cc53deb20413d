"""
Tests for FundTransferService.

Covers deposits from the admin fund, withdrawals from project funds and
admin fund transactions, including the balance checks that must leave
nothing behind when they fail.
"""

import pytest

from core.exceptions import ValidationError
from finance.exceptions import InsufficientFunds, InvalidAmount, NotFound, Unauthorized
from finance.models import ActivityLog, Fund, LedgerEntry, Transaction
from finance.services import FundTransferService
from finance.services.funds import ADMIN_FUND_NAME
from finance.state_machines import FundKind, LedgerEntryType, TransactionType
from finance.tests.factories import ExpenseTypeFactory, ProjectFundFactory


def _total_balance() -> int:
    return sum(Fund.objects.values_list("balance", flat=True))


@pytest.mark.django_db
class TestDeposit:
    def test_moves_money_from_admin_fund_to_project_fund(self, admin, admin_fund, project):
        result = FundTransferService.deposit(admin, project.id, 200_000, description="Initial budget")

        admin_fund.refresh_from_db()
        project.refresh_from_db()
        assert admin_fund.balance == 800_000
        assert project.fund.balance == 200_000
        assert result.admin_fund.balance == 800_000
        assert result.project_fund.balance == 200_000

        txn = result.transaction
        assert txn.type == TransactionType.INCOME
        assert txn.amount == 200_000
        assert txn.project_id == project.id
        assert txn.fund_id == project.fund.id
        assert txn.source_fund_id == admin_fund.id
        assert txn.created_by == admin

    def test_creates_project_fund_on_first_deposit(self, admin, admin_fund, project):
        assert not Fund.objects.filter(project=project).exists()

        FundTransferService.deposit(admin, project.id, 1_000)

        fund = Fund.objects.get(project=project)
        assert fund.kind == FundKind.PROJECT
        assert fund.name == "Project fund: Tower B"
        assert fund.balance == 1_000

    def test_conserves_total_balance(self, admin, admin_fund, project):
        before = _total_balance()

        FundTransferService.deposit(admin, project.id, 123_456)

        assert _total_balance() == before

    def test_insufficient_admin_balance_leaves_nothing_behind(self, admin, admin_fund, project, project_fund):
        with pytest.raises(InsufficientFunds) as exc_info:
            FundTransferService.deposit(admin, project.id, 1_000_001)

        assert exc_info.value.available == 1_000_000
        assert exc_info.value.required == 1_000_001
        assert exc_info.value.fund_name == ADMIN_FUND_NAME
        admin_fund.refresh_from_db()
        project_fund.refresh_from_db()
        assert admin_fund.balance == 1_000_000
        assert project_fund.balance == 0
        assert Transaction.objects.count() == 0

    def test_without_admin_fund_raises_insufficient_funds(self, admin, project):
        with pytest.raises(InsufficientFunds):
            FundTransferService.deposit(admin, project.id, 100)

        assert Transaction.objects.count() == 0

    @pytest.mark.parametrize("amount", [0, -5, 1.5, "100", True])
    def test_rejects_non_positive_integer_amounts(self, admin, admin_fund, project, amount):
        with pytest.raises(InvalidAmount):
            FundTransferService.deposit(admin, project.id, amount)

    def test_unknown_project(self, admin, admin_fund):
        with pytest.raises(NotFound) as exc_info:
            FundTransferService.deposit(admin, 999_999, 100)

        assert exc_info.value.error_code == "PROJECT_NOT_FOUND"

    def test_assigned_member_may_deposit(self, member, admin_fund, project):
        result = FundTransferService.deposit(member, project.id, 5_000)

        assert result.project_fund.balance == 5_000

    def test_unassigned_user_is_unauthorized(self, outsider, admin_fund, project):
        with pytest.raises(Unauthorized):
            FundTransferService.deposit(outsider, project.id, 5_000)

        admin_fund.refresh_from_db()
        assert admin_fund.balance == 1_000_000

    def test_records_activity(self, admin, admin_fund, project):
        result = FundTransferService.deposit(admin, project.id, 100)

        log = ActivityLog.objects.get(action="fund.deposit")
        assert log.entity_type == "transaction"
        assert log.entity_id == result.transaction.id
        assert log.user == admin


@pytest.mark.django_db
class TestWithdraw:
    def test_withdraw_above_balance_fails_and_keeps_balances(self, admin, admin_fund, project):
        FundTransferService.deposit(admin, project.id, 200_000)

        with pytest.raises(InsufficientFunds) as exc_info:
            FundTransferService.withdraw(admin, project.id, 250_000)

        assert "available 200000" in str(exc_info.value)
        project.fund.refresh_from_db()
        admin_fund.refresh_from_db()
        assert project.fund.balance == 200_000
        assert admin_fund.balance == 800_000
        assert Transaction.objects.filter(type=TransactionType.INCOME).count() == 1
        assert Transaction.objects.filter(type=TransactionType.EXPENSE).count() == 0

    def test_debits_project_fund_and_classifies(self, admin, admin_fund, project):
        FundTransferService.deposit(admin, project.id, 200_000)

        result = FundTransferService.withdraw(admin, project.id, 50_000, description="Cement")

        assert result.project_fund.balance == 150_000
        txn = result.transaction
        assert txn.type == TransactionType.EXPENSE
        assert txn.fund_id == result.project_fund.id
        entry = LedgerEntry.objects.get(transaction=txn)
        assert entry.amount == 50_000
        assert entry.debit_amount == 50_000
        assert entry.entry_type == LedgerEntryType.GENERAL_EXPENSE

    def test_uses_matching_expense_type(self, admin, admin_fund, project):
        ExpenseTypeFactory(name="Materials")
        FundTransferService.deposit(admin, project.id, 10_000)

        result = FundTransferService.withdraw(admin, project.id, 1_000, expense_type="Materials")

        entry = LedgerEntry.objects.get(transaction=result.transaction)
        assert entry.account_name == "Materials"
        assert entry.entry_type == LedgerEntryType.CLASSIFIED

    def test_withdraw_entire_balance(self, member, admin_fund, project):
        FundTransferService.deposit(member, project.id, 7_000)

        result = FundTransferService.withdraw(member, project.id, 7_000)

        assert result.project_fund.balance == 0

    def test_unassigned_user_is_unauthorized(self, outsider, project, project_fund):
        with pytest.raises(Unauthorized):
            FundTransferService.withdraw(outsider, project.id, 1)

    def test_unknown_employee_leaves_balance_untouched(self, admin, admin_fund, project):
        FundTransferService.deposit(admin, project.id, 1_000)

        with pytest.raises(NotFound) as exc_info:
            FundTransferService.withdraw(admin, project.id, 100, employee_id=987_654)

        assert exc_info.value.error_code == "EMPLOYEE_NOT_FOUND"
        project.fund.refresh_from_db()
        assert project.fund.balance == 1_000
        assert Transaction.objects.filter(type=TransactionType.EXPENSE).count() == 0


@pytest.mark.django_db
class TestAdminTransaction:
    def test_income_creates_admin_fund(self, admin):
        result = FundTransferService.admin_transaction(admin, TransactionType.INCOME, 1_000_000)

        fund = Fund.objects.admin_fund()
        assert fund.owner == admin
        assert fund.name == ADMIN_FUND_NAME
        assert fund.balance == 1_000_000
        assert result.transaction.project_id is None
        assert result.transaction.fund_id == fund.id

    def test_expense_debits_admin_fund(self, admin, admin_fund):
        result = FundTransferService.admin_transaction(
            admin, TransactionType.EXPENSE, 300_000, expense_type="Office"
        )

        assert result.admin_fund.balance == 700_000
        assert LedgerEntry.objects.filter(transaction=result.transaction).exists()

    def test_expense_above_balance(self, admin, admin_fund):
        with pytest.raises(InsufficientFunds):
            FundTransferService.admin_transaction(admin, TransactionType.EXPENSE, 1_000_001)

        admin_fund.refresh_from_db()
        assert admin_fund.balance == 1_000_000

    def test_non_admin_is_unauthorized(self, manager, admin_fund):
        with pytest.raises(Unauthorized):
            FundTransferService.admin_transaction(manager, TransactionType.INCOME, 100)

    def test_unknown_type(self, admin, admin_fund):
        with pytest.raises(ValidationError) as exc_info:
            FundTransferService.admin_transaction(admin, "transfer", 100)

        assert exc_info.value.error_code == "INVALID_TRANSACTION_TYPE"

    def test_version_increments_on_each_balance_change(self, admin, admin_fund):
        start = admin_fund.version

        FundTransferService.admin_transaction(admin, TransactionType.INCOME, 1)
        FundTransferService.admin_transaction(admin, TransactionType.INCOME, 1)

        admin_fund.refresh_from_db()
        assert admin_fund.version == start + 2


@pytest.mark.django_db
class TestListFunds:
    def test_admin_sees_all_funds(self, admin, admin_fund, project_fund, other_project):
        assert set(FundTransferService.list_funds(admin)) == {admin_fund, project_fund}

    def test_member_sees_only_assigned_project_funds(self, member, admin_fund, project_fund, other_project):
        ProjectFundFactory(project=other_project)

        assert list(FundTransferService.list_funds(member)) == [project_fund]
