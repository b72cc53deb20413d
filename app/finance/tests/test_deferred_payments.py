"""
Tests for DeferredPaymentService.

The installment engine commits the payment update first and links the
expense transaction second; a failed link is reported, not rolled back.
"""

import pytest
from django.db import DatabaseError

from core.exceptions import ValidationError
from finance.exceptions import InvalidAmount, NotFound, OverpaymentRejected, Unauthorized
from finance.models import ActivityLog, DeferredPayment, Fund, LedgerEntry, Transaction
from finance.services import DeferredPaymentService
from finance.state_machines import DeferredPaymentStatus, LedgerEntryType, TransactionType
from finance.tests.factories import DeferredPaymentFactory, ExpenseTypeFactory


@pytest.fixture
def payment(admin, project):
    return DeferredPaymentService.create_deferred_payment(
        admin,
        beneficiary_name="Concrete supplier",
        total_amount=90_000,
        project_id=project.id,
        installments=3,
    )


@pytest.mark.django_db
class TestCreateDeferredPayment:
    def test_starts_pending_with_full_remaining(self, payment, admin):
        assert payment.status == DeferredPaymentStatus.PENDING
        assert payment.paid_amount == 0
        assert payment.remaining_amount == 90_000
        assert payment.user == admin
        assert ActivityLog.objects.filter(action="deferredPayment.create", entity_id=payment.id).exists()

    @pytest.mark.parametrize("total", [0, -1, 10.5])
    def test_rejects_invalid_total(self, admin, total):
        with pytest.raises(InvalidAmount):
            DeferredPaymentService.create_deferred_payment(admin, "Supplier", total)

    def test_requires_beneficiary(self, admin):
        with pytest.raises(ValidationError) as exc_info:
            DeferredPaymentService.create_deferred_payment(admin, "   ", 1_000)

        assert exc_info.value.error_code == "BENEFICIARY_REQUIRED"

    def test_outsider_cannot_create_for_project(self, outsider, project):
        with pytest.raises(Unauthorized):
            DeferredPaymentService.create_deferred_payment(
                outsider, "Supplier", 1_000, project_id=project.id
            )

    def test_unknown_project(self, admin):
        with pytest.raises(NotFound):
            DeferredPaymentService.create_deferred_payment(admin, "Supplier", 1_000, project_id=424242)


@pytest.mark.django_db
class TestPayInstallment:
    def test_installments_move_through_states(self, payment, admin):
        first = DeferredPaymentService.pay_installment(payment.id, 30_000, admin)

        assert first.payment.status == DeferredPaymentStatus.PARTIAL
        assert first.payment.paid_amount == 30_000
        assert first.payment.remaining_amount == 60_000
        assert first.payment.completed_at is None

        second = DeferredPaymentService.pay_installment(payment.id, 60_000, admin)

        payment.refresh_from_db()
        assert second.is_partial_success is False
        assert payment.status == DeferredPaymentStatus.COMPLETED
        assert payment.paid_amount == 90_000
        assert payment.remaining_amount == 0
        assert payment.completed_at is not None

    def test_overpayment_rejected_by_default(self, payment, admin):
        DeferredPaymentService.pay_installment(payment.id, 90_000, admin)

        with pytest.raises(OverpaymentRejected) as exc_info:
            DeferredPaymentService.pay_installment(payment.id, 10_000, admin)

        assert exc_info.value.details["remaining_amount"] == 0
        payment.refresh_from_db()
        assert payment.paid_amount == 90_000
        assert payment.transactions.count() == 1

    def test_overpayment_allowed_by_policy(self, payment, admin, settings):
        settings.DEFERRED_PAYMENT_OVERPAYMENT_POLICY = "allow"
        DeferredPaymentService.pay_installment(payment.id, 90_000, admin)
        completed_at = DeferredPayment.objects.get(id=payment.id).completed_at

        result = DeferredPaymentService.pay_installment(payment.id, 10_000, admin)

        assert result.payment.status == DeferredPaymentStatus.COMPLETED
        assert result.payment.paid_amount == 100_000
        assert result.payment.remaining_amount == -10_000
        assert result.payment.completed_at == completed_at

    def test_records_linked_expense_without_touching_funds(self, payment, admin, admin_fund):
        result = DeferredPaymentService.pay_installment(payment.id, 30_000, admin)

        txn = result.transaction
        assert txn.type == TransactionType.EXPENSE
        assert txn.amount == 30_000
        assert txn.deferred_payment_id == payment.id
        assert txn.fund_id is None
        assert txn.description == "Installment for Concrete supplier"
        assert txn.expense_type == "Deferred payments"
        entry = LedgerEntry.objects.get(transaction=txn)
        assert entry.entry_type == LedgerEntryType.DEFERRED_PAYMENT
        assert Fund.objects.get(id=admin_fund.id).balance == 1_000_000

    def test_prefers_expense_type_named_after_beneficiary(self, payment, admin):
        ExpenseTypeFactory(name="Concrete supplier")

        result = DeferredPaymentService.pay_installment(payment.id, 1_000, admin)

        assert result.transaction.expense_type == "Concrete supplier"

    def test_linkage_failure_keeps_installment(self, payment, admin, mocker):
        mocker.patch.object(
            DeferredPaymentService,
            "_record_installment_transaction",
            side_effect=DatabaseError("ledger table unavailable"),
        )

        result = DeferredPaymentService.pay_installment(payment.id, 30_000, admin)

        assert result.is_partial_success is True
        assert result.transaction is None
        assert result.linkage_error == "ledger table unavailable"
        payment.refresh_from_db()
        assert payment.paid_amount == 30_000
        assert payment.status == DeferredPaymentStatus.PARTIAL
        assert Transaction.objects.count() == 0

    @pytest.mark.parametrize("amount", [0, -100])
    def test_invalid_amount(self, payment, admin, amount):
        with pytest.raises(InvalidAmount):
            DeferredPaymentService.pay_installment(payment.id, amount, admin)

    def test_unknown_payment(self, admin):
        with pytest.raises(NotFound) as exc_info:
            DeferredPaymentService.pay_installment(987_654, 100, admin)

        assert exc_info.value.error_code == "DEFERRED_PAYMENT_NOT_FOUND"

    def test_outsider_cannot_pay(self, payment, outsider):
        with pytest.raises(Unauthorized):
            DeferredPaymentService.pay_installment(payment.id, 100, outsider)

    def test_history_lists_installments_oldest_first(self, payment, admin):
        DeferredPaymentService.pay_installment(payment.id, 10_000, admin)
        DeferredPaymentService.pay_installment(payment.id, 20_000, admin)

        history = list(DeferredPaymentService.get_payment_history(payment.id))

        assert [txn.amount for txn in history] == [10_000, 20_000]


@pytest.mark.django_db
class TestDeleteDeferredPayment:
    def test_manager_may_delete(self, payment, manager):
        DeferredPaymentService.delete_deferred_payment(payment.id, manager)

        assert not DeferredPayment.objects.filter(id=payment.id).exists()

    def test_regular_user_may_not_delete(self, payment, member):
        with pytest.raises(Unauthorized):
            DeferredPaymentService.delete_deferred_payment(payment.id, member)

    def test_installment_transactions_survive_unlinked(self, payment, admin):
        result = DeferredPaymentService.pay_installment(payment.id, 10_000, admin)

        DeferredPaymentService.delete_deferred_payment(payment.id, admin)

        txn = Transaction.objects.get(id=result.transaction.id)
        assert txn.deferred_payment_id is None


@pytest.mark.django_db
class TestListDeferredPayments:
    def test_member_sees_project_payments_and_own(self, member, project, other_project):
        visible = DeferredPaymentFactory(project=project)
        own = DeferredPaymentFactory(project=None, user=member)
        DeferredPaymentFactory(project=other_project)

        assert set(DeferredPaymentService.list_deferred_payments(member)) == {visible, own}

    def test_filter_by_status(self, admin, project):
        DeferredPaymentFactory(project=project)
        done = DeferredPaymentFactory(
            project=project,
            paid_amount=90_000,
            status=DeferredPaymentStatus.COMPLETED,
        )

        result = DeferredPaymentService.list_deferred_payments(admin, status=DeferredPaymentStatus.COMPLETED)

        assert list(result) == [done]
