"""
Sequence tests for fund movements and deferred payment installments.

Each case replays a seeded random sequence of operations and checks the
ledger invariants after every step, successful or not.
"""

import random

import pytest

from finance.exceptions import InsufficientFunds, OverpaymentRejected
from finance.models import Fund, Transaction
from finance.services import DeferredPaymentService, FundTransferService
from finance.state_machines import DeferredPaymentStatus, TransactionType
from projects.tests.factories import ProjectFactory

SEEDS = range(8)


def _balances():
    return dict(Fund.objects.values_list("id", "balance"))


@pytest.mark.django_db
class TestFundMovementSequences:
    @pytest.mark.parametrize("seed", SEEDS)
    def test_balances_are_conserved(self, seed, admin, admin_fund):
        rng = random.Random(seed)
        projects = [ProjectFactory(), ProjectFactory()]
        withdrawn = 0

        for _ in range(40):
            project = rng.choice(projects)
            amount = rng.randint(1, 150_000)
            before = _balances()
            try:
                if rng.random() < 0.5:
                    FundTransferService.deposit(admin, project.id, amount)
                else:
                    FundTransferService.withdraw(admin, project.id, amount)
                    withdrawn += amount
            except InsufficientFunds:
                after = _balances()
                assert {k: after[k] for k in before} == before

            balances = _balances()
            assert all(balance >= 0 for balance in balances.values())
            assert sum(balances.values()) == 1_000_000 - withdrawn

        expenses = Transaction.objects.filter(type=TransactionType.EXPENSE)
        assert sum(expenses.values_list("amount", flat=True)) == withdrawn


@pytest.mark.django_db
class TestInstallmentSequences:
    def _payment(self, admin, total):
        return DeferredPaymentService.create_deferred_payment(
            admin, beneficiary_name="Steel supplier", total_amount=total
        )

    @pytest.mark.parametrize("seed", SEEDS)
    def test_reject_policy_keeps_totals(self, seed, admin, settings):
        settings.DEFERRED_PAYMENT_OVERPAYMENT_POLICY = "reject"
        rng = random.Random(seed)
        total = rng.randint(10_000, 100_000)
        payment = self._payment(admin, total)
        accepted = 0

        for _ in range(30):
            amount = rng.randint(1, total // 2)
            try:
                DeferredPaymentService.pay_installment(payment.id, amount, admin)
                accepted += amount
            except OverpaymentRejected:
                pass

            payment.refresh_from_db()
            assert payment.paid_amount + payment.remaining_amount == payment.total_amount
            assert payment.paid_amount == accepted
            assert payment.remaining_amount >= 0
            assert (payment.status == DeferredPaymentStatus.COMPLETED) == (payment.remaining_amount <= 0)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_allow_policy_keeps_totals(self, seed, admin, settings):
        settings.DEFERRED_PAYMENT_OVERPAYMENT_POLICY = "allow"
        rng = random.Random(seed)
        total = rng.randint(10_000, 100_000)
        payment = self._payment(admin, total)

        for _ in range(15):
            result = DeferredPaymentService.pay_installment(payment.id, rng.randint(1, total // 3), admin)

            payment.refresh_from_db()
            assert result.transaction is not None
            assert payment.paid_amount + payment.remaining_amount == payment.total_amount
            assert (payment.status == DeferredPaymentStatus.COMPLETED) == (payment.remaining_amount <= 0)

        linked = Transaction.objects.filter(deferred_payment=payment)
        assert sum(linked.values_list("amount", flat=True)) == payment.paid_amount
