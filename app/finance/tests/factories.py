"""
Factory Boy factories for finance models.

Factories write rows directly and skip the services, so they are for
arranging state. Use the services when the behaviour under test is the
balance movement itself.

Usage:
    from finance.tests.factories import AdminFundFactory, ProjectFundFactory

    admin_fund = AdminFundFactory(balance=1_000_000)
    project_fund = ProjectFundFactory(project=project)
"""

from datetime import timedelta

import factory
from django.utils import timezone

from authentication.tests.factories import AdminFactory, UserFactory
from finance.models import (
    DeferredPayment,
    ExpenseType,
    Fund,
    Transaction,
    TransactionEditPermission,
)
from finance.state_machines import FundKind, TransactionType
from projects.tests.factories import ProjectFactory


class AdminFundFactory(factory.django.DjangoModelFactory):
    """Admin fund owned by a fresh admin user."""

    class Meta:
        model = Fund

    name = "Admin fund"
    kind = FundKind.ADMIN
    balance = 0
    owner = factory.SubFactory(AdminFactory)
    project = None


class ProjectFundFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Fund

    kind = FundKind.PROJECT
    balance = 0
    owner = None
    project = factory.SubFactory(ProjectFactory)
    name = factory.LazyAttribute(lambda o: f"Project fund: {o.project.name}")


class TransactionFactory(factory.django.DjangoModelFactory):
    """Plain transaction row with no balance effect applied."""

    class Meta:
        model = Transaction

    type = TransactionType.EXPENSE
    amount = 10_000
    description = factory.Faker("sentence")
    project = factory.SubFactory(ProjectFactory)
    created_by = factory.SubFactory(UserFactory)


class ExpenseTypeFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ExpenseType

    name = factory.Sequence(lambda n: f"Expense type {n}")
    project = None
    is_active = True


class DeferredPaymentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = DeferredPayment

    beneficiary_name = factory.Faker("company")
    total_amount = 90_000
    paid_amount = 0
    remaining_amount = factory.LazyAttribute(lambda o: o.total_amount - o.paid_amount)
    project = factory.SubFactory(ProjectFactory)
    user = factory.SubFactory(UserFactory)


class TransactionEditPermissionFactory(factory.django.DjangoModelFactory):
    """Active user-scoped grant expiring in 42 hours."""

    class Meta:
        model = TransactionEditPermission

    user = factory.SubFactory(UserFactory)
    project = None
    granted_by = factory.SubFactory(AdminFactory)
    granted_at = factory.LazyFunction(timezone.now)
    expires_at = factory.LazyAttribute(lambda o: o.granted_at + timedelta(hours=42))
    is_active = True
