"""
Factory Boy factories for project models.

Usage:
    from projects.tests.factories import ProjectFactory, ProjectAssignmentFactory

    project = ProjectFactory(name="Tower B")
    ProjectAssignmentFactory(project=project, user=user)
"""

import factory

from authentication.tests.factories import UserFactory
from projects.models import Employee, Project, ProjectAssignment, ProjectStatus


class ProjectFactory(factory.django.DjangoModelFactory):
    """Factory for Project; does not create the project fund."""

    class Meta:
        model = Project

    name = factory.Sequence(lambda n: f"Project {n}")
    description = factory.Faker("sentence")
    status = ProjectStatus.ACTIVE
    progress = 0
    budget = 1_000_000


class ProjectAssignmentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProjectAssignment

    user = factory.SubFactory(UserFactory)
    project = factory.SubFactory(ProjectFactory)


class EmployeeFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Employee

    name = factory.Faker("name")
    salary = 50_000
    assigned_project = factory.SubFactory(ProjectFactory)
