"""
Base service layer utilities.

Services hold business logic; views deal with HTTP and models with data.
Domain services raise subclasses of core.exceptions.BaseApplicationError for
expected failures and let unexpected errors propagate.

Usage:
    from core.services import BaseService

    class ProjectService(BaseService):
        @classmethod
        def create_project(cls, name, created_by):
            with cls.atomic():
                project = Project.objects.create(name=name, created_by=created_by)
                Fund.objects.create(kind=FundKind.PROJECT, project=project)

            cls.get_logger().info("Created project", extra={"project_id": project.id})
            return project
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for stateless service classes.

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Raise domain exceptions for rejected operations
        - Keep every multi-row write inside atomic()
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Return a logger named after the concrete service class."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around django.db.transaction.atomic() that makes the
        transaction boundary explicit in service code. Nested calls become
        savepoints.
        """
        with transaction.atomic():
            yield

    @staticmethod
    def is_positive_amount(amount: object) -> bool:
        """True for a strictly positive integer amount (bools excluded)."""
        return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0
