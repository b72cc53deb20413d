"""
Authentication models.

This module defines the User model used across the accounting service.
Besides email login, a user carries the two things the authorization layer
needs: a role and an optional explicit permission set.

Related files:
    - managers.py: Custom user manager for email-based creation
    - roles.py: Role default permissions and the operations catalog
    - permissions.py: DRF permission class backed by the catalog
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager
from authentication.roles import ROLE_DEFAULT_PERMISSIONS


class UserRole(models.TextChoices):
    """
    Application roles, highest privilege first.

    Admins bypass project scoping entirely; the other roles are limited to
    the projects they are assigned to.
    """

    ADMIN = "admin", "Admin"
    MANAGER = "manager", "Manager"
    USER = "user", "User"
    VIEWER = "viewer", "Viewer"


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        name: Display name
        role: Application role (admin, manager, user, viewer)
        permissions: Explicit permission codes; empty means role defaults
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            email="clerk@example.com",
            password="securepassword",
            role=UserRole.USER,
        )
        user.has_app_permission("view_transactions")  # True
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    name = models.CharField(
        max_length=150,
        blank=True,
        default="",
        help_text="Display name",
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.USER,
        db_index=True,
        help_text="Application role used by the operations catalog",
    )
    permissions = models.JSONField(
        default=list,
        blank=True,
        help_text="Explicit permission codes; empty list falls back to role defaults",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        return self.name or self.email

    def get_short_name(self):
        return self.name.split(" ")[0] if self.name else self.email.split("@")[0]

    @property
    def is_admin(self) -> bool:
        """True for the admin role, which bypasses project scoping."""
        return self.role == UserRole.ADMIN

    @property
    def effective_permissions(self) -> list[str]:
        """Explicit permissions when set, otherwise the role's defaults."""
        if self.permissions:
            return list(self.permissions)
        return list(ROLE_DEFAULT_PERMISSIONS.get(self.role, ()))

    def has_app_permission(self, code: str) -> bool:
        """Check a single application permission code."""
        return code in self.effective_permissions
