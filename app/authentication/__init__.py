"""
Authentication application.

Key components:
    - User model: email login, application role and permission set
    - roles: role default permissions and the operations catalog
    - permissions: DRF permission classes backed by the catalog
    - JWT endpoints (djangorestframework-simplejwt)

Usage:
    from authentication.models import User, UserRole
    from authentication.roles import can_role_execute
"""
