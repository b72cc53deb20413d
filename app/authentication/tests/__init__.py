"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User model and manager tests
- test_roles.py: Role defaults and the operations catalog
- test_permissions.py: DRF permission classes
- test_views.py: JWT and current-user endpoints

Usage:
    pytest authentication/tests/
"""
