"""
Core Application - shared base classes.

Generic building blocks used by the domain apps (authentication, projects,
finance). No business rules live here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for the service layer (logger, atomic block)

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError, NotFoundError, PermissionDeniedError, ConflictError

Views (import from core.views):
    - health_check: Liveness endpoint
    - application_error_response: Render a BaseApplicationError as a Response

Note:
    Models are NOT imported here to avoid AppRegistryNotReady errors.
"""

from .exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .services import BaseService

__all__ = [
    "BaseService",
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
]
