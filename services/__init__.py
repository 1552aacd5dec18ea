"""Account provisioning and session services."""

from .errors import (
    AuthorizationError,
    ConflictError,
    InvalidCredentialsError,
    PersistenceError,
    ServiceError,
    ValidationError,
)

__all__ = [
    "ServiceError",
    "ValidationError",
    "ConflictError",
    "InvalidCredentialsError",
    "AuthorizationError",
    "PersistenceError",
]
