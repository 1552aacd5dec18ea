"""Error taxonomy raised by the account services."""

from __future__ import annotations

from http import HTTPStatus


class ServiceError(Exception):
    """Base class for failures that are reported to the caller as-is."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    error: str = "Internal Server Error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail()
        super().__init__(self.detail)

    @classmethod
    def default_detail(cls) -> str:
        return cls.error


class ValidationError(ServiceError):
    """A required field is missing or malformed."""

    status_code = HTTPStatus.BAD_REQUEST
    error = "Bad Request"


class ConflictError(ServiceError):
    """The email address is already registered."""

    status_code = HTTPStatus.BAD_REQUEST
    error = "Bad Request"

    @classmethod
    def default_detail(cls) -> str:
        return "User already exists with this email."


class InvalidCredentialsError(ServiceError):
    status_code = HTTPStatus.UNAUTHORIZED
    error = "Unauthorized"

    @classmethod
    def default_detail(cls) -> str:
        return "Invalid credentials."


class AuthorizationError(ServiceError):
    status_code = HTTPStatus.FORBIDDEN
    error = "Forbidden"


class PersistenceError(ServiceError):
    """The store failed or returned data violating an integrity invariant."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    error = "Internal Server Error"
