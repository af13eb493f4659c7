"""
Service-layer error taxonomy.

Services raise a ServiceError subclass; the API layer turns it into the
uniform response envelope. The error kind says what went wrong, while
`code` and `status_code` say how the endpoint reports it, so one kind can
travel with an endpoint-specific code (e.g. INVALID_CREDENTIALS is a
VALIDATION failure reported as 400).

Usage:
    from apps.core.errors import NotFound

    raise NotFound("No such task found")
"""
from typing import Optional


class ErrorKind:
    """Canonical failure categories shared by every service."""
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    AUTHORIZATION = "AUTHORIZATION"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    STATE_INVALID = "STATE_INVALID"
    INTERNAL = "INTERNAL"


class ServiceError(Exception):
    kind = ErrorKind.INTERNAL
    default_code = "INTERNAL_SERVER_ERROR"
    default_status = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        data=None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.data = data


class ValidationFailed(ServiceError):
    kind = ErrorKind.VALIDATION
    default_code = "BAD_REQUEST"
    default_status = 400


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND
    default_code = "NOT_FOUND"
    default_status = 404


class AuthorizationDenied(ServiceError):
    kind = ErrorKind.AUTHORIZATION
    default_code = "FORBIDDEN"
    default_status = 403


class Conflict(ServiceError):
    kind = ErrorKind.CONFLICT
    default_code = "CONFLICT"
    default_status = 409


class RateLimited(ServiceError):
    kind = ErrorKind.RATE_LIMITED
    default_code = "TOO_MANY_REQUESTS"
    default_status = 429

    def __init__(self, message: str, wait_minutes: int, **kwargs):
        super().__init__(message, **kwargs)
        self.wait_minutes = wait_minutes


class StateInvalid(ServiceError):
    kind = ErrorKind.STATE_INVALID
    default_code = "UNPROCESSABLE_ENTITY"
    default_status = 422


class InternalError(ServiceError):
    kind = ErrorKind.INTERNAL
