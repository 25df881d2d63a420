from typing import Any, Mapping, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, ids involved)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Service error"
    default_code = "SERVICE_ERROR"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(ServiceError):
    """Raised when input data is invalid or a precondition for a service call is not met
    (missing unit system, empty update payload, re-parenting into a descendant)."""

    http_status = 400
    default_message = "Invalid input"
    default_code = "BAD_REQUEST"


class NotFoundError(ServiceError):
    """Raised when a referenced entity is absent or not owned by the caller."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictError(ServiceError):
    """Raised on duplicates: sibling category label, recipe-category link, unit pair."""

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class UnauthorizedError(ServiceError):
    """Raised when an entity references another user's entity (e.g. a foreign parent category)."""

    http_status = 401
    default_message = "Unauthorized"
    default_code = "UNAUTHORIZED"


class ForbiddenError(ServiceError):
    """Raised when a mutation targets a canonical root category."""

    http_status = 403
    default_message = "Forbidden"
    default_code = "FORBIDDEN"


class UpstreamError(ServiceError):
    """Raised when the conversion or extraction service fails.

    Callers decide whether to retry; the surrounding transaction is rolled back
    so previously committed measures are left untouched.
    """

    http_status = 502
    default_message = "Upstream service failure"
    default_code = "UPSTREAM_ERROR"
