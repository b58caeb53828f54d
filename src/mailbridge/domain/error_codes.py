"""Machine-readable error codes shared by the domain and the HTTP layer."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes returned in ``{"success": false, "error": {"code": ...}}`` bodies."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_USERNAME = "INVALID_USERNAME"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    USER_EXISTS = "USER_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT = "RATE_LIMIT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
