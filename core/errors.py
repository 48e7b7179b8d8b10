"""
API error taxonomy. Each error carries the HTTP status it is reported with.
"""


class ApiError(Exception):
    status = 500

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class ValidationFailed(ApiError):
    """Missing or malformed input, or a business rule blocking the request."""
    status = 400


class AuthenticationFailed(ApiError):
    status = 401


class Forbidden(ApiError):
    status = 403


class NotFound(ApiError):
    status = 404


class MethodNotAllowed(ApiError):
    status = 405


class Conflict(ApiError):
    """Uniqueness violation, e.g. a duplicate name."""
    status = 409
