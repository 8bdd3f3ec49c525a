"""Domain errors raised by the core and mapped to HTTP responses in main."""

from typing import Optional


class CommboardError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationRequired(CommboardError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class AuthorizationDenied(CommboardError):
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class ValidationFailed(CommboardError):
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class LimitExceeded(CommboardError):
    status_code = 403

    def __init__(self, limit: str, maximum: int, message: Optional[str] = None):
        super().__init__(message or f"Limit reached: {limit} is {maximum}")
        self.limit = limit
        self.maximum = maximum


class NotFound(CommboardError):
    status_code = 404


class Conflict(CommboardError):
    status_code = 409
