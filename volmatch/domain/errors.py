from __future__ import annotations


class DomainError(Exception):
    """Base for errors that are surfaced to the caller as a rejected request."""

    status: int = 400
    code: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    status = 400
    code = "invalid"


class AuthenticationError(DomainError):
    status = 401
    code = "unauthenticated"


class AuthorizationError(DomainError):
    status = 403
    code = "forbidden"


class NotFoundError(DomainError):
    status = 404
    code = "not_found"


class ConflictError(DomainError):
    status = 409
    code = "conflict"


class RateLimitedError(DomainError):
    status = 429
    code = "rate_limited"
