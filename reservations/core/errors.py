"""Typed failures raised by the service layer.

Every error carries a stable ``code`` for clients and the HTTP status the API
answers with. They subclass ``ValueError`` so plain ``except ValueError``
callers (scripts, the worker) keep working.
"""


class DomainError(ValueError):
    code = "DomainError"
    status_code = 400

    def __init__(self, message: str = "", **details):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.details = details

    def to_dict(self) -> dict:
        out = {"code": self.code, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class NotFoundError(DomainError):
    code = "NotFound"
    status_code = 404


class ValidationError(DomainError):
    """Business-rule validation. ``reason`` names the rule, e.g. CapacityExceeded."""
    code = "ValidationError"
    status_code = 400

    def __init__(self, message: str = "", reason: str = "", **details):
        if reason:
            details["reason"] = reason
        super().__init__(message, **details)
        self.reason = reason


class ConflictError(DomainError):
    code = "ConflictError"
    status_code = 409


class CancellationWindowExpired(DomainError):
    code = "CancellationWindowExpired"
    status_code = 409


class AlreadyCancelled(DomainError):
    code = "AlreadyCancelled"
    status_code = 409


class UnauthorizedError(DomainError):
    code = "Unauthorized"
    status_code = 403
