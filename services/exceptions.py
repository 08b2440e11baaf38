from __future__ import annotations


class LoanProcessingError(Exception):
    """Base class for errors raised by the application services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApplicationValidationError(LoanProcessingError):
    status_code = 400

    def __init__(self, errors: list[str]):
        super().__init__("Application validation failed")
        self.errors = list(errors)


class AuthenticationRequired(LoanProcessingError):
    status_code = 401

    def __init__(self, message: str = "Authentication required to submit application"):
        super().__init__(message)


class ApplicationNotFound(LoanProcessingError):
    status_code = 404

    def __init__(self, application_id: str):
        super().__init__(f"Application {application_id} not found")
        self.application_id = application_id


class InvalidStatusTransition(LoanProcessingError):
    status_code = 409

    def __init__(self, current: str, requested: str, allowed: frozenset[str] | set[str]):
        targets = ", ".join(sorted(allowed)) or "none"
        super().__init__(
            f"Cannot change status from '{current}' to '{requested}'. Allowed: {targets}"
        )
        self.current = current
        self.requested = requested
        self.allowed = frozenset(allowed)


class PersistenceError(LoanProcessingError):
    """Storage failure. The message is generic; the cause is chained, not exposed."""

    status_code = 500
