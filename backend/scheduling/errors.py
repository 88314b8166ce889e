"""Errors raised by the availability engine."""


class SchedulingError(Exception):
    """Base class for availability engine failures."""


class ValidationError(SchedulingError):
    """Raised when a query is malformed or out of range."""

    def __init__(self, message: str, errors: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class DependencyError(SchedulingError):
    """Raised when the template store or reservation lookup fails or times out."""
