"""Custom exceptions for the VentureScope application."""


class VentureScopeException(Exception):
    """Base exception for VentureScope application.

    ``details`` are merged into the JSON error body next to ``error``.
    """

    status_code = 500

    def __init__(self, message: str = "", details: dict | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ValidationError(VentureScopeException):
    """Raised when request data or a domain rule check fails."""

    status_code = 400


class ConflictError(VentureScopeException):
    """Raised when an action conflicts with current resource state."""

    status_code = 400


class AuthenticationError(VentureScopeException):
    """Raised when authentication fails."""

    status_code = 401


class QuotaExceededError(VentureScopeException):
    """Raised when the organization plan does not allow the action."""

    status_code = 402


class AuthorizationError(VentureScopeException):
    """Raised when the caller lacks the role for an action."""

    status_code = 403


class NotFoundError(VentureScopeException):
    """Raised when a resource is not found or belongs to another organization."""

    status_code = 404


class RateLimitError(VentureScopeException):
    """Raised when a caller exceeds a request budget."""

    status_code = 429


class DatabaseError(VentureScopeException):
    """Raised when a database operation fails."""


class ServiceError(VentureScopeException):
    """Raised when a service operation fails."""


class ExternalServiceError(ServiceError):
    """Raised when a payments, storage, or LLM provider call fails."""


class ConfigurationError(VentureScopeException):
    """Raised when configuration is invalid."""
