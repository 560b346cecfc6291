"""
Centralized exception hierarchy for domain-specific errors.

This module provides custom exception classes that represent specific
error conditions in the application. Provider failures never reach the
presentation layer from the controller; these types are raised by the HTTP
clients and by the API layer's request validation.
"""


class WayfinderError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(WayfinderError):
    """Exception raised when data validation fails."""


class ExternalServiceError(WayfinderError):
    """Exception raised when service calls fail."""


class RateLimitError(ExternalServiceError):
    """Exception raised when rate limits are exceeded."""


class ResourceNotFoundError(WayfinderError):
    """Exception raised when a requested resource is not found."""


WayfinderException = WayfinderError
ValidationException = ValidationError
ExternalServiceException = ExternalServiceError
RateLimitException = RateLimitError
ResourceNotFoundException = ResourceNotFoundError
