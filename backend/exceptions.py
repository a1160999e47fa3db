"""
Custom exception classes for the application.

This module defines domain-specific exceptions that provide better error handling
and clearer error messages throughout the application.
"""


class ApplicationError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ApplicationError):
    """Raised when there's a configuration issue"""

    def __init__(self, message: str, missing_keys: list[str] | None = None):
        details = {"missing_keys": missing_keys} if missing_keys else {}
        super().__init__(message, details)


class ValidationError(ApplicationError):
    """Raised when request input has a bad shape, size, type or count"""

    def __init__(self, message: str, invalid_fields: dict | None = None):
        details = {"invalid_fields": invalid_fields} if invalid_fields else {}
        super().__init__(message, details)


class AuthError(ApplicationError):
    """Raised when a credential is missing, invalid or expired"""

    def __init__(self, message: str = "Not authorized", challenge: str = "Bearer"):
        super().__init__(message)
        self.challenge = challenge  # WWW-Authenticate value sent with the 401


class NotFoundError(ApplicationError):
    """Raised when a referenced entity does not exist"""

    def __init__(self, entity: str, entity_id: str, message: str | None = None):
        details = {"entity": entity, "id": entity_id}
        super().__init__(message or f"{entity} not found", details)


class ConflictError(ApplicationError):
    """Raised when a unique key is already taken"""

    def __init__(self, entity: str, field: str, value: str):
        details = {"entity": entity, "field": field}
        super().__init__(f"{entity} with {field} '{value}' already exists", details)


class ProcessingError(ApplicationError):
    """Raised when transcoding or storage I/O fails"""

    def __init__(self, operation: str, message: str, filename: str | None = None):
        details = {"operation": operation}
        if filename:
            details["filename"] = filename
        super().__init__(message, details)


class UpstreamError(ApplicationError):
    """Raised when an external service call fails"""

    def __init__(self, service: str, message: str | None = None):
        details = {"service": service}
        super().__init__(message or f"{service} request failed", details)


class DatabaseError(ApplicationError):
    """Raised when database operations fail"""

    def __init__(self, operation: str, message: str):
        details = {"operation": operation}
        super().__init__(message, details)
