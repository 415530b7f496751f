"""
Custom exceptions for the Flowgraph API.

Provides structured error handling with proper HTTP status codes
and detailed error information for API consumers.
"""

from typing import Any, Dict, Optional


class BaseAPIException(Exception):
    """Base exception for all API errors."""

    status_code: int = 500

    def __init__(self, message: str, error_code: str = None,
                 details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code

    @property
    def extensions(self) -> Dict[str, Any]:
        """GraphQL error extensions describing this error."""
        extensions = {"code": self.error_code, "statusCode": self.status_code}
        if self.details:
            extensions["details"] = self.details
        return extensions


class AuthenticationRequiredError(BaseAPIException):
    """Raised when a request lacks a valid bearer token."""

    status_code = 401

    def __init__(self, message: str = "Authentication required",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "AUTHENTICATION_REQUIRED", details)


class InvalidTokenError(BaseAPIException):
    """Raised when a token signature or structure is malformed."""

    status_code = 401

    def __init__(self, message: str = "Invalid token",
                 details: Optional[Dict[str, Any]] = None,
                 error_code: str = "INVALID_TOKEN"):
        super().__init__(message, error_code, details)


class TokenExpiredError(InvalidTokenError):
    """Raised when a token's expiry time has passed."""

    def __init__(self, message: str = "Token has expired",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, error_code="TOKEN_EXPIRED")


class InsufficientPermissionsError(BaseAPIException):
    """Raised when the authenticated user lacks a required role or permission."""

    status_code = 403

    def __init__(self, message: str = "Insufficient permissions",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INSUFFICIENT_PERMISSIONS", details)


class ResourceNotFoundError(BaseAPIException):
    """Raised when a requested record or route does not exist."""

    status_code = 404

    def __init__(self, message: str = "Resource not found",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "RESOURCE_NOT_FOUND", details)

    @classmethod
    def for_record(cls, resource: str, record_id: str) -> "ResourceNotFoundError":
        """Build the error for a missing record of the named resource."""
        return cls(f"{resource} with ID '{record_id}' not found",
                   details={"resource": resource, "id": record_id})


class ValidationError(BaseAPIException):
    """Raised when input validation fails."""

    status_code = 400

    def __init__(self, message: str = "Input validation failed",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class InternalError(BaseAPIException):
    """Raised for server-side failures that are not the caller's fault."""

    status_code = 500

    def __init__(self, message: str = "Internal server error",
                 details: Optional[Dict[str, Any]] = None,
                 error_code: str = "INTERNAL_ERROR"):
        super().__init__(message, error_code, details)


class StoreNotInitializedError(InternalError):
    """Raised when the record store is queried before its data is loaded."""

    def __init__(self, message: str = "Record store not initialized",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, error_code="STORE_NOT_INITIALIZED")


class ConfigurationError(BaseAPIException):
    """Raised when configuration is invalid."""

    def __init__(self, message: str = "Configuration error",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class DataPathNotFoundError(ConfigurationError):
    """Raised when the configured data directory does not exist."""

    def __init__(self, data_path: str):
        super().__init__(f"Data path does not exist: {data_path}", {"data_path": data_path})
        self.data_path = data_path
