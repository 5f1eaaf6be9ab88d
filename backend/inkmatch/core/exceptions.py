# backend/inkmatch/core/exceptions.py
"""
Domain-specific exceptions for the inkmatch platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(DomainException):
    """Raised when a request is structurally invalid (client bug, not user drift)."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        code: Optional[str] = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(
        self,
        message: str = "Authentication required",
        code: Optional[str] = "UNAUTHORIZED",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(
        self,
        message: str,
        code: Optional[str] = "NOT_FOUND",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = 422


class ServiceException(DomainException):
    """Raised when a service operation fails."""


class SearchExecutionError(ServiceException):
    """
    Raised when the profile store cannot answer a search.

    Covers connection failures, timeouts and malformed store responses.
    The message is fixed; store internals never reach the client.
    """

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(
            message="Failed to load results",
            code="SEARCH_EXECUTION_FAILED",
            details={"retryable": True},
        )
        # Kept for server-side logs only, never serialized.
        self.reason = reason


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
