"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the exception handlers
in main.py.
"""
from fastapi import HTTPException, status

from domain.constants import MSG_BODY_INCOMPLETE, MSG_INSUFFICIENT_FUNDS


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class BadRequestError(DomainError):
    """Missing or invalid required fields (400)."""
    def __init__(self, message: str = MSG_BODY_INCOMPLETE, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class NotFoundError(DomainError):
    """Resource not found (404)."""
    def __init__(self, resource_type: str, identifier: str, details: dict | None = None):
        message = f"{resource_type} not found."
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details={"id": identifier, **(details or {})})


class InsufficientFundsError(DomainError):
    """Order was processed but not paid for; it never becomes a delivery (404)."""
    def __init__(self, order_status: str | None = None):
        super().__init__(
            MSG_INSUFFICIENT_FUNDS,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"status": order_status} if order_status else None,
        )


class InvalidTransitionError(DomainError):
    """Requested status change is not allowed from the current status (409)."""
    def __init__(self, current: str, target: str, details: dict | None = None):
        message = f"Cannot transition delivery from {current} to {target}."
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, details=details)


class StoreError(DomainError):
    """Persistence layer unavailable (503)."""
    def __init__(self, message: str = "Delivery store unavailable.", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE, details=details)
