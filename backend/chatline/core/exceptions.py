# backend/chatline/core/exceptions.py
"""
Domain-specific exceptions for the chat backend.

Every error raised by the service layer is a single ``DomainException`` tagged
with an ``ErrorKind``. The kind carries the HTTP status, so the API layer
dispatches on the tag instead of on a class hierarchy.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    """Error taxonomy shared by services and the HTTP boundary."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    INTEGRITY = "integrity"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]

    @property
    def is_server_fault(self) -> bool:
        return self.status_code >= 500


_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTHORIZATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INTEGRITY: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Server faults never leak their internal message to clients
GENERIC_SERVER_FAULT_MESSAGE = "An internal error occurred while processing your request"


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.code = code or f"{kind.value}_error"
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def public_message(self) -> str:
        """Message safe to return to the client."""
        if self.kind.is_server_fault:
            return GENERIC_SERVER_FAULT_MESSAGE
        return self.message

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.public_message(),
                "code": self.code,
                "details": {} if self.kind.is_server_fault else self.details,
            },
        )


def validation_error(message: str, **details: Any) -> DomainException:
    return DomainException(ErrorKind.VALIDATION, message, details=details)


def authentication_error(message: str) -> DomainException:
    return DomainException(ErrorKind.AUTHENTICATION, message)


def authorization_error(message: str) -> DomainException:
    return DomainException(ErrorKind.AUTHORIZATION, message)


def not_found_error(message: str, **details: Any) -> DomainException:
    return DomainException(ErrorKind.NOT_FOUND, message, details=details)


def integrity_error(message: str, **details: Any) -> DomainException:
    return DomainException(ErrorKind.INTEGRITY, message, details=details)


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
