from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Error taxonomy shared by every service operation and the HTTP layer."""

    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FOREIGN_KEY = "foreign_key"
    INTERNAL = "internal_error"


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind: ErrorKind = ErrorKind.INTERNAL
    http_status: int = 500

    def __init__(self, message: str, *, reason: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.detail = detail


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""

    kind = ErrorKind.VALIDATION
    http_status = 400


class NotFoundError(DomainError):
    """Raised when an attendance/payroll record does not exist."""

    kind = ErrorKind.NOT_FOUND
    http_status = 404


class ConflictError(DomainError):
    """Raised on duplicate clock-in/out or a unique key collision."""

    kind = ErrorKind.CONFLICT
    http_status = 409


class ForeignKeyError(DomainError):
    """Raised when a referenced staff member or payroll does not exist."""

    kind = ErrorKind.FOREIGN_KEY
    http_status = 400


class InternalError(DomainError):
    """Raised on unexpected storage failures (including pool exhaustion)."""

    kind = ErrorKind.INTERNAL
    http_status = 500
