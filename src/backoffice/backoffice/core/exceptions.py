from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    `field` names the offending input, `key` the record key involved.
    """

    def __init__(self, message: str, *, field: Optional[str] = None, key: Any = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.key = key


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, project or record does not exist."""


class ConflictError(DomainError):
    """Raised when a write would duplicate a unique composite key."""


class AuthenticationError(DomainError):
    """Raised when no caller identity is available."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
