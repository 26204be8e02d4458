from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, shift or leave does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class PolicyRejection(DomainError):
    """A business rule refused the action (already checked in, on leave, ...).

    Reported back to the caller with ``details``; never retried.
    """

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class InsufficientLeaveBalance(PolicyRejection):
    """Raised when a leave request exceeds the accrued balance for its type."""


class DuplicateRecordError(DomainError):
    """The store refused a write on its unique (employee, date) key."""
