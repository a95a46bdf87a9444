"""
Domain exceptions for expenses app.

This module defines the expense-specific error types. They extend the
shared taxonomy in ``apps.core.exceptions`` so views can map them to
HTTP responses without knowing each one.
"""

from apps.core.exceptions import NotFoundError, ValidationError


class InvalidInputError(ValidationError):
    """Raised when an amount or participant list cannot be split."""
    pass


class ExpenseNotFoundError(NotFoundError):
    """Raised when an expense does not exist."""
    pass


class ShareNotFoundError(NotFoundError):
    """Raised when a user has no share in an expense."""
    pass
