"""
Domain error taxonomy shared by every app.

Services raise these instead of HTTP exceptions; views translate them
into responses (see ``apps.core.responses``).

Exception Hierarchy:
    DomainError (base)
    ├── ValidationError
    ├── NotFoundError
    ├── AlreadyMemberError
    ├── NotAllowedError
    └── PersistenceError

App-specific subclasses live in each app's ``services/exceptions.py``.
"""

import functools
import logging

from django.db import DatabaseError

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base exception for all service-layer errors."""
    pass


class ValidationError(DomainError):
    """Raised when caller input is invalid (blank name, empty participants, bad amount)."""
    pass


class NotFoundError(DomainError):
    """Raised when a referenced account, expense, user or membership does not exist."""
    pass


class AlreadyMemberError(DomainError):
    """Raised when a user is invited to an account they already belong to."""
    pass


class NotAllowedError(DomainError):
    """Raised when the acting user may not perform the operation."""
    pass


class PersistenceError(DomainError):
    """Raised when the database rejects or fails an operation."""
    pass


def translate_database_errors(func):
    """
    Re-raise backend failures from ``func`` as :class:`PersistenceError`.

    Apply outside ``transaction.atomic`` so the transaction has already
    rolled back when the error reaches the caller. Domain errors pass
    through untouched; nothing is retried.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Database call %s failed", func.__qualname__)
            raise PersistenceError(f"Could not complete {func.__name__}: {exc}") from exc
    return wrapper
