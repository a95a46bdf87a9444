"""
Domain-specific exceptions for accounts app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""

from apps.core.exceptions import NotFoundError, ValidationError


class AccountNotFoundError(NotFoundError):
    """Raised when an account does not exist."""
    pass


class MembershipNotFoundError(NotFoundError):
    """Raised when the user has no membership row for the account."""
    pass


class InvitationNotPendingError(ValidationError):
    """Raised when accepting or rejecting an invitation that is not PENDING."""
    pass
