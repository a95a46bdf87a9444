"""Domain-specific exceptions for users services."""

from apps.core.exceptions import DomainError, NotFoundError, ValidationError


class UserRegistrationError(ValidationError):
    """Raised when user registration fails."""
    pass


class InvalidCredentialsError(DomainError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(DomainError):
    """Raised when the user is deactivated."""
    pass


class UserNotFoundError(NotFoundError):
    """Raised when user does not exist."""
    pass


class InvalidAvatarError(ValidationError):
    """Raised when an avatar is neither an image URL nor a known icon token."""
    pass
