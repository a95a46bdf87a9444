"""Services for users business logic."""

from .exceptions import (
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    InvalidAvatarError,
)
from .user_registration import register_user
from .sign_in import authenticate_user
from .profile_management import find_user_by_email, update_profile, validate_avatar

__all__ = [
    # Exceptions
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'InvalidAvatarError',
    # Services
    'register_user',
    'authenticate_user',
    'find_user_by_email',
    'update_profile',
    'validate_avatar',
]
