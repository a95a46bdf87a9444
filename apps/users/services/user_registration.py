"""User registration service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model

from apps.core.exceptions import translate_database_errors
from apps.users.names import generate_random_name

from .exceptions import UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)


@translate_database_errors
@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    full_name: str = ""
) -> User:
    """
    Register a new user profile.

    A user who leaves the name blank gets a random display name, which
    they can change later in profile settings.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        full_name: Optional display name

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already registered
    """
    email = User.objects.normalize_email(email)
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("A user with this email already exists")

    user = User.objects.create_user(
        email=email,
        password=password,
        full_name=full_name.strip() or generate_random_name(),
    )
    logger.info("Registered user %s", user.id)
    return user
