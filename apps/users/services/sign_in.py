"""Email and password sign-in for the login endpoint."""

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.db import transaction

from apps.core.exceptions import translate_database_errors

from .exceptions import InactiveAccountError, InvalidCredentialsError

User = get_user_model()
logger = logging.getLogger(__name__)


@translate_database_errors
@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check an email/password pair and stamp ``last_login``.

    The email matches regardless of case, the same way invitation lookups
    do. An unknown email and a wrong password fail with the same message.

    Raises:
        InvalidCredentialsError: If the pair matches no profile
        InactiveAccountError: If the profile was deactivated by staff
    """
    user = User.objects.filter(email__iexact=email.strip()).first()
    if user is None or not user.check_password(password):
        logger.warning("Rejected sign-in for %s", email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("This profile has been deactivated")

    update_last_login(None, user)
    return user
