"""Profile settings and user lookup."""

import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from django.db import transaction

from apps.core.exceptions import ValidationError, translate_database_errors
from apps.users.models import AVATAR_ICON_PREFIX, AVATAR_ICONS

from .exceptions import InvalidAvatarError, UserNotFoundError

User = get_user_model()
logger = logging.getLogger(__name__)


def validate_avatar(avatar: str) -> str:
    """
    Check an avatar value and return it unchanged.

    Accepts an http(s) image URL or an ``icon:<Name>`` token naming one of
    ``AVATAR_ICONS``, no longer than the ``avatar_url`` column. An empty
    string clears the avatar.
    """
    if not avatar:
        return ''

    max_length = User._meta.get_field('avatar_url').max_length
    if len(avatar) > max_length:
        raise InvalidAvatarError(f"Avatar cannot be longer than {max_length} characters")

    if avatar.startswith(AVATAR_ICON_PREFIX):
        icon = avatar[len(AVATAR_ICON_PREFIX):]
        if icon not in AVATAR_ICONS:
            raise InvalidAvatarError(f"Unknown avatar icon: {icon}")
        return avatar

    try:
        URLValidator(schemes=['http', 'https'])(avatar)
    except DjangoValidationError:
        raise InvalidAvatarError("Avatar must be an image URL or an icon token")
    return avatar


def find_user_by_email(*, email: str) -> User:
    """
    Look up an active user by email, ignoring case, for invitations.

    Raises:
        UserNotFoundError: If no active user has this email
    """
    try:
        return User.objects.get(email__iexact=email.strip(), is_active=True)
    except User.DoesNotExist:
        raise UserNotFoundError(f"No user found with email {email}")


@translate_database_errors
@transaction.atomic
def update_profile(
    *,
    user: User,
    full_name: Optional[str] = None,
    avatar: Optional[str] = None
) -> User:
    """
    Update display name and/or avatar.

    Args:
        user: The user editing their own profile
        full_name: New display name (optional, must not be blank)
        avatar: New avatar URL or icon token (optional)

    Returns:
        Updated User instance

    Raises:
        ValidationError: If the name is blank
        InvalidAvatarError: If the avatar is not acceptable
    """
    update_fields = []

    if full_name is not None:
        full_name = full_name.strip()
        if not full_name:
            raise ValidationError("Name cannot be blank")
        user.full_name = full_name
        update_fields.append('full_name')

    if avatar is not None:
        user.avatar_url = validate_avatar(avatar)
        update_fields.append('avatar_url')

    if update_fields:
        user.save(update_fields=update_fields)
        logger.info("Updated profile %s (%s)", user.id, ', '.join(update_fields))

    return user
