"""
Membership management service.

Handles invitations and their responses with concurrency protection.
Invitations move PENDING -> ACCEPTED on accept; a rejected invitation
is deleted. Members are never removed or demoted.
"""

import logging
from typing import List, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.accounts.models import Account, AccountMembership, MembershipStatus
from apps.core.exceptions import (
    AlreadyMemberError,
    NotAllowedError,
    ValidationError,
    translate_database_errors,
)
from apps.users.services import UserNotFoundError, find_user_by_email

from .account_management import get_account_by_id
from .exceptions import (
    AccountNotFoundError,
    InvitationNotPendingError,
    MembershipNotFoundError,
)

User = get_user_model()
logger = logging.getLogger(__name__)


@translate_database_errors
@transaction.atomic
def invite_member(
    *,
    account_id: UUID,
    user_id: UUID,
    invited_by: User
) -> AccountMembership:
    """
    Invite a user to an account (owner only).

    Inviting the owner never fails: their ACCEPTED membership is created
    if it is missing and returned as is otherwise.

    Args:
        account_id: UUID of the account
        user_id: UUID of the user to invite
        invited_by: User sending the invitation (must be the owner)

    Returns:
        The new PENDING membership (or the owner's membership)

    Raises:
        AccountNotFoundError: If account doesn't exist
        NotAllowedError: If invited_by is not the owner
        UserNotFoundError: If the invitee doesn't exist
        AlreadyMemberError: If the invitee already has a membership
    """
    # Lock the account to serialize concurrent invitations
    try:
        account = (
            Account.objects
            .select_for_update()
            .get(id=account_id)
        )
    except Account.DoesNotExist:
        raise AccountNotFoundError(f"Account with ID {account_id} not found")

    if not account.is_owner(invited_by):
        raise NotAllowedError("Only the account owner can invite members")

    try:
        invitee = User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")

    if account.is_owner(invitee):
        membership, _ = AccountMembership.objects.get_or_create(
            account=account,
            user=invitee,
            defaults={'status': MembershipStatus.ACCEPTED},
        )
        return membership

    if account.memberships.filter(user=invitee).exists():
        raise AlreadyMemberError(f"{invitee.get_display_name()} is already in {account.name}")

    try:
        membership = AccountMembership.objects.create(
            account=account,
            user=invitee,
            status=MembershipStatus.PENDING,
            invited_by=invited_by,
        )
    except IntegrityError:
        # Database constraint caught duplicate membership
        raise AlreadyMemberError(f"{invitee.get_display_name()} is already in {account.name}")

    logger.info("Invited user %s to account %s", invitee.pk, account.id)
    return membership


def invite_member_by_email(
    *,
    account_id: UUID,
    email: str,
    invited_by: User
) -> AccountMembership:
    """
    Invite a user found by email, ignoring case.

    Raises:
        UserNotFoundError: If no user has this email
        ValidationError: If the owner invites themselves
        AlreadyMemberError: If the invitee already has a membership
    """
    invitee = find_user_by_email(email=email)
    if invitee.pk == invited_by.pk:
        raise ValidationError("You cannot invite yourself")
    return invite_member(account_id=account_id, user_id=invitee.pk, invited_by=invited_by)


def _lock_own_membership(account_id: UUID, user: User) -> AccountMembership:
    if not Account.objects.filter(id=account_id).exists():
        raise AccountNotFoundError(f"Account with ID {account_id} not found")
    try:
        membership = (
            AccountMembership.objects
            .select_for_update()
            .get(account_id=account_id, user=user)
        )
    except AccountMembership.DoesNotExist:
        raise MembershipNotFoundError("You have no invitation to this account")

    if membership.status != MembershipStatus.PENDING:
        raise InvitationNotPendingError("This invitation has already been accepted")
    return membership


@translate_database_errors
@transaction.atomic
def accept_invitation(*, account_id: UUID, user: User) -> AccountMembership:
    """
    Accept a pending invitation.

    Raises:
        AccountNotFoundError: If account doesn't exist
        MembershipNotFoundError: If the user was not invited
        InvitationNotPendingError: If the invitation is not PENDING
    """
    membership = _lock_own_membership(account_id, user)
    membership.status = MembershipStatus.ACCEPTED
    membership.responded_at = timezone.now()
    membership.save(update_fields=['status', 'responded_at'])

    logger.info("User %s accepted invitation to account %s", user.pk, account_id)
    return membership


@translate_database_errors
@transaction.atomic
def reject_invitation(*, account_id: UUID, user: User) -> None:
    """
    Reject a pending invitation; the membership row is deleted.

    Raises:
        AccountNotFoundError: If account doesn't exist
        MembershipNotFoundError: If the user was not invited
        InvitationNotPendingError: If the invitation is not PENDING
    """
    membership = _lock_own_membership(account_id, user)
    membership.delete()

    logger.info("User %s rejected invitation to account %s", user.pk, account_id)


def remove_member(*, account_id: UUID, user_id: UUID, removed_by: User) -> None:
    """
    Member removal is not supported.

    Raises:
        NotAllowedError: Always
    """
    raise NotAllowedError("Removing members is not allowed.")


def get_membership_status(*, account_id: UUID, user_id: UUID) -> Optional[str]:
    """
    Return the user's membership status, or None for non-members.

    The owner is always ACCEPTED, even without a membership row.

    Raises:
        AccountNotFoundError: If account doesn't exist
    """
    try:
        account = Account.objects.get(id=account_id)
    except Account.DoesNotExist:
        raise AccountNotFoundError(f"Account with ID {account_id} not found")

    if str(account.owner_id) == str(user_id):
        return MembershipStatus.ACCEPTED

    return (
        AccountMembership.objects
        .filter(account=account, user_id=user_id)
        .values_list('status', flat=True)
        .first()
    )


def get_account_members(
    *,
    account_id: UUID,
    status: Optional[str] = None
) -> List[AccountMembership]:
    """
    Get the memberships of an account with users loaded, owner first.

    A missing owner row is synthesized as an unsaved ACCEPTED membership.

    Args:
        account_id: UUID of the account
        status: Only memberships with this status (optional)

    Raises:
        AccountNotFoundError: If account doesn't exist
    """
    account = get_account_by_id(account_id=account_id)

    memberships = [m for m in account.memberships.all() if m.user_id != account.owner_id]
    owner_membership = next(
        (m for m in account.memberships.all() if m.user_id == account.owner_id),
        None,
    )
    if owner_membership is None:
        owner_membership = AccountMembership(
            account=account,
            user=account.owner,
            status=MembershipStatus.ACCEPTED,
            created_at=account.created_at,
        )

    members = [owner_membership] + sorted(memberships, key=lambda m: m.created_at)
    if status is not None:
        members = [m for m in members if m.status == status]
    return members
