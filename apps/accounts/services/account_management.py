"""
Account management service.

Handles account CRUD operations with proper transaction safety.
"""

import logging
from typing import Iterable, NamedTuple, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Prefetch, QuerySet

from apps.accounts.models import Account, AccountMembership, MembershipStatus
from apps.core.exceptions import NotAllowedError, ValidationError, translate_database_errors
from apps.expenses.models import Expense
from apps.users.services import UserNotFoundError

from .exceptions import AccountNotFoundError

User = get_user_model()
logger = logging.getLogger(__name__)


class AccountPartition(NamedTuple):
    """Accounts a user belongs to, split by their membership status."""
    active: QuerySet
    invitations: QuerySet


def _clean_name(name: str) -> str:
    name = (name or '').strip()
    if not name:
        raise ValidationError("Account name cannot be blank")
    return name


def _resolve_invitees(invitee_ids: Iterable[UUID], exclude: User) -> list:
    """Return unique invitee users in request order, without ``exclude``."""
    try:
        normalized = [str(UUID(str(i))) for i in invitee_ids]
    except ValueError:
        raise ValidationError("Invitee ids must be UUIDs")
    ids = [i for i in dict.fromkeys(normalized) if i != str(exclude.pk)]
    users = {str(u.pk): u for u in User.objects.filter(pk__in=ids)}
    missing = [i for i in ids if i not in users]
    if missing:
        raise UserNotFoundError(f"Users not found: {', '.join(missing)}")
    return [users[i] for i in ids]


def _lock_account(account_id: UUID) -> Account:
    try:
        return (
            Account.objects
            .select_for_update()
            .get(id=account_id)
        )
    except Account.DoesNotExist:
        raise AccountNotFoundError(f"Account with ID {account_id} not found")


@translate_database_errors
@transaction.atomic
def create_account(
    *,
    name: str,
    owner: User,
    invitee_ids: Iterable[UUID] = ()
) -> Account:
    """
    Create a new account with the creator as its accepted owner.

    This is a multi-step operation wrapped in a transaction:
    1. Create the account
    2. Create the owner's ACCEPTED membership
    3. Create one PENDING membership per invitee

    Args:
        name: Account name (must not be blank)
        owner: User who will own the account
        invitee_ids: Users to invite; duplicates and the owner are ignored

    Returns:
        Created Account instance

    Raises:
        ValidationError: If the name is blank
        UserNotFoundError: If an invitee does not exist
    """
    name = _clean_name(name)
    invitees = _resolve_invitees(invitee_ids, exclude=owner)

    account = Account.objects.create(name=name, owner=owner)
    AccountMembership.objects.create(
        account=account,
        user=owner,
        status=MembershipStatus.ACCEPTED,
    )
    AccountMembership.objects.bulk_create([
        AccountMembership(
            account=account,
            user=invitee,
            status=MembershipStatus.PENDING,
            invited_by=owner,
        )
        for invitee in invitees
    ])

    logger.info("Created account %s with %d invitation(s)", account.id, len(invitees))
    return account


def get_account_by_id(*, account_id: UUID) -> Account:
    """
    Get an account by ID with owner and memberships loaded.

    Raises:
        AccountNotFoundError: If account doesn't exist
    """
    try:
        return (
            Account.objects
            .select_related('owner')
            .prefetch_related(
                Prefetch(
                    'memberships',
                    queryset=AccountMembership.objects.select_related('user')
                )
            )
            .get(id=account_id)
        )
    except Account.DoesNotExist:
        raise AccountNotFoundError(f"Account with ID {account_id} not found")


def get_account_for_member(*, account_id: UUID, user: User) -> Account:
    """
    Get an account the user is an ACCEPTED member of.

    Raises:
        AccountNotFoundError: If account doesn't exist
        NotAllowedError: If the user is not an accepted member
    """
    account = get_account_by_id(account_id=account_id)
    if not account.has_member(user):
        raise NotAllowedError("You are not a member of this account")
    return account


def get_user_accounts(*, user: User) -> AccountPartition:
    """
    Partition the user's accounts into active ones and pending invitations.

    Owned accounts are always active, with or without a membership row.
    """
    base = Account.objects.select_related('owner')
    active = base.filter(
        pk__in=AccountMembership.objects
        .filter(user=user, status=MembershipStatus.ACCEPTED)
        .values('account_id')
    ) | base.filter(owner=user)
    invitations = (
        base
        .filter(memberships__user=user, memberships__status=MembershipStatus.PENDING)
        .exclude(owner=user)
    )
    return AccountPartition(active=active.distinct(), invitations=invitations.distinct())


@translate_database_errors
@transaction.atomic
def update_account(
    *,
    account_id: UUID,
    user: User,
    name: Optional[str] = None,
    new_invitee_ids: Optional[Iterable[UUID]] = None
) -> Account:
    """
    Rename an account and/or invite more users (owner only).

    Existing memberships are never removed or demoted; only ids without a
    membership row get a new PENDING invitation.

    Raises:
        AccountNotFoundError: If account doesn't exist
        NotAllowedError: If user is not the owner
        ValidationError: If the new name is blank
        UserNotFoundError: If an invitee does not exist
    """
    account = _lock_account(account_id)

    if not account.is_owner(user):
        raise NotAllowedError("Only the account owner can update the account")

    if name is not None:
        account.name = _clean_name(name)
        account.save(update_fields=['name', 'updated_at'])

    if new_invitee_ids is not None:
        invitees = _resolve_invitees(new_invitee_ids, exclude=account.owner)
        existing = set(account.memberships.values_list('user_id', flat=True))
        added = [u for u in invitees if u.pk not in existing]
        AccountMembership.objects.bulk_create([
            AccountMembership(
                account=account,
                user=invitee,
                status=MembershipStatus.PENDING,
                invited_by=user,
            )
            for invitee in added
        ])
        if added:
            logger.info("Invited %d user(s) to account %s", len(added), account.id)

    return account


@translate_database_errors
@transaction.atomic
def delete_account(*, account_id: UUID, user: User) -> None:
    """
    Delete an account (owner only).

    Expenses (with their shares) go first, then memberships, then the
    account itself, all in one transaction.

    Raises:
        AccountNotFoundError: If account doesn't exist
        NotAllowedError: If user is not the owner
    """
    account = _lock_account(account_id)

    if not account.is_owner(user):
        raise NotAllowedError("Only the account owner can delete the account")

    Expense.objects.filter(account=account).delete()
    account.memberships.all().delete()
    account.delete()

    logger.info("Deleted account %s", account_id)
