"""
Expense management service.

Creates, edits, archives and deletes expenses and their shares. Every
operation takes the acting user explicitly and requires them to be an
ACCEPTED member of the expense's account. Validation runs before any
write; each call is a single transaction.
"""

import logging
from datetime import date as date_type
from typing import Iterable, List, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import Account, MembershipStatus
from apps.accounts.services import get_account_for_member, get_account_members
from apps.core.exceptions import DomainError, NotAllowedError, ValidationError, translate_database_errors
from apps.expenses.exceptions import ExpenseNotFoundError, InvalidInputError, ShareNotFoundError
from apps.expenses.models import MAX_AMOUNT, Expense, ExpenseShare, ExpenseStatus, ShareStatus
from apps.expenses.splitting import split, validate_amount

User = get_user_model()
logger = logging.getLogger(__name__)


def _normalize_ids(ids: Iterable, label: str) -> List[str]:
    try:
        return [str(UUID(str(i))) for i in ids]
    except ValueError:
        raise InvalidInputError(f"{label} must be UUIDs")


def _clean_title(title: str) -> str:
    title = (title or '').strip()
    if not title:
        raise ValidationError("Title cannot be blank")
    return title


def _build_shares(
    account: Account,
    amount: int,
    *,
    shares: Optional[List[dict]] = None,
    participant_ids: Optional[Iterable] = None,
    exact: bool = False,
    carried_statuses: Optional[dict] = None
) -> List[tuple]:
    """
    Validate the requested shares and return ``(user_id, amount, status)``.

    Exactly one of ``shares`` (explicit amounts) or ``participant_ids``
    (split by amount) must be given. ``carried_statuses`` maps user ids to
    the status they keep when they remain a participant.
    """
    if (shares is None) == (participant_ids is None):
        raise ValidationError("Provide either shares or participant_ids")

    carried_statuses = carried_statuses or {}

    if participant_ids is not None:
        ids = _normalize_ids(participant_ids, "Participant ids")
        built = [
            (user_id, share_amount, carried_statuses.get(user_id, ShareStatus.PENDING))
            for user_id, share_amount in split(amount, ids, exact=exact)
        ]
    else:
        if not shares:
            raise InvalidInputError("At least one share required")
        ids = _normalize_ids((s['user_id'] for s in shares), "Share user ids")
        if len(set(ids)) != len(ids):
            raise ValidationError("Each user can only have one share per expense")

        built = []
        for user_id, share in zip(ids, shares):
            share_amount = share['amount']
            if isinstance(share_amount, bool) or not isinstance(share_amount, int) or share_amount < 0:
                raise InvalidInputError("Share amounts must be non-negative whole numbers")
            if share_amount > MAX_AMOUNT:
                raise InvalidInputError(f"Share amounts cannot exceed {MAX_AMOUNT}")
            status = share.get('status') or ShareStatus.PENDING
            if status not in ShareStatus.values:
                raise InvalidInputError(f"Unknown share status: {status}")
            built.append((user_id, share_amount, status))

        # Same drift allowance as a rounded split: at most n/2 units
        drift = abs(sum(a for _, a, _ in built) - amount)
        if drift * 2 > len(built):
            raise InvalidInputError("Shares must add up to the expense amount")

    members = {str(pk) for pk in account.accepted_member_ids()}
    outsiders = [user_id for user_id, _, _ in built if user_id not in members]
    if outsiders:
        raise ValidationError("Shares can only be assigned to accepted members of the account")

    return built


def _replace_shares(expense: Expense, built: List[tuple]) -> None:
    expense.shares.all().delete()
    ExpenseShare.objects.bulk_create([
        ExpenseShare(expense=expense, user_id=user_id, amount=share_amount, status=status)
        for user_id, share_amount, status in built
    ])


def _create_expense(
    account: Account,
    created_by: User,
    title: str,
    amount: int,
    date: date_type,
    shares: Optional[List[dict]],
    participant_ids: Optional[Iterable],
    exact_split: bool
) -> Expense:
    title = _clean_title(title)
    validate_amount(amount)
    if date is None:
        raise ValidationError("Date is required")

    built = _build_shares(
        account,
        amount,
        shares=shares,
        participant_ids=participant_ids,
        exact=exact_split,
    )

    expense = Expense.objects.create(
        account=account,
        title=title,
        amount=amount,
        date=date,
        created_by=created_by,
    )
    _replace_shares(expense, built)
    return expense


def _get_expense_for_member(expense_id: UUID, user: User, *, lock: bool = False) -> Expense:
    queryset = Expense.objects.select_related('account')
    if lock:
        queryset = queryset.select_for_update()
    try:
        expense = queryset.get(id=expense_id)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")

    if not expense.account.has_member(user):
        raise NotAllowedError("You are not a member of this account")
    return expense


def _get_expenses_for_member(expense_ids: Iterable, user: User) -> QuerySet:
    """Resolve a set of ids, all of which must exist and be accessible."""
    ids = set(_normalize_ids(expense_ids, "Expense ids"))
    if not ids:
        raise ValidationError("No expenses selected")

    expenses = Expense.objects.filter(id__in=ids).select_related('account')
    found = list(expenses)
    if len(found) != len(ids):
        missing = ids - {str(e.id) for e in found}
        raise ExpenseNotFoundError(f"Expenses not found: {', '.join(sorted(missing))}")

    for account in {e.account_id: e.account for e in found}.values():
        if not account.has_member(user):
            raise NotAllowedError("You are not a member of this account")
    return expenses


@translate_database_errors
@transaction.atomic
def add_expense(
    *,
    account_id: UUID,
    created_by: User,
    title: str,
    amount: int,
    date: date_type,
    shares: Optional[List[dict]] = None,
    participant_ids: Optional[Iterable[UUID]] = None,
    exact_split: bool = False
) -> Expense:
    """
    Log an expense and its shares.

    Args:
        account_id: Account the expense belongs to
        created_by: Acting user (must be an accepted member)
        title: Short description
        amount: Positive integer amount in minor units
        date: Day the expense happened
        shares: Explicit ``[{user_id, amount, status?}]`` split
        participant_ids: Users to split ``amount`` among instead
        exact_split: Make split shares add up to the amount exactly

    Returns:
        Created Expense instance

    Raises:
        AccountNotFoundError: If account doesn't exist
        NotAllowedError: If the creator is not an accepted member
        ValidationError: If title, amount, date or shares are invalid, or a
            share names someone who is not an accepted member
    """
    account = get_account_for_member(account_id=account_id, user=created_by)
    expense = _create_expense(
        account, created_by, title, amount, date, shares, participant_ids, exact_split
    )
    logger.info("Added expense %s (%s) to account %s", expense.id, amount, account.id)
    return expense


@translate_database_errors
@transaction.atomic
def import_expenses(
    *,
    account_id: UUID,
    created_by: User,
    rows: List[dict]
) -> List[Expense]:
    """
    Persist already-parsed spreadsheet rows, all or nothing.

    Each row holds ``title``, ``amount`` and ``date`` and optionally
    ``shares``, ``participant_ids`` or ``exact_split``. Rows naming no
    participants are split among every accepted member.

    Raises:
        ValidationError: If there are no rows or any row is invalid
            (the message names the row)
    """
    account = get_account_for_member(account_id=account_id, user=created_by)
    if not rows:
        raise ValidationError("Nothing to import")

    everyone = [
        m.user_id
        for m in get_account_members(account_id=account.id, status=MembershipStatus.ACCEPTED)
    ]

    created = []
    for index, row in enumerate(rows, start=1):
        shares = row.get('shares')
        participant_ids = row.get('participant_ids')
        if shares is None and not participant_ids:
            participant_ids = everyone
        try:
            expense = _create_expense(
                account,
                created_by,
                row.get('title'),
                row.get('amount'),
                row.get('date'),
                shares,
                participant_ids,
                row.get('exact_split', False),
            )
        except DomainError as e:
            raise type(e)(f"Row {index}: {e}") from e
        created.append(expense)

    logger.info("Imported %d expense(s) into account %s", len(created), account.id)
    return created


@translate_database_errors
@transaction.atomic
def update_expense(
    *,
    expense_id: UUID,
    user: User,
    title: Optional[str] = None,
    amount: Optional[int] = None,
    date: Optional[date_type] = None,
    shares: Optional[List[dict]] = None,
    participant_ids: Optional[Iterable[UUID]] = None,
    exact_split: bool = False
) -> Expense:
    """
    Edit an expense; a new split replaces every prior share.

    Explicit ``shares`` take their statuses from the input (PENDING when
    omitted). ``participant_ids`` keep the status of participants who stay.
    An amount change without either re-splits among the current
    participants, keeping their statuses.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        NotAllowedError: If user is not an accepted member
        ValidationError: If any field is invalid
    """
    expense = _get_expense_for_member(expense_id, user, lock=True)

    if shares is not None and participant_ids is not None:
        raise ValidationError("Provide either shares or participant_ids")

    update_fields = ['updated_at']

    if title is not None:
        expense.title = _clean_title(title)
        update_fields.append('title')

    if amount is not None:
        validate_amount(amount)
        amount_changed = amount != expense.amount
        expense.amount = amount
        update_fields.append('amount')
    else:
        amount_changed = False

    if date is not None:
        expense.date = date
        update_fields.append('date')

    current = {str(s.user_id): s.status for s in expense.shares.all()}

    built = None
    if shares is not None:
        built = _build_shares(expense.account, expense.amount, shares=shares)
    elif participant_ids is not None:
        built = _build_shares(
            expense.account,
            expense.amount,
            participant_ids=participant_ids,
            exact=exact_split,
            carried_statuses=current,
        )
    elif amount_changed and current:
        built = _build_shares(
            expense.account,
            expense.amount,
            participant_ids=list(current),
            exact=exact_split,
            carried_statuses=current,
        )

    expense.save(update_fields=update_fields)
    if built is not None:
        _replace_shares(expense, built)

    logger.info("Updated expense %s", expense.id)
    return expense


@translate_database_errors
@transaction.atomic
def toggle_share_status(*, expense_id: UUID, user_id: UUID, acting_user: User) -> ExpenseShare:
    """
    Flip one share between PENDING and PAID.

    The share row is locked for the duration; a failed write rolls back
    and leaves the previous status in place.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        NotAllowedError: If acting_user is not an accepted member
        ShareNotFoundError: If the user has no share in the expense
    """
    expense = _get_expense_for_member(expense_id, acting_user)

    try:
        share = (
            ExpenseShare.objects
            .select_for_update()
            .get(expense=expense, user_id=user_id)
        )
    except ExpenseShare.DoesNotExist:
        raise ShareNotFoundError("This user has no share in the expense")

    share.toggle_status()
    share.save(update_fields=['status', 'updated_at'])

    logger.info("Share of %s in expense %s is now %s", user_id, expense.id, share.status)
    return share


@translate_database_errors
@transaction.atomic
def delete_expense(*, expense_id: UUID, user: User) -> None:
    """
    Hard-delete an expense and its shares.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        NotAllowedError: If user is not an accepted member
    """
    expense = _get_expense_for_member(expense_id, user, lock=True)
    expense.delete()
    logger.info("Deleted expense %s", expense_id)


@translate_database_errors
@transaction.atomic
def delete_expenses(*, expense_ids: Iterable[UUID], user: User) -> int:
    """
    Hard-delete several expenses in one statement.

    Returns:
        Number of expenses deleted

    Raises:
        ValidationError: If no ids are given
        ExpenseNotFoundError: If any id does not exist (nothing is deleted)
        NotAllowedError: If user is not a member of every affected account
    """
    expenses = _get_expenses_for_member(expense_ids, user)
    count = expenses.count()
    expenses.delete()
    logger.info("Deleted %d expense(s)", count)
    return count


def _set_status(expense_id: UUID, user: User, status: str) -> Expense:
    expense = _get_expense_for_member(expense_id, user, lock=True)
    expense.status = status
    expense.save(update_fields=['status', 'updated_at'])
    logger.info("Expense %s is now %s", expense.id, status)
    return expense


@translate_database_errors
@transaction.atomic
def archive_expense(*, expense_id: UUID, user: User) -> Expense:
    """Soft-delete an expense; it disappears from the active list."""
    return _set_status(expense_id, user, ExpenseStatus.ARCHIVED)


@translate_database_errors
@transaction.atomic
def restore_expense(*, expense_id: UUID, user: User) -> Expense:
    """Bring an archived expense back to the active list."""
    return _set_status(expense_id, user, ExpenseStatus.ACTIVE)


@translate_database_errors
@transaction.atomic
def archive_expenses(*, expense_ids: Iterable[UUID], user: User) -> int:
    """
    Archive several expenses in one statement.

    Returns:
        Number of expenses archived
    """
    expenses = _get_expenses_for_member(expense_ids, user)
    count = expenses.update(status=ExpenseStatus.ARCHIVED)
    logger.info("Archived %d expense(s)", count)
    return count


def get_expense(*, expense_id: UUID, user: User) -> Expense:
    """
    Get one expense with its shares.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        NotAllowedError: If user is not an accepted member
    """
    return _get_expense_for_member(expense_id, user)


def get_all_expenses(*, account_id: UUID, user: User) -> QuerySet[Expense]:
    """
    Get every expense of an account, archived ones included.

    Newest first; same-day expenses by creation time, newest first.
    """
    account = get_account_for_member(account_id=account_id, user=user)
    return (
        Expense.objects
        .filter(account=account)
        .select_related('created_by')
        .prefetch_related('shares__user')
        .order_by('-date', '-created_at')
    )


def get_expenses(*, account_id: UUID, user: User) -> QuerySet[Expense]:
    """Get the ACTIVE expenses of an account, newest first."""
    return get_all_expenses(account_id=account_id, user=user).filter(status=ExpenseStatus.ACTIVE)
