"""Account balance summary for the balances view."""

from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model

from apps.accounts.models import MembershipStatus
from apps.accounts.services import get_account_for_member, get_account_members
from apps.expenses.balances import (
    per_member_pending,
    reconcile,
    reconciliation_difference,
    total_pending,
)

from .expense_management import get_expenses

User = get_user_model()


def get_account_balances(*, account_id: UUID, user: User, bank_reported_total=None) -> dict:
    """
    Summarize what is still owed in an account.

    Only ACTIVE expenses count. When ``bank_reported_total`` is given the
    pending total is reconciled against it.

    Returns:
        dict with totals, per-member pending amounts and the
        reconciliation status and difference

    Raises:
        AccountNotFoundError: If account doesn't exist
        NotAllowedError: If user is not an accepted member
    """
    account = get_account_for_member(account_id=account_id, user=user)
    expenses = list(get_expenses(account_id=account.id, user=user))
    members = [
        membership.user
        for membership in get_account_members(account_id=account.id, status=MembershipStatus.ACCEPTED)
    ]

    system_total = total_pending(expenses)
    status = reconcile(system_total, bank_reported_total, tolerance=settings.RECONCILIATION_TOLERANCE)

    return {
        'account_id': account.id,
        'currency': settings.CURRENCY_CODE,
        'expense_count': len(expenses),
        'total_amount': sum(expense.amount for expense in expenses),
        'total_pending': system_total,
        'members': [balance._asdict() for balance in per_member_pending(expenses, members)],
        'bank_reported_total': bank_reported_total,
        'status': status.value,
        'difference': reconciliation_difference(system_total, bank_reported_total),
    }
