"""
Balance and reconciliation figures derived from a set of expenses.

Everything here is pure: callers load the expenses and members and
decide what to show.
"""

from enum import Enum
from typing import NamedTuple, Optional

from .splitting import pending_per_user, pending_total

RECONCILIATION_TOLERANCE = 100


class ReconciliationStatus(str, Enum):
    IDLE = 'IDLE'
    MATCH = 'MATCH'
    MISMATCH = 'MISMATCH'


class MemberBalance(NamedTuple):
    user_id: object
    name: str
    pending_amount: int


def total_pending(expenses) -> int:
    return pending_total(expenses)


def per_member_pending(expenses, members) -> list:
    """
    Pending amount owed by each member, in the order of ``members``.

    ``members`` are users (anything with ``pk`` and ``get_display_name``);
    members without shares owe 0.
    """
    expenses = list(expenses)
    return [
        MemberBalance(
            user_id=member.pk,
            name=member.get_display_name(),
            pending_amount=pending_per_user(expenses, member.pk),
        )
        for member in members
    ]


def reconcile(
    system_total: int,
    bank_reported_total: Optional[int],
    tolerance: int = RECONCILIATION_TOLERANCE
) -> ReconciliationStatus:
    """
    Compare the system's pending total with a figure reported by the bank.

    IDLE when no bank figure is given, MATCH when the two are strictly
    closer than ``tolerance``, MISMATCH otherwise.
    """
    if bank_reported_total is None:
        return ReconciliationStatus.IDLE
    if abs(bank_reported_total - system_total) < tolerance:
        return ReconciliationStatus.MATCH
    return ReconciliationStatus.MISMATCH


def reconciliation_difference(system_total: int, bank_reported_total: Optional[int]) -> Optional[int]:
    if bank_reported_total is None:
        return None
    return abs(bank_reported_total - system_total)
