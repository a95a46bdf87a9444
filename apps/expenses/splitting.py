"""
Expense Splitting Module
========================

Pure functions for dividing an expense among participants and summing
what is still owed. Amounts are integers in minor currency units.

Two rounding modes are available:

* Default: every participant owes ``round_half_up(total / n)``. The shares
  may then miss the total by at most ``n / 2`` units; the drift is kept.
* Exact: floor division, with the remainder handed out one unit at a time
  to the first participants, so the shares always sum to the total.

Example:
    1000 split among 3 people::

        >>> split(1000, ['a', 'b', 'c'])
        [('a', 333), ('b', 333), ('c', 333)]
        >>> split(1000, ['a', 'b', 'c'], exact=True)
        [('a', 334), ('b', 333), ('c', 333)]

The aggregate helpers accept ORM expenses (shares through the ``shares``
related manager) as well as plain objects whose ``shares`` attribute is an
iterable of items with ``user_id``, ``amount`` and ``status``.
"""

from typing import Hashable, Iterable, List, Sequence, Tuple

from .exceptions import InvalidInputError
from .models import MAX_AMOUNT, ShareStatus


def validate_amount(total_amount) -> None:
    """Reject anything but a positive integer amount that fits the amount column."""
    if isinstance(total_amount, bool) or not isinstance(total_amount, int):
        raise InvalidInputError("Amount must be a whole number of minor units")
    if total_amount <= 0:
        raise InvalidInputError("Amount must be greater than zero")
    if total_amount > MAX_AMOUNT:
        raise InvalidInputError(f"Amount cannot exceed {MAX_AMOUNT}")


def split(
    total_amount: int,
    participant_ids: Iterable[Hashable],
    *,
    exact: bool = False
) -> List[Tuple[Hashable, int]]:
    """
    Split ``total_amount`` among participants.

    Duplicate ids are dropped; output follows the order of first appearance.

    Args:
        total_amount: Positive integer amount in minor units.
        participant_ids: Ids of the users sharing the expense.
        exact: Distribute the remainder so the shares sum to the total.

    Returns:
        list[tuple]: ``(participant_id, amount)`` pairs.

    Raises:
        InvalidInputError: If the amount is not a positive integer or there
            are no participants.
    """
    validate_amount(total_amount)
    participants = list(dict.fromkeys(participant_ids))
    if not participants:
        raise InvalidInputError("At least one participant required")

    count = len(participants)

    if not exact:
        # round half up: floor((2 * total + n) / (2 * n))
        share = (2 * total_amount + count) // (2 * count)
        return [(participant, share) for participant in participants]

    base, remainder = divmod(total_amount, count)
    return [
        (participant, base + 1 if i < remainder else base)
        for i, participant in enumerate(participants)
    ]


def toggle_participant(participant_ids: Sequence[Hashable], user_id: Hashable) -> list:
    """
    Add ``user_id`` to the selection or remove it if already present.

    Removing the only remaining participant leaves the selection unchanged.
    """
    selection = list(participant_ids)
    if user_id not in selection:
        return selection + [user_id]
    if len(selection) == 1:
        return selection
    return [p for p in selection if p != user_id]


def _shares_of(expense):
    shares = expense.shares
    if hasattr(shares, 'all'):
        return shares.all()
    return shares


def pending_total(expenses) -> int:
    """Sum of PENDING share amounts across ``expenses``."""
    return sum(
        share.amount
        for expense in expenses
        for share in _shares_of(expense)
        if share.status == ShareStatus.PENDING
    )


def pending_per_user(expenses, user_id) -> int:
    """Sum of PENDING share amounts owed by one user."""
    return sum(
        share.amount
        for expense in expenses
        for share in _shares_of(expense)
        if share.status == ShareStatus.PENDING and str(share.user_id) == str(user_id)
    )
