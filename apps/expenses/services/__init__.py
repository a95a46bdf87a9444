"""
Expenses app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from apps.expenses.exceptions import (
    InvalidInputError,
    ExpenseNotFoundError,
    ShareNotFoundError,
)

from .expense_management import (
    add_expense,
    import_expenses,
    update_expense,
    toggle_share_status,
    delete_expense,
    delete_expenses,
    archive_expense,
    archive_expenses,
    restore_expense,
    get_expense,
    get_expenses,
    get_all_expenses,
)

from .balance_queries import (
    get_account_balances,
)


__all__ = [
    # Exceptions
    'InvalidInputError',
    'ExpenseNotFoundError',
    'ShareNotFoundError',

    # Expense Management
    'add_expense',
    'import_expenses',
    'update_expense',
    'toggle_share_status',
    'delete_expense',
    'delete_expenses',
    'archive_expense',
    'archive_expenses',
    'restore_expense',
    'get_expense',
    'get_expenses',
    'get_all_expenses',

    # Balances
    'get_account_balances',
]
