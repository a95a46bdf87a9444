"""
Accounts app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    AccountNotFoundError,
    MembershipNotFoundError,
    InvitationNotPendingError,
)

from .account_management import (
    AccountPartition,
    create_account,
    update_account,
    delete_account,
    get_account_by_id,
    get_account_for_member,
    get_user_accounts,
)

from .membership_management import (
    invite_member,
    invite_member_by_email,
    accept_invitation,
    reject_invitation,
    remove_member,
    get_membership_status,
    get_account_members,
)


__all__ = [
    # Exceptions
    'AccountNotFoundError',
    'MembershipNotFoundError',
    'InvitationNotPendingError',

    # Account Management
    'AccountPartition',
    'create_account',
    'update_account',
    'delete_account',
    'get_account_by_id',
    'get_account_for_member',
    'get_user_accounts',

    # Membership Management
    'invite_member',
    'invite_member_by_email',
    'accept_invitation',
    'reject_invitation',
    'remove_member',
    'get_membership_status',
    'get_account_members',
]
