import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.users.models import User
from apps.accounts.models import Account, AccountMembership, MembershipStatus


def jwt_client(user):
    """Return an API client authenticated as ``user`` using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def account_owner(db):
    """Create and return the account owner."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        full_name='Account Owner',
    )


@pytest.fixture
def account_member(db):
    """Create and return an accepted member."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        full_name='Account Member',
    )


@pytest.fixture
def account_invitee(db):
    """Create and return a user with a pending invitation."""
    return User.objects.create_user(
        email='invitee@example.com',
        password='TestPass123!',
        full_name='Pending Invitee',
    )


@pytest.fixture
def account_outsider(db):
    """Create and return a user not in any account."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        full_name='Outsider',
    )


@pytest.fixture
def owner_client(account_owner):
    return jwt_client(account_owner)


@pytest.fixture
def member_client(account_member):
    return jwt_client(account_member)


@pytest.fixture
def invitee_client(account_invitee):
    return jwt_client(account_invitee)


@pytest.fixture
def outsider_client(account_outsider):
    return jwt_client(account_outsider)


@pytest.fixture
def account(db, account_owner, account_member, account_invitee):
    """Account with owner, one accepted member and one pending invitee."""
    account = Account.objects.create(name='Shared Flat', owner=account_owner)
    AccountMembership.objects.create(
        account=account,
        user=account_owner,
        status=MembershipStatus.ACCEPTED,
    )
    AccountMembership.objects.create(
        account=account,
        user=account_member,
        status=MembershipStatus.ACCEPTED,
        invited_by=account_owner,
    )
    AccountMembership.objects.create(
        account=account,
        user=account_invitee,
        status=MembershipStatus.PENDING,
        invited_by=account_owner,
    )
    return account


@pytest.fixture
def ownerless_row_account(db, account_owner):
    """Account whose owner has no membership row."""
    return Account.objects.create(name='Legacy Account', owner=account_owner)
