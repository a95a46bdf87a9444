import pytest
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.users.models import User
from apps.accounts.models import Account, AccountMembership, MembershipStatus
from apps.expenses.models import Expense, ExpenseShare, ExpenseStatus, ShareStatus


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
def alice(db):
    """Account owner."""
    return User.objects.create_user(
        email='alice@example.com',
        password='TestPass123!',
        full_name='Alice',
    )


@pytest.fixture
def bob(db):
    return User.objects.create_user(
        email='bob@example.com',
        password='TestPass123!',
        full_name='Bob',
    )


@pytest.fixture
def carol(db):
    return User.objects.create_user(
        email='carol@example.com',
        password='TestPass123!',
        full_name='Carol',
    )


@pytest.fixture
def pending_user(db):
    """Invited to the account but has not accepted."""
    return User.objects.create_user(
        email='pending@example.com',
        password='TestPass123!',
        full_name='Pending Pete',
    )


@pytest.fixture
def outsider(db):
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        full_name='Outsider',
    )


@pytest.fixture
def alice_client(alice):
    return jwt_client(alice)


@pytest.fixture
def bob_client(bob):
    return jwt_client(bob)


@pytest.fixture
def outsider_client(outsider):
    return jwt_client(outsider)


@pytest.fixture
def account(db, alice, bob, carol, pending_user):
    """Account owned by Alice with Bob and Carol accepted and one pending invitee."""
    account = Account.objects.create(name='Flat 4B', owner=alice)
    AccountMembership.objects.create(account=account, user=alice, status=MembershipStatus.ACCEPTED)
    for user in (bob, carol):
        AccountMembership.objects.create(
            account=account,
            user=user,
            status=MembershipStatus.ACCEPTED,
            invited_by=alice,
        )
    AccountMembership.objects.create(
        account=account,
        user=pending_user,
        status=MembershipStatus.PENDING,
        invited_by=alice,
    )
    return account


@pytest.fixture
def groceries(db, account, alice, bob, carol):
    """3000 split evenly; Alice has already paid her part."""
    expense = Expense.objects.create(
        account=account,
        title='Groceries',
        amount=3000,
        date=date(2024, 6, 1),
        created_by=alice,
    )
    ExpenseShare.objects.create(expense=expense, user=alice, amount=1000, status=ShareStatus.PAID)
    ExpenseShare.objects.create(expense=expense, user=bob, amount=1000)
    ExpenseShare.objects.create(expense=expense, user=carol, amount=1000)
    return expense


@pytest.fixture
def utilities(db, account, alice, bob):
    """Older expense shared by Alice and Bob, both pending."""
    expense = Expense.objects.create(
        account=account,
        title='Electricity',
        amount=5000,
        date=date(2024, 5, 20),
        created_by=bob,
    )
    ExpenseShare.objects.create(expense=expense, user=alice, amount=2500)
    ExpenseShare.objects.create(expense=expense, user=bob, amount=2500)
    return expense


@pytest.fixture
def archived_expense(db, account, alice):
    expense = Expense.objects.create(
        account=account,
        title='Old couch',
        amount=8000,
        date=date(2024, 1, 15),
        created_by=alice,
        status=ExpenseStatus.ARCHIVED,
    )
    ExpenseShare.objects.create(expense=expense, user=alice, amount=8000)
    return expense
