import pytest
from io import StringIO
from django.core.management import call_command

from apps.accounts.models import Account
from apps.expenses.models import Expense, ShareStatus
from apps.users.models import User


@pytest.mark.django_db
class TestSeedDemoData:
    """Tests for the seed_demo_data management command."""

    def test_seeds_household(self):
        call_command('seed_demo_data', stdout=StringIO())

        account = Account.objects.get(name='Liin & Hose Home')
        liin = User.objects.get(email='liin@example.com')
        hose = User.objects.get(email='hose@example.com')
        assert account.owner == liin
        assert account.has_member(hose)

        expense = Expense.objects.get(account=account)
        assert expense.amount == 1200
        statuses = {s.user_id: s.status for s in expense.shares.all()}
        assert statuses == {liin.id: ShareStatus.PAID, hose.id: ShareStatus.PENDING}

    def test_is_idempotent(self):
        call_command('seed_demo_data', stdout=StringIO())
        call_command('seed_demo_data', stdout=StringIO())

        assert Account.objects.filter(name='Liin & Hose Home').count() == 1
        assert Expense.objects.count() == 1

    def test_dry_run(self):
        out = StringIO()
        call_command('seed_demo_data', '--dry-run', stdout=out)

        assert 'dry-run' in out.getvalue()
        assert not Account.objects.exists()
        assert not User.objects.exists()
