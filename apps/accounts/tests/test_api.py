import pytest
from datetime import date
from uuid import uuid4
from django.urls import reverse
from rest_framework import status

from apps.accounts.models import Account, AccountMembership, MembershipStatus
from apps.expenses.models import Expense, ExpenseShare, ShareStatus


# =============================================================================
# Account CRUD Tests
# =============================================================================

@pytest.mark.django_db
class TestAccountCRUD:
    """Tests for /api/accounts/"""

    def test_list_requires_auth(self, api_client):
        url = reverse('accounts:account-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_only_active_accounts(self, account, member_client, invitee_client):
        url = reverse('accounts:account-list')

        response = member_client.get(url)
        assert response.status_code == status.HTTP_200_OK
        assert [a['id'] for a in response.data['results']] == [str(account.id)]

        response = invitee_client.get(url)
        assert response.data['results'] == []

    def test_create_account(self, owner_client, account_owner, account_member):
        url = reverse('accounts:account-list')
        data = {'name': 'Beach House', 'invitee_ids': [str(account_member.id)]}
        response = owner_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Beach House'
        assert response.data['owner']['id'] == str(account_owner.id)
        assert response.data['my_status'] == MembershipStatus.ACCEPTED
        assert response.data['member_count'] == 1

        account = Account.objects.get(name='Beach House')
        assert account.memberships.get(user=account_member).status == MembershipStatus.PENDING

    def test_create_account_blank_name(self, owner_client):
        url = reverse('accounts:account-list')
        response = owner_client.post(url, {'name': '  '}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_account_unknown_invitee(self, owner_client):
        url = reverse('accounts:account-list')
        response = owner_client.post(url, {'name': 'Home', 'invitee_ids': [str(uuid4())]}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert 'error' in response.data

    def test_retrieve_as_member(self, account, member_client):
        url = reverse('accounts:account-detail', kwargs={'pk': account.id})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['member_count'] == 2

    def test_retrieve_as_outsider(self, account, outsider_client):
        url = reverse('accounts:account-detail', kwargs={'pk': account.id})
        response = outsider_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_rename_as_owner(self, account, owner_client):
        url = reverse('accounts:account-detail', kwargs={'pk': account.id})
        response = owner_client.patch(url, {'name': 'New Flat'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'New Flat'

    def test_rename_as_member_forbidden(self, account, member_client):
        url = reverse('accounts:account-detail', kwargs={'pk': account.id})
        response = member_client.patch(url, {'name': 'Hijacked'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        account.refresh_from_db()
        assert account.name == 'Shared Flat'

    def test_put_not_allowed(self, account, owner_client):
        url = reverse('accounts:account-detail', kwargs={'pk': account.id})
        response = owner_client.put(url, {'name': 'X'}, format='json')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED

    def test_delete_as_owner(self, account, owner_client, account_owner):
        Expense.objects.create(
            account=account, title='Pizza', amount=1000, date=date(2024, 3, 1), created_by=account_owner,
        )
        url = reverse('accounts:account-detail', kwargs={'pk': account.id})
        response = owner_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Account.objects.filter(id=account.id).exists()
        assert not Expense.objects.exists()

    def test_delete_as_member_forbidden(self, account, member_client):
        url = reverse('accounts:account-detail', kwargs={'pk': account.id})
        response = member_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Account.objects.filter(id=account.id).exists()


# =============================================================================
# My Accounts Tests
# =============================================================================

@pytest.mark.django_db
class TestMyAccounts:
    """Tests for GET /api/accounts/my/"""

    def test_invitee_sees_invitation(self, account, invitee_client):
        url = reverse('accounts:my-accounts')
        response = invitee_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['accounts'] == []
        assert [a['id'] for a in response.data['invitations']] == [str(account.id)]
        assert response.data['invitations'][0]['my_status'] == MembershipStatus.PENDING

    def test_member_sees_account(self, account, member_client):
        url = reverse('accounts:my-accounts')
        response = member_client.get(url)

        assert [a['id'] for a in response.data['accounts']] == [str(account.id)]
        assert response.data['invitations'] == []


# =============================================================================
# Membership Action Tests
# =============================================================================

@pytest.mark.django_db
class TestMembershipActions:
    """Tests for members/invite/accept/reject/remove_member actions."""

    def test_members_list(self, account, member_client, account_owner):
        url = reverse('accounts:account-members', kwargs={'pk': account.id})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 3
        assert response.data[0]['user']['id'] == str(account_owner.id)
        assert response.data[0]['is_owner'] is True

    def test_members_list_filtered(self, account, member_client):
        url = reverse('accounts:account-members', kwargs={'pk': account.id})
        response = member_client.get(url, {'status': MembershipStatus.PENDING})

        assert [m['status'] for m in response.data] == [MembershipStatus.PENDING]

    def test_members_list_pending_invitee_cannot_see(self, account, invitee_client):
        url = reverse('accounts:account-members', kwargs={'pk': account.id})
        response = invitee_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_invite_by_user_id(self, account, owner_client, account_outsider):
        url = reverse('accounts:account-invite', kwargs={'pk': account.id})
        response = owner_client.post(url, {'user_id': str(account_outsider.id)}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == MembershipStatus.PENDING

    def test_invite_by_email(self, account, owner_client, account_outsider):
        url = reverse('accounts:account-invite', kwargs={'pk': account.id})
        response = owner_client.post(url, {'email': account_outsider.email}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['user']['email'] == account_outsider.email

    def test_invite_unknown_email(self, account, owner_client):
        url = reverse('accounts:account-invite', kwargs={'pk': account.id})
        response = owner_client.post(url, {'email': 'ghost@example.com'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_invite_existing_member_conflict(self, account, owner_client, account_member):
        url = reverse('accounts:account-invite', kwargs={'pk': account.id})
        response = owner_client.post(url, {'user_id': str(account_member.id)}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_invite_requires_exactly_one_target(self, account, owner_client, account_outsider):
        url = reverse('accounts:account-invite', kwargs={'pk': account.id})
        response = owner_client.post(
            url,
            {'user_id': str(account_outsider.id), 'email': account_outsider.email},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_invite_as_member_forbidden(self, account, member_client, account_outsider):
        url = reverse('accounts:account-invite', kwargs={'pk': account.id})
        response = member_client.post(url, {'user_id': str(account_outsider.id)}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_accept(self, account, invitee_client, account_invitee):
        url = reverse('accounts:account-accept', kwargs={'pk': account.id})
        response = invitee_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == MembershipStatus.ACCEPTED
        assert account.has_member(account_invitee)

    def test_accept_without_invitation(self, account, outsider_client):
        url = reverse('accounts:account-accept', kwargs={'pk': account.id})
        response = outsider_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_accept_already_accepted(self, account, member_client):
        url = reverse('accounts:account-accept', kwargs={'pk': account.id})
        response = member_client.post(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reject(self, account, invitee_client, account_invitee):
        url = reverse('accounts:account-reject', kwargs={'pk': account.id})
        response = invitee_client.post(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not AccountMembership.objects.filter(account=account, user=account_invitee).exists()

    def test_remove_member_always_forbidden(self, account, owner_client, account_member):
        url = reverse('accounts:account-remove-member', kwargs={'pk': account.id})
        response = owner_client.delete(url, {'user_id': str(account_member.id)}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'Removing members is not allowed.'
        assert account.has_member(account_member)


# =============================================================================
# Balances Tests
# =============================================================================

@pytest.mark.django_db
class TestBalances:
    """Tests for GET /api/accounts/{id}/balances/"""

    @pytest.fixture
    def dinner(self, account, account_owner, account_member):
        expense = Expense.objects.create(
            account=account, title='Dinner', amount=10000, date=date(2024, 5, 1), created_by=account_owner,
        )
        ExpenseShare.objects.create(expense=expense, user=account_owner, amount=5000, status=ShareStatus.PAID)
        ExpenseShare.objects.create(expense=expense, user=account_member, amount=5000)
        return expense

    def test_balances_idle(self, account, dinner, member_client, account_member):
        url = reverse('accounts:account-balances', kwargs={'pk': account.id})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_pending'] == 5000
        assert response.data['status'] == 'IDLE'
        assert response.data['difference'] is None
        pending = {m['user_id']: m['pending_amount'] for m in response.data['members']}
        assert pending[str(account_member.id)] == 5000

    def test_balances_match(self, account, dinner, member_client):
        url = reverse('accounts:account-balances', kwargs={'pk': account.id})
        response = member_client.get(url, {'bank_total': 5050})

        assert response.data['status'] == 'MATCH'
        assert response.data['difference'] == 50

    def test_balances_mismatch(self, account, dinner, member_client):
        url = reverse('accounts:account-balances', kwargs={'pk': account.id})
        response = member_client.get(url, {'bank_total': 5200})

        assert response.data['status'] == 'MISMATCH'
        assert response.data['difference'] == 200

    def test_balances_outsider_forbidden(self, account, outsider_client):
        url = reverse('accounts:account-balances', kwargs={'pk': account.id})
        response = outsider_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
