import pytest
from django.urls import reverse
from rest_framework import status
from apps.users.models import User
from apps.users.names import ADJECTIVES, NOUNS


def sign_up(client, email, name=None):
    payload = {
        'email': email,
        'password': 'Fl4tShare!2024',
        'password_confirm': 'Fl4tShare!2024',
    }
    if name is not None:
        payload['full_name'] = name
    return client.post(reverse('users:register'), payload, format='json')


# =============================================================================
# Sign-up Tests
# =============================================================================

@pytest.mark.django_db
class TestSignUp:
    """Tests for POST /api/auth/register/"""

    def test_named_profile_with_tokens(self, api_client):
        response = sign_up(api_client, 'liin@example.com', name='Liin')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['user']['name'] == 'Liin'
        assert response.data['user']['avatar_url'] == ''
        assert set(response.data['tokens']) == {'access', 'refresh'}

    def test_blank_name_gets_playful_name(self, api_client):
        """Profiles never end up nameless; a random name fills the gap."""
        response = sign_up(api_client, 'hose@example.com', name='   ')

        adjective, noun = response.data['user']['full_name'].split(' ')
        assert adjective in ADJECTIVES
        assert noun in NOUNS

    def test_email_taken_in_other_case(self, api_client, user):
        response = sign_up(api_client, user.email.upper())

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'A user with this email already exists'
        assert User.objects.count() == 1

    def test_password_confirmation_must_match(self, api_client):
        response = api_client.post(
            reverse('users:register'),
            {'email': 'x@example.com', 'password': 'Fl4tShare!2024', 'password_confirm': 'nope'},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not User.objects.exists()


# =============================================================================
# Sign-in Tests
# =============================================================================

@pytest.mark.django_db
class TestSignIn:
    """Tests for POST /api/auth/login/"""

    def test_email_case_is_ignored(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'TestUser@Example.com', 'password': 'TestPass123!'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['id'] == str(user.id)
        assert response.data['user']['last_login'] is not None

    def test_tokens_open_the_profile(self, api_client, user):
        login = api_client.post(
            reverse('users:login'),
            {'email': user.email, 'password': 'TestPass123!'},
            format='json',
        )
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['tokens']['access']}")

        response = api_client.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Test User'

    def test_bad_password_and_unknown_email_look_alike(self, api_client, user):
        url = reverse('users:login')
        wrong = api_client.post(url, {'email': user.email, 'password': 'nope'}, format='json')
        ghost = api_client.post(url, {'email': 'ghost@example.com', 'password': 'nope'}, format='json')

        assert wrong.status_code == ghost.status_code == status.HTTP_401_UNAUTHORIZED
        assert wrong.data == ghost.data

    def test_deactivated_profile(self, api_client, user_inactive):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user_inactive.email, 'password': 'TestPass123!'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'This profile has been deactivated'


# =============================================================================
# Profile Settings Tests
# =============================================================================

@pytest.mark.django_db
class TestProfileSettings:
    """Tests for GET /api/auth/user/ and PATCH /api/auth/user/update/"""

    def test_anonymous_has_no_profile(self, api_client):
        assert api_client.get(reverse('users:current-user')).status_code == status.HTTP_401_UNAUTHORIZED
        response = api_client.patch(reverse('users:update-profile'), {'full_name': 'X'}, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_rename(self, authenticated_client, user):
        url = reverse('users:update-profile')
        response = authenticated_client.patch(url, {'full_name': '  Swift Panda '}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Swift Panda'

    def test_blank_name_rejected(self, authenticated_client, user):
        url = reverse('users:update-profile')
        response = authenticated_client.patch(url, {'full_name': '   '}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        user.refresh_from_db()
        assert user.full_name == 'Test User'

    @pytest.mark.parametrize('icon', ['Cat', 'Dog', 'Crown'])
    def test_pick_icon_avatar(self, authenticated_client, user, icon):
        url = reverse('users:update-profile')
        response = authenticated_client.patch(url, {'avatar': f'icon:{icon}'}, format='json')

        assert response.data['avatar_url'] == f'icon:{icon}'
        user.refresh_from_db()
        assert user.avatar_icon == icon

    def test_image_avatar_then_clear(self, authenticated_client, user):
        url = reverse('users:update-profile')
        authenticated_client.patch(url, {'avatar': 'https://img.example.com/me.png'}, format='json')
        user.refresh_from_db()
        assert user.avatar_icon is None

        response = authenticated_client.patch(url, {'avatar': ''}, format='json')

        assert response.data['avatar_url'] == ''

    @pytest.mark.parametrize('avatar', [
        'icon:Dragon',
        'ftp://img.example.com/me.png',
        'https://img.example.com/' + 'a' * 480 + '.png',
    ])
    def test_bad_avatar_rejected(self, authenticated_client, user, avatar):
        url = reverse('users:update-profile')
        response = authenticated_client.patch(url, {'avatar': avatar}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        user.refresh_from_db()
        assert user.avatar_url == ''


# =============================================================================
# Invite Lookup and Name Suggestion Tests
# =============================================================================

@pytest.mark.django_db
class TestInviteLookup:
    """Tests for GET /api/auth/users/lookup/"""

    def test_finds_profile_regardless_of_case(self, authenticated_client, other_user):
        url = reverse('users:user-lookup')
        response = authenticated_client.get(url, {'email': other_user.email.upper()})

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'id': str(other_user.id),
            'email': other_user.email,
            'name': 'Other User',
            'avatar_url': '',
        }

    def test_deactivated_profile_is_hidden(self, authenticated_client, user_inactive):
        url = reverse('users:user-lookup')
        response = authenticated_client.get(url, {'email': user_inactive.email})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_email_param_required(self, authenticated_client):
        response = authenticated_client.get(reverse('users:user-lookup'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestRandomName:
    """Tests for GET /api/auth/random-name/"""

    @pytest.mark.django_db
    def test_suggestion_needs_no_login(self, api_client):
        response = api_client.get(reverse('users:random-name'))

        assert response.status_code == status.HTTP_200_OK
        adjective, noun = response.data['name'].split(' ')
        assert adjective in ADJECTIVES
        assert noun in NOUNS
