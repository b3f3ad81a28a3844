import pytest
from datetime import timedelta
from unittest.mock import patch
from django.db import IntegrityError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from apps.accounts.models import Account
from apps.accounts.security import ADMIN, ANONYMOUS_USER, USER


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new, unactivated account."""
        url = reverse('accounts:register')
        data = {
            'login': 'NewUser',
            'email': 'newuser@example.com',
            'password': 'SecurePass123!',
            'first_name': 'New',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['user']['login'] == 'newuser'
        assert response.data['user']['activated'] is False
        assert 'tokens' not in response.data
        assert 'password' not in response.data['user']

        account = Account.objects.get(login='newuser')
        assert account.activation_key is not None
        assert account.get_authority_names() == {USER}

    def test_register_duplicate_login(self, api_client, user):
        """Cannot register with an existing login."""
        url = reverse('accounts:register')
        data = {
            'login': user.login,
            'email': 'fresh@example.com',
            'password': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Login name already used'

    def test_register_duplicate_email(self, api_client, user):
        """Cannot register with an existing email."""
        url = reverse('accounts:register')
        data = {
            'login': 'fresh',
            'email': user.email,
            'password': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Email is already in use'

    def test_register_invalid_login(self, api_client):
        """Login may only contain letters, digits and _.@-"""
        url = reverse('accounts:register')
        data = {
            'login': 'bad login!',
            'email': 'bad@example.com',
            'password': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'login' in response.data

    def test_register_weak_password(self, api_client):
        """Registration fails with a too short password."""
        url = reverse('accounts:register')
        data = {
            'login': 'weak',
            'email': 'weak@example.com',
            'password': '123',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_anonymous_login_is_reserved(self, api_client, user):
        """The login used for unauthenticated requests cannot be taken."""
        url = reverse('accounts:register')
        data = {
            'login': 'AnonymousUser',
            'email': 'anon@example.com',
            'password': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Login name already used'
        assert not Account.objects.filter(login=ANONYMOUS_USER).exists()

    def test_register_sends_activation_mail(
        self, api_client, mailoutbox, django_capture_on_commit_callbacks
    ):
        url = reverse('accounts:register')
        data = {
            'login': 'mailme',
            'email': 'mailme@example.com',
            'password': 'SecurePass123!',
        }
        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        account = Account.objects.get(login='mailme')
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['mailme@example.com']
        assert f'/api/activate/?key={account.activation_key}' in mailoutbox[0].body

    def test_register_conflict_sends_no_mail(
        self, api_client, user, mailoutbox, django_capture_on_commit_callbacks
    ):
        url = reverse('accounts:register')
        data = {
            'login': user.login,
            'email': 'fresh@example.com',
            'password': 'SecurePass123!',
        }
        with django_capture_on_commit_callbacks(execute=True):
            api_client.post(url, data)

        assert mailoutbox == []

    def test_activate_with_mailed_link(
        self, api_client, mailoutbox, django_capture_on_commit_callbacks
    ):
        """Activation works with nothing but the mailed key."""
        data = {
            'login': 'linkuser',
            'email': 'linkuser@example.com',
            'password': 'SecurePass123!',
        }
        with django_capture_on_commit_callbacks(execute=True):
            api_client.post(reverse('accounts:register'), data)

        key = mailoutbox[0].body.split('?key=')[1].split()[0]
        response = api_client.get(reverse('accounts:activate'), {'key': key})

        assert response.status_code == status.HTTP_200_OK
        assert Account.objects.get(login='linkuser').activated is True


# =============================================================================
# Activation Tests
# =============================================================================

@pytest.mark.django_db
class TestActivation:
    """Tests for GET /api/activate/"""

    def test_activate_success(self, api_client, user_unactivated):
        url = reverse('accounts:activate')
        response = api_client.get(url, {'key': 'pendingActivation123'})

        assert response.status_code == status.HTTP_200_OK
        user_unactivated.refresh_from_db()
        assert user_unactivated.activated is True

    def test_activate_unknown_key(self, api_client):
        url = reverse('accounts:activate')
        response = api_client.get(url, {'key': 'unknown'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_activate_missing_key(self, api_client, user):
        url = reverse('accounts:activate')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/authenticate/"""

    def test_login_success(self, api_client, user):
        """Successfully login with valid credentials."""
        url = reverse('accounts:login')
        data = {
            'login': 'TestUser',
            'password': 'TestPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['login'] == user.login

    def test_login_wrong_password(self, api_client, user):
        """Login fails with wrong password."""
        url = reverse('accounts:login')
        data = {
            'login': user.login,
            'password': 'WrongPassword123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert 'error' in response.data

    def test_login_unactivated_account(self, api_client, user_unactivated):
        """Not activated accounts cannot log in."""
        url = reverse('accounts:login')
        data = {
            'login': user_unactivated.login,
            'password': 'TestPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_updates_last_login(self, api_client, user):
        url = reverse('accounts:login')
        data = {
            'login': user.login,
            'password': 'TestPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.last_login is not None


# =============================================================================
# Current Account Tests
# =============================================================================

@pytest.mark.django_db
class TestCurrentAccount:
    """Tests for GET/POST /api/account/"""

    def test_get_account(self, authenticated_client, user):
        url = reverse('accounts:account')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['login'] == user.login
        assert response.data['authorities'] == [USER]

    def test_get_account_unauthenticated(self, api_client):
        url = reverse('accounts:account')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_account(self, authenticated_client, user):
        url = reverse('accounts:account')
        data = {
            'first_name': 'Updated',
            'last_name': 'Person',
            'email': 'updated@example.com',
            'lang_key': 'de',
        }
        response = authenticated_client.post(url, data)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['first_name'] == 'Updated'
        user.refresh_from_db()
        assert user.email == 'updated@example.com'
        assert user.lang_key == 'de'

    def test_update_account_email_taken(self, authenticated_client, user, other_user):
        url = reverse('accounts:account')
        data = {'email': other_user.email}
        response = authenticated_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        user.refresh_from_db()
        assert user.email == 'testuser@example.com'

    def test_change_password(self, authenticated_client, user):
        url = reverse('accounts:change-password')
        response = authenticated_client.post(url, {'new_password': 'Changed-Pass-9'})

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.check_password('Changed-Pass-9')

    def test_change_password_unauthenticated(self, api_client):
        url = reverse('accounts:change-password')
        response = api_client.post(url, {'new_password': 'Changed-Pass-9'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Password Reset Tests
# =============================================================================

@pytest.mark.django_db
class TestPasswordReset:
    """Tests for password reset flow."""

    def test_request_password_reset(self, api_client, user):
        """Request password reset for an activated account."""
        url = reverse('accounts:reset-password-init')
        response = api_client.post(url, {'email': user.email})

        assert response.status_code == status.HTTP_200_OK
        assert 'key' not in response.data
        user.refresh_from_db()
        assert user.reset_key is not None

    def test_request_password_reset_nonexistent_email(self, api_client, user):
        """Unknown email gets the same answer (no error revealed)."""
        url = reverse('accounts:reset-password-init')
        known = api_client.post(url, {'email': user.email})
        unknown = api_client.post(url, {'email': 'nonexistent@example.com'})

        assert unknown.status_code == status.HTTP_200_OK
        assert unknown.data == known.data

    def test_reset_key_is_mailed(self, api_client, user, mailoutbox, django_capture_on_commit_callbacks):
        url = reverse('accounts:reset-password-init')
        with django_capture_on_commit_callbacks(execute=True):
            api_client.post(url, {'email': user.email})

        user.refresh_from_db()
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [user.email]
        assert user.reset_key in mailoutbox[0].body
        assert '/api/account/reset-password/finish/' in mailoutbox[0].body

    def test_no_mail_for_unknown_or_unactivated_email(
        self, api_client, user_unactivated, mailoutbox, django_capture_on_commit_callbacks
    ):
        url = reverse('accounts:reset-password-init')
        with django_capture_on_commit_callbacks(execute=True):
            api_client.post(url, {'email': 'nonexistent@example.com'})
            api_client.post(url, {'email': user_unactivated.email})

        assert mailoutbox == []

    def test_finish_password_reset(self, api_client, user_with_reset_key):
        url = reverse('accounts:reset-password-finish')
        data = {
            'key': 'validResetKey1234567',
            'new_password': 'NewSecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_200_OK
        user_with_reset_key.refresh_from_db()
        assert user_with_reset_key.check_password('NewSecurePass123!')
        assert user_with_reset_key.reset_key is None

    def test_finish_expired_and_unknown_keys_look_alike(self, api_client, user_with_reset_key):
        """Expired and unknown keys give the same response."""
        user_with_reset_key.reset_date = timezone.now() - timedelta(days=2)
        user_with_reset_key.save()

        url = reverse('accounts:reset-password-finish')
        expired = api_client.post(url, {'key': 'validResetKey1234567', 'new_password': 'NewSecurePass123!'})
        unknown = api_client.post(url, {'key': 'unknownKey', 'new_password': 'NewSecurePass123!'})

        assert expired.status_code == status.HTTP_400_BAD_REQUEST
        assert expired.data == unknown.data


# =============================================================================
# User Administration Tests
# =============================================================================

@pytest.mark.django_db
class TestUserAdministration:
    """Tests for /api/users/"""

    def test_list_users(self, admin_client, user, other_user):
        url = reverse('accounts:users')
        response = admin_client.get(url, {'size': 2})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3
        assert response.data['num_pages'] == 2
        assert len(response.data['results']) == 2

    def test_list_users_requires_admin(self, authenticated_client):
        url = reverse('accounts:users')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_users_unauthenticated(self, api_client):
        url = reverse('accounts:users')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_user(self, admin_client):
        url = reverse('accounts:users')
        data = {
            'login': 'created',
            'email': 'created@example.com',
            'authorities': [USER, 'ROLE_UNKNOWN'],
        }
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['activated'] is True
        assert response.data['lang_key'] == 'en'
        assert response.data['authorities'] == [USER]

        account = Account.objects.get(login='created')
        assert account.reset_key is not None

    def test_create_user_with_id(self, admin_client, user):
        url = reverse('accounts:users')
        data = {
            'id': str(user.id),
            'login': 'created',
            'email': 'created@example.com',
        }
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_user_login_taken(self, admin_client, user):
        url = reverse('accounts:users')
        data = {'login': user.login, 'email': 'created@example.com'}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_user(self, admin_client, user):
        url = reverse('accounts:users')
        data = {
            'id': str(user.id),
            'login': user.login,
            'email': user.email,
            'first_name': 'Promoted',
            'activated': True,
            'authorities': [ADMIN, USER],
        }
        response = admin_client.put(url, data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['authorities'] == [ADMIN, USER]
        user.refresh_from_db()
        assert user.first_name == 'Promoted'

    def test_update_user_email_taken(self, admin_client, user, other_user):
        url = reverse('accounts:users')
        data = {
            'id': str(user.id),
            'login': user.login,
            'email': other_user.email,
        }
        response = admin_client.put(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_unknown_user(self, admin_client):
        url = reverse('accounts:users')
        data = {
            'id': 'a3c6e5b2-0c1f-4c5e-9a53-2d1c7f0e9b11',
            'login': 'ghost',
            'email': 'ghost@example.com',
        }
        response = admin_client.put(url, data, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_create_user_mails_reset_key(self, admin_client, mailoutbox, django_capture_on_commit_callbacks):
        """The owner of an admin-created account receives a key to set a password."""
        url = reverse('accounts:users')
        data = {'login': 'invited', 'email': 'invited@example.com'}
        with django_capture_on_commit_callbacks(execute=True):
            response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        account = Account.objects.get(login='invited')
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['invited@example.com']
        assert account.reset_key in mailoutbox[0].body

    def test_create_user_anonymous_login_is_reserved(self, admin_client):
        url = reverse('accounts:users')
        data = {'login': 'ANONYMOUSUSER', 'email': 'anon@example.com'}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Login name already used'
        assert not Account.objects.filter(login=ANONYMOUS_USER).exists()

    def test_rename_to_anonymous_login_is_rejected(self, admin_client, user):
        url = reverse('accounts:users')
        data = {
            'id': str(user.id),
            'login': 'AnonymousUser',
            'email': user.email,
        }
        response = admin_client.put(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Login name already used'
        user.refresh_from_db()
        assert user.login == 'testuser'

    def test_update_user_integrity_error(self, admin_client, user):
        """A constraint violation racing the conflict check is a 400."""
        url = reverse('accounts:users')
        data = {
            'id': str(user.id),
            'login': user.login,
            'email': user.email,
        }
        with patch('apps.accounts.views.update_user', side_effect=IntegrityError):
            response = admin_client.put(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Login name or email already used'

    def test_list_authorities(self, admin_client):
        url = reverse('accounts:authorities')
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == [ADMIN, USER]

    def test_get_user(self, authenticated_client, other_user):
        url = reverse('accounts:user-detail', args=[other_user.login])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == other_user.email

    def test_get_user_not_found(self, authenticated_client):
        url = reverse('accounts:user-detail', args=['nobody'])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_user(self, admin_client, other_user):
        url = reverse('accounts:user-detail', args=[other_user.login])
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Account.objects.filter(login=other_user.login).exists()

    def test_delete_user_requires_admin(self, authenticated_client, other_user):
        url = reverse('accounts:user-detail', args=[other_user.login])
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Account.objects.filter(login=other_user.login).exists()


# =============================================================================
# Account Model Tests
# =============================================================================

@pytest.mark.django_db
class TestAccountModel:
    """Tests for Account model methods."""

    def test_create_user(self, db):
        account = Account.objects.create_user(
            login='Model',
            email='model@example.com',
            password='TestPass123!',
        )

        assert account.login == 'model'
        assert account.check_password('TestPass123!')
        assert account.activated is False
        assert account.is_active is False

    def test_create_superuser(self, db):
        account = Account.objects.create_superuser(
            login='root',
            email='root@example.com',
            password='RootPass123!',
        )

        assert account.activated is True
        assert account.has_authority(ADMIN)

    def test_account_str(self, user):
        assert str(user) == user.login
