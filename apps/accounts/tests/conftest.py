import pytest
from datetime import timedelta
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import Account, Authority
from apps.accounts.security import ADMIN, USER


def age_account(account, **delta):
    """Move an account's created_date into the past."""
    created = timezone.now() - timedelta(**delta)
    Account.objects.filter(pk=account.pk).update(created_date=created)
    account.refresh_from_db()
    return account


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def role_user(db):
    return Authority.objects.get(name=USER)


@pytest.fixture
def role_admin(db):
    return Authority.objects.get(name=ADMIN)


@pytest.fixture
def user(db, role_user):
    """Create and return an activated test account."""
    account = Account.objects.create_user(
        login='testuser',
        email='testuser@example.com',
        password='TestPass123!',
        first_name='Test',
        last_name='User',
        lang_key='en',
        activated=True,
    )
    account.authorities.add(role_user)
    return account


@pytest.fixture
def user_unactivated(db, role_user):
    """Create and return an account still waiting for activation."""
    account = Account.objects.create_user(
        login='pending',
        email='pending@example.com',
        password='TestPass123!',
        activated=False,
        activation_key='pendingActivation123',
    )
    account.authorities.add(role_user)
    return account


@pytest.fixture
def admin_user(db, role_admin, role_user):
    """Create and return an account holding ROLE_ADMIN."""
    account = Account.objects.create_user(
        login='admin',
        email='admin@example.com',
        password='AdminPass123!',
        activated=True,
    )
    account.authorities.add(role_admin, role_user)
    return account


@pytest.fixture
def other_user(db, role_user):
    """Create and return another activated account."""
    account = Account.objects.create_user(
        login='otheruser',
        email='otheruser@example.com',
        password='OtherPass123!',
        first_name='Other',
        activated=True,
    )
    account.authorities.add(role_user)
    return account


@pytest.fixture
def user_with_reset_key(user):
    """Give the test account a fresh password reset key."""
    user.reset_key = 'validResetKey1234567'
    user.reset_date = timezone.now()
    user.save()
    return user


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an API client authenticated as the test account."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    """Return an API client authenticated as the admin account."""
    refresh = RefreshToken.for_user(admin_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
