"""User registration service."""

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Account, Authority
from apps.accounts.security import USER
from apps.accounts.tokens import (
    generate_activation_key,
    generate_password,
    generate_reset_key,
)

from .profiles import UserProfile
from .user_queries import resolve_authorities

logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    login: str,
    password: str,
    email: str,
    first_name: str = '',
    last_name: str = '',
    image_url: str = '',
    lang_key: str = ''
) -> Account:
    """
    Register a new, not yet activated account.

    The account gets an activation key and the default user role.
    Login and email uniqueness is left to the database.

    Args:
        login: Account login
        password: Account password (will be hashed)
        email: Account email address
        first_name: Optional first name
        last_name: Optional last name
        image_url: Optional avatar URL
        lang_key: Optional language key

    Returns:
        Created Account instance

    Raises:
        IntegrityError: If the login or email is already taken
    """
    account = Account(
        login=login,
        email=Account.objects.normalize_email(email),
        first_name=first_name or '',
        last_name=last_name or '',
        image_url=image_url or '',
        lang_key=lang_key or '',
        activated=False,
        activation_key=generate_activation_key(),
    )
    account.set_password(password)
    account.save()

    authority = Authority.objects.find_by_name(USER)
    if authority is not None:
        account.authorities.add(authority)

    logger.debug("Created information for user: %s", account.login)
    return account


@transaction.atomic
def create_user(*, profile: UserProfile) -> Account:
    """
    Create an account on behalf of an administrator.

    The account is active right away, protected by a random password
    nobody knows, and carries a fresh reset key so its owner can choose
    a password through the reset flow.

    Args:
        profile: Profile fields and requested role names; unknown roles
            are skipped

    Returns:
        Created Account instance

    Raises:
        IntegrityError: If the login or email is already taken
    """
    account = Account(
        login=profile.login,
        email=Account.objects.normalize_email(profile.email),
        first_name=profile.first_name or '',
        last_name=profile.last_name or '',
        image_url=profile.image_url or '',
        lang_key=profile.lang_key or settings.ACCOUNT_DEFAULT_LANG_KEY,
        activated=True,
        reset_key=generate_reset_key(),
        reset_date=timezone.now(),
    )
    account.set_password(generate_password())
    account.save()

    if profile.authorities:
        account.authorities.set(resolve_authorities(profile.authorities))

    logger.debug("Created information for user: %s", account.login)
    return account
