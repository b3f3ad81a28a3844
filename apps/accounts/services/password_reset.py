"""Password reset service."""

import logging
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Account
from apps.accounts.tokens import generate_reset_key

logger = logging.getLogger(__name__)


def reset_key_validity() -> timedelta:
    return timedelta(hours=settings.ACCOUNT_RESET_KEY_VALIDITY_HOURS)


@transaction.atomic
def request_password_reset(*, email: str) -> Optional[Account]:
    """
    Issue a password reset key for an activated account.

    Delivering the key to its owner is up to the caller.

    Args:
        email: Account's email address

    Returns:
        Account carrying the new reset key, or None if there is no
        activated account with this email
    """
    account = (
        Account.objects
        .select_for_update()
        .find_by_email(email)
    )
    if account is None or not account.activated:
        return None

    account.reset_key = generate_reset_key()
    account.reset_date = timezone.now()
    account.save(update_fields=['reset_key', 'reset_date', 'last_modified_date'])

    logger.debug("Issued reset key for user: %s", account.login)
    return account


@transaction.atomic
def complete_password_reset(*, new_password: str, key: str) -> Optional[Account]:
    """
    Set a new password using a reset key.

    Unknown, already used and expired keys all give the same result, so
    callers cannot tell them apart.

    Args:
        new_password: New password (will be hashed)
        key: Reset key

    Returns:
        Updated Account, or None if the key is not honoured
    """
    account = (
        Account.objects
        .select_for_update()
        .find_by_reset_key(key)
    )
    if account is None or account.reset_date is None:
        return None

    if account.reset_date <= timezone.now() - reset_key_validity():
        return None

    # Set new password and consume the key
    account.set_password(new_password)
    account.reset_key = None
    account.reset_date = None
    account.save(update_fields=['password', 'reset_key', 'reset_date', 'last_modified_date'])

    logger.debug("Reset password for user: %s", account.login)
    return account
