"""Account management service."""

import logging
from typing import Optional

from django.db import transaction

from apps.accounts.models import Account

from .profiles import UserProfile
from .user_queries import resolve_authorities

logger = logging.getLogger(__name__)


@transaction.atomic
def update_current_user(
    *,
    current_login: str,
    first_name: str,
    last_name: str,
    email: str,
    lang_key: str,
    image_url: str
) -> None:
    """
    Update the basic profile of the current principal.

    Does nothing when the principal has no account (e.g. anonymous).
    """
    account = (
        Account.objects
        .select_for_update()
        .find_by_login(current_login)
    )
    if account is None:
        return

    account.first_name = first_name or ''
    account.last_name = last_name or ''
    account.email = Account.objects.normalize_email(email)
    account.lang_key = lang_key or ''
    account.image_url = image_url or ''
    account.save(update_fields=[
        'first_name', 'last_name', 'email', 'lang_key', 'image_url', 'last_modified_date',
    ])

    logger.debug("Changed information for user: %s", account.login)


@transaction.atomic
def update_user(*, profile: UserProfile) -> Optional[UserProfile]:
    """
    Overwrite every editable field of the account with `profile.id`.

    The authority set is replaced by the roles named in the profile that
    exist; unknown names are dropped. Activating an account here clears
    its pending activation key.

    Args:
        profile: Full profile, including the account id

    Returns:
        Updated profile, or None if no account has this id
    """
    if profile.id is None:
        return None

    account = (
        Account.objects
        .select_for_update()
        .find_by_id(profile.id)
    )
    if account is None:
        return None

    account.login = profile.login
    account.first_name = profile.first_name or ''
    account.last_name = profile.last_name or ''
    account.email = Account.objects.normalize_email(profile.email)
    account.image_url = profile.image_url or ''
    account.activated = profile.activated
    account.lang_key = profile.lang_key or ''
    if account.activated:
        account.activation_key = None
    account.save()

    account.authorities.set(resolve_authorities(profile.authorities or ()))

    logger.debug("Changed information for user: %s", account.login)
    return UserProfile.from_account(account)


@transaction.atomic
def delete_user(*, login: str) -> None:
    """Delete the account with `login`; does nothing if there is none."""
    account = (
        Account.objects
        .select_for_update()
        .find_by_login(login)
    )
    if account is None:
        return

    account.delete()
    logger.debug("Deleted user: %s", login)


@transaction.atomic
def change_password(*, current_login: str, new_password: str) -> None:
    """
    Replace the password of the current principal.

    Does nothing when the principal has no account.
    """
    account = (
        Account.objects
        .select_for_update()
        .find_by_login(current_login)
    )
    if account is None:
        return

    account.set_password(new_password)
    account.save(update_fields=['password', 'last_modified_date'])

    logger.debug("Changed password for user: %s", account.login)
