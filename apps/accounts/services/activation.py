"""Registration activation service."""

import logging
from typing import Optional

from django.db import transaction

from apps.accounts.models import Account

logger = logging.getLogger(__name__)


@transaction.atomic
def activate_registration(*, key: str) -> Optional[Account]:
    """
    Activate the account that was issued `key` at registration.

    Activation keys do not expire; unconfirmed accounts are removed by the
    nightly cleanup instead.

    Args:
        key: Activation key

    Returns:
        Activated Account, or None if no account holds this key
    """
    account = (
        Account.objects
        .select_for_update()
        .find_by_activation_key(key)
    )
    if account is None:
        return None

    # Activation consumes the key
    account.activated = True
    account.activation_key = None
    account.save(update_fields=['activated', 'activation_key', 'last_modified_date'])

    logger.debug("Activated user: %s", account.login)
    return account
