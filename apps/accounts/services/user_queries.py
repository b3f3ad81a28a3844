"""Read-only account and authority lookups."""

from typing import Iterable, List, Optional
from uuid import UUID

from django.core.paginator import Page, Paginator

from apps.accounts.models import Account, Authority
from apps.accounts.security import ANONYMOUS_USER

from .profiles import UserProfile


def get_all_managed_users(*, page: int = 1, page_size: int = 20) -> Page:
    """
    Get one page of accounts for administration.

    The reserved anonymous account is excluded. Accounts come in the
    store's natural order; out-of-range page numbers return the last page.

    Args:
        page: 1-based page number
        page_size: Accounts per page

    Returns:
        Page whose object_list holds UserProfile views
    """
    accounts = (
        Account.objects
        .find_all_by_login_not(ANONYMOUS_USER)
        .prefetch_related('authorities')
    )
    result = Paginator(accounts, page_size).get_page(page)
    result.object_list = [UserProfile.from_account(account) for account in result.object_list]
    return result


def get_user_by_login(*, login: str) -> Optional[Account]:
    return Account.objects.find_by_login(login)


def get_user_by_id(*, user_id: UUID) -> Optional[Account]:
    return Account.objects.find_by_id(user_id)


def get_current_user(*, current_login: str) -> Optional[Account]:
    """Get the account of the current principal, if it has one."""
    return Account.objects.find_by_login(current_login)


def get_authorities() -> List[str]:
    """Get the names of all known authorities."""
    return [authority.name for authority in Authority.objects.all()]


def resolve_authorities(names: Iterable[str]) -> List[Authority]:
    """Look up each role name, skipping the ones that do not exist."""
    authorities = []
    for name in names:
        authority = Authority.objects.find_by_name(name)
        if authority is not None:
            authorities.append(authority)
    return authorities
