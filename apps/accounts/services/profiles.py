"""Projected view of an account, shared by the services and the API."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Set
from uuid import UUID


@dataclass
class UserProfile:
    """
    Account fields that may be shown to or edited by an administrator.

    Carries no credential material. `authorities` holds role names; the
    services resolve them against the Authority table and drop unknown ones.
    """

    login: str
    email: str
    id: Optional[UUID] = None
    first_name: str = ''
    last_name: str = ''
    image_url: str = ''
    lang_key: Optional[str] = None
    activated: bool = False
    authorities: Set[str] = field(default_factory=set)
    created_date: Optional[datetime] = None
    last_modified_date: Optional[datetime] = None

    @classmethod
    def from_account(cls, account) -> 'UserProfile':
        return cls(
            id=account.id,
            login=account.login,
            email=account.email,
            first_name=account.first_name,
            last_name=account.last_name,
            image_url=account.image_url,
            lang_key=account.lang_key,
            activated=account.activated,
            authorities=account.get_authority_names(),
            created_date=account.created_date,
            last_modified_date=account.last_modified_date,
        )
