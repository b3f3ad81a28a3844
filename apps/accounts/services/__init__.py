"""Services for the account lifecycle."""

from .profiles import UserProfile
from .activation import activate_registration
from .password_reset import request_password_reset, complete_password_reset
from .user_registration import register_user, create_user
from .account_management import (
    update_current_user,
    update_user,
    delete_user,
    change_password,
)
from .user_queries import (
    get_all_managed_users,
    get_user_by_login,
    get_user_by_id,
    get_current_user,
    get_authorities,
)
from .stale_accounts import (
    StaleAccountReaper,
    SweepResult,
    remove_not_activated_users,
)

__all__ = [
    # Types
    'UserProfile',
    'StaleAccountReaper',
    'SweepResult',
    # Activation & password reset
    'activate_registration',
    'request_password_reset',
    'complete_password_reset',
    # Registration
    'register_user',
    'create_user',
    # Management
    'update_current_user',
    'update_user',
    'delete_user',
    'change_password',
    # Queries
    'get_all_managed_users',
    'get_user_by_login',
    'get_user_by_id',
    'get_current_user',
    'get_authorities',
    # Cleanup
    'remove_not_activated_users',
]
