"""
Random keys and temporary passwords for the account lifecycle.

Characters come from django.utils.crypto.get_random_string and the
temporary password length from secrets.randbelow. Both draw from the
operating system's cryptographically secure generator.
"""

import secrets
import string

from django.utils.crypto import get_random_string

KEY_LENGTH = 20
KEY_CHARS = string.ascii_letters + string.digits

PASSWORD_MIN_LENGTH = 5
PASSWORD_MAX_LENGTH = 10
PASSWORD_CHARS = string.ascii_letters + string.digits + string.punctuation


def generate_activation_key() -> str:
    """Return a fresh activation key."""
    return get_random_string(KEY_LENGTH, KEY_CHARS)


def generate_reset_key() -> str:
    """Return a fresh password reset key."""
    return get_random_string(KEY_LENGTH, KEY_CHARS)


def generate_password() -> str:
    """
    Return a temporary password for accounts created by an administrator.

    The value is hashed right away and never stored or returned in plain text.
    """
    length = PASSWORD_MIN_LENGTH + secrets.randbelow(PASSWORD_MAX_LENGTH - PASSWORD_MIN_LENGTH + 1)
    return get_random_string(length, PASSWORD_CHARS)
