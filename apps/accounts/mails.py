"""
Outgoing account mails.

Each function sends one plain-text message to the account's email. Views
schedule them with transaction.on_commit so nothing goes out for a key
that was rolled back.
"""

import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def _send(account, subject, body):
    send_mail(
        subject=subject,
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[account.email],
    )
    logger.debug("Sent '%s' mail to user: %s", subject, account.login)


def send_activation_email(account, activation_url):
    """Send the activation link of a newly registered account."""
    body = (
        f"Dear {account.first_name or account.login},\n\n"
        "Your account has been created. Open the link below to activate it:\n\n"
        f"{activation_url}?key={account.activation_key}\n\n"
        f"Accounts that are not activated within "
        f"{settings.ACCOUNT_ACTIVATION_RETENTION_DAYS} days are removed.\n"
    )
    _send(account, 'Account activation', body)


def send_creation_email(account, reset_finish_url):
    """Send the reset key an administrator-created account uses to choose a password."""
    body = (
        f"Dear {account.first_name or account.login},\n\n"
        f"An account with the login '{account.login}' has been created for you.\n"
        "Choose your password by posting this key and a new password to\n"
        f"{reset_finish_url}:\n\n"
        f"{account.reset_key}\n\n"
        f"The key is valid for {settings.ACCOUNT_RESET_KEY_VALIDITY_HOURS} hours.\n"
    )
    _send(account, 'Account created', body)


def send_password_reset_email(account, reset_finish_url):
    body = (
        f"Dear {account.first_name or account.login},\n\n"
        "A password reset was requested for your account. Post this key and\n"
        f"a new password to {reset_finish_url}:\n\n"
        f"{account.reset_key}\n\n"
        f"The key is valid for {settings.ACCOUNT_RESET_KEY_VALIDITY_HOURS} hours.\n"
        "If you did not ask for a reset, ignore this mail.\n"
    )
    _send(account, 'Password reset', body)
