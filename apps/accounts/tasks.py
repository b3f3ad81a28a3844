"""Scheduled account tasks."""

from typing import Any, Dict

from celery import shared_task

from apps.accounts.services import stale_accounts


@shared_task
def remove_not_activated_users() -> Dict[str, Any]:
    """
    Delete accounts that were never activated within the retention window.

    Scheduled by CELERY_BEAT_SCHEDULE, daily at ACCOUNT_CLEANUP_HOUR.

    Returns
    -------
    dict
        Logins that were deleted and logins whose deletion failed.
    """
    result = stale_accounts.remove_not_activated_users()
    return {'deleted': result.deleted, 'failed': result.failed}
