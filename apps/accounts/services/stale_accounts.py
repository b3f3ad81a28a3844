"""
Removal of accounts that were never activated.

Self-registered accounts that stay unactivated past the retention window
(ACCOUNT_ACTIVATION_RETENTION_DAYS) are deleted by a nightly sweep. Each
deletion runs in its own transaction: a failure is logged and recorded
in the result, and the sweep moves on to the next account. Interrupting
a sweep keeps whatever it already deleted.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import Account

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Logins handled by one sweep."""

    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class StaleAccountReaper:
    """
    Deletes unactivated accounts older than the retention window.

    Moves from IDLE to SWEEPING for the duration of sweep(). A sweep
    requested while another one is running in the same process is
    skipped and returns an empty result.
    """

    IDLE = 'idle'
    SWEEPING = 'sweeping'

    def __init__(self, *, retention: Optional[timedelta] = None) -> None:
        self._retention = retention
        self._lock = threading.Lock()
        self.state = self.IDLE

    @property
    def retention(self) -> timedelta:
        if self._retention is not None:
            return self._retention
        return timedelta(days=settings.ACCOUNT_ACTIVATION_RETENTION_DAYS)

    def find_candidates(self, *, now: Optional[datetime] = None) -> QuerySet:
        """Unactivated accounts created before the retention cut-off."""
        cutoff = (now or timezone.now()) - self.retention
        return Account.objects.find_all_unactivated_created_before(cutoff)

    def sweep(self, *, now: Optional[datetime] = None) -> SweepResult:
        if not self._lock.acquire(blocking=False):
            logger.info("Not activated user cleanup already running, skipping")
            return SweepResult()

        self.state = self.SWEEPING
        try:
            return self._sweep(now or timezone.now())
        finally:
            self.state = self.IDLE
            self._lock.release()

    def _sweep(self, now: datetime) -> SweepResult:
        result = SweepResult()

        for account in list(self.find_candidates(now=now)):
            login = account.login
            try:
                with transaction.atomic():
                    account.delete()
            except Exception:
                logger.exception("Failed to delete not activated user %s", login)
                result.failed.append(login)
                continue

            logger.debug("Deleted not activated user %s", login)
            result.deleted.append(login)

        logger.info(
            "Removed %d not activated user(s), %d failure(s)",
            len(result.deleted),
            len(result.failed),
        )
        return result


stale_account_reaper = StaleAccountReaper()


def remove_not_activated_users(*, now: Optional[datetime] = None) -> SweepResult:
    """Run one sweep with the process-wide reaper."""
    return stale_account_reaper.sweep(now=now)
