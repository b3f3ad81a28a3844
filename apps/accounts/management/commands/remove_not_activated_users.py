"""
Management command to delete accounts that were never activated.

Runs the same sweep as the nightly Celery task.

Usage:
    python manage.py remove_not_activated_users
    python manage.py remove_not_activated_users --dry-run
"""

from django.core.management.base import BaseCommand

from apps.accounts.services.stale_accounts import stale_account_reaper


class Command(BaseCommand):
    help = 'Delete accounts that were not activated within the retention window'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show which accounts would be deleted without deleting them',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        candidates = stale_account_reaper.find_candidates()
        count = candidates.count()

        if count == 0:
            self.stdout.write(
                self.style.SUCCESS('No not activated accounts to remove.')
            )
            return

        self.stdout.write(f'\nFound {count} not activated account(s):\n')

        for account in candidates:
            self.stdout.write(
                f'  - {account.login} | {account.email} | Created: {account.created_date}'
            )

        if dry_run:
            self.stdout.write(
                self.style.WARNING('\n--dry-run mode: No changes made.')
            )
            return

        result = stale_account_reaper.sweep()

        self.stdout.write(
            self.style.SUCCESS(f'\nRemoved {len(result.deleted)} account(s).')
        )
        if result.failed:
            self.stdout.write(
                self.style.ERROR(f'Failed to remove: {", ".join(result.failed)}')
            )
