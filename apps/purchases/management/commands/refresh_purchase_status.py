"""
Re-derive purchase statuses.

Status depends on today's date, so purchases turn Overdue without any
write to them. Run daily (e.g. from cron).

Usage:
    python manage.py refresh_purchase_status
    python manage.py refresh_purchase_status --date 2025-06-30 --dry-run
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.purchases.services import refresh_statuses


class Command(BaseCommand):
    help = 'Re-derive Pending/Partial/Overdue status for every unpaid purchase'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Reference date (YYYY-MM-DD) instead of today',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many purchases would change without saving',
        )

    def handle(self, *args, **options):
        today = None
        if options['date']:
            try:
                today = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date: {options['date']}")

        dry_run = options['dry_run']
        changed = refresh_statuses(today=today, dry_run=dry_run)

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f'--dry-run mode: {changed} purchase(s) would change.')
            )
            return

        self.stdout.write(
            self.style.SUCCESS(f'Updated status of {changed} purchase(s).')
        )
