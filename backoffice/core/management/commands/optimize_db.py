"""
Prune old activities and expired share links, then refresh database statistics.

Usage:
    python manage.py optimize_db [--days 30]
"""
from django.core.management.base import BaseCommand, CommandError

from backoffice.core.maintenance import run_full_optimization, DEFAULT_ACTIVITY_RETENTION_DAYS


class Command(BaseCommand):
    help = 'Prune old activities and expired shares, then run ANALYZE'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=DEFAULT_ACTIVITY_RETENTION_DAYS,
            help='Keep activities newer than this many days',
        )

    def handle(self, *args, **options):
        if options['days'] < 1:
            raise CommandError('--days must be at least 1')

        self.stdout.write('Starting database optimization...')
        result = run_full_optimization(activity_days=options['days'])
        if not result['success']:
            raise CommandError(f"Optimization failed: {result['message']}")

        deleted = result['deleted']
        self.stdout.write(f"  - Activities removed: {deleted['activities']}")
        self.stdout.write(f"  - Expired shares removed: {deleted['shares']}")
        self.stdout.write(self.style.SUCCESS(result['message']))
