"""
Management command to delete boards that have no listings.

Usage:
    python manage.py cleanup_orphan_boards
    python manage.py cleanup_orphan_boards --dry-run
"""

from django.core.management.base import BaseCommand

from boards.services.persistence import delete_orphan_boards, find_orphan_boards


class Command(BaseCommand):
    """Delete boards that have no listings."""

    help = 'Delete boards that have no listings'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List orphan boards without deleting them',
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            self.stdout.write(self.style.WARNING('Running in dry-run mode - nothing will be deleted'))
            orphans = list(find_orphan_boards().values_list('board_key', flat=True))
            for key in orphans:
                self.stdout.write(f'  {key}')
            self.stdout.write(self.style.WARNING(f'Dry run: would have deleted {len(orphans)} boards'))
            return

        deleted = delete_orphan_boards()
        if deleted == 0:
            self.stdout.write(self.style.SUCCESS('No orphan boards found'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} orphan boards'))
