"""
Management command to report near-duplicate board keys.

Reads keys from the boards table, or from a file with one key per line.

Usage:
    python manage.py audit_board_keys
    python manage.py audit_board_keys --threshold=85
    python manage.py audit_board_keys --keys-file=/path/to/keys.txt
"""

from django.core.management.base import BaseCommand, CommandError

from boards.models import Board
from boards.services.key_audit import find_near_duplicate_keys


class Command(BaseCommand):
    help = 'Report board keys whose model names are suspiciously similar'

    def add_arguments(self, parser):
        parser.add_argument(
            '--threshold',
            type=float,
            default=None,
            help='Minimum similarity (0-100, default: BOARDS_KEY_AUDIT_THRESHOLD)',
        )
        parser.add_argument(
            '--keys-file',
            type=str,
            default=None,
            help='Audit keys from this file instead of the database',
        )

    def handle(self, *args, **options):
        if options['keys_file']:
            try:
                with open(options['keys_file'], encoding='utf-8') as f:
                    keys = [line.strip() for line in f if line.strip()]
            except OSError as e:
                raise CommandError(f'Could not read {options["keys_file"]}: {e}')
        else:
            keys = list(Board.objects.values_list('board_key', flat=True))

        pairs = find_near_duplicate_keys(keys, threshold=options['threshold'])
        self.stdout.write(f'Audited {len(keys)} keys')

        if not pairs:
            self.stdout.write(self.style.SUCCESS('No near-duplicate keys found'))
            return

        for pair in pairs:
            self.stdout.write(f'  {pair.score:5.1f}  {pair.key_a}  <->  {pair.key_b}')
        self.stdout.write(self.style.WARNING(f'{len(pairs)} near-duplicate pairs to review'))
