"""
Management command to coalesce scraped board records from a JSON file.

The file holds a list of ScrapedBoard objects (snake_case or camelCase keys),
or an object with a "boards" list, as produced by the per-site extractors.

Usage:
    python manage.py coalesce_boards /path/to/scraped.json
    python manage.py coalesce_boards /path/to/scraped.json --dry-run
    python manage.py coalesce_boards /path/to/scraped.json --run-id=<uuid>
"""

import json
import logging
import time
import uuid

from django.core.management.base import BaseCommand, CommandError

from boards.exceptions import BoardsError
from boards.monitoring import capture_coalesce_error
from boards.services.coalescer import coalesce
from boards.services.persistence import persist_result
from boards.services.source_tier import source_name, source_type
from boards.types import ScrapedBoard

logger = logging.getLogger(__name__)


def load_records(path):
    """Read ScrapedBoards from a JSON file."""
    with open(path, encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get('boards', [])
    if not isinstance(data, list):
        raise CommandError(f'{path}: expected a list of scraped boards')
    return [ScrapedBoard.from_dict(item) for item in data]


class Command(BaseCommand):
    help = 'Coalesce scraped board records into canonical boards and listings'

    def add_arguments(self, parser):
        parser.add_argument('json_file', type=str, help='Path to JSON file of scraped boards')
        parser.add_argument(
            '--run-id',
            type=str,
            default=None,
            help='Search run id to save listings under (default: new uuid)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show the coalesced boards without writing anything',
        )
        parser.add_argument(
            '--show-disagreements',
            action='store_true',
            help='List boards whose sources disagree on a spec field',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        run_id = options['run_id'] or str(uuid.uuid4())

        try:
            records = load_records(options['json_file'])
        except (OSError, ValueError, KeyError) as e:
            raise CommandError(f'Could not load {options["json_file"]}: {e}')

        self.stdout.write(f'Loaded {len(records)} scraped records')
        if dry_run:
            self.stdout.write(self.style.WARNING('Running in dry-run mode - nothing will be saved'))

        started = time.monotonic()
        try:
            result = coalesce(records, run_id=run_id, record_provenance=not dry_run)
            if not dry_run:
                retailers = sorted(
                    {source_name(r.source_id) for r in records if source_type(r.source_id) == 'retailer'}
                )
                persist_result(
                    result,
                    run_id,
                    retailers_queried=retailers,
                    duration_ms=int((time.monotonic() - started) * 1000),
                )
        except BoardsError as e:
            capture_coalesce_error(e, run_id=run_id, stage='coalesce')
            raise CommandError(str(e))
        except Exception as e:
            capture_coalesce_error(e, run_id=run_id, stage='coalesce')
            raise

        for board in result.boards:
            self.stdout.write(f'  {board.board_key}: {len(board.listings)} listings')
            if options['show_disagreements'] and board.disagreements:
                self.stdout.write(
                    self.style.WARNING(f'    disagreements: {", ".join(board.disagreements)}')
                )

        summary = f'{len(result.boards)} boards, {len(result.listings)} listings'
        if dry_run:
            self.stdout.write(self.style.WARNING(f'Dry run: would have saved {summary}'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Saved run {run_id}: {summary}'))
