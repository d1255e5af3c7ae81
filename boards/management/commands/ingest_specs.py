"""
Management command to ingest manufacturer specs from a JSON file.

Usage:
    python manage.py ingest_specs /path/to/manufacturer_specs.json
"""

import json
import logging

from django.core.management.base import BaseCommand, CommandError

from boards.exceptions import BoardsError
from boards.monitoring import capture_coalesce_error
from boards.services.ingestion import ingest
from boards.types import ManufacturerSpec

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Ingest manufacturer specs into the spec cache and provenance log'

    def add_arguments(self, parser):
        parser.add_argument('json_file', type=str, help='Path to JSON file of manufacturer specs')

    def handle(self, *args, **options):
        path = options['json_file']
        try:
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CommandError(f'Could not load {path}: {e}')

        if isinstance(data, dict):
            data = data.get('specs', [])
        specs = [ManufacturerSpec.from_dict(item) for item in data]

        try:
            stats = ingest(specs)
        except BoardsError as e:
            capture_coalesce_error(e, stage='ingest')
            raise CommandError(str(e))
        except Exception as e:
            capture_coalesce_error(e, stage='ingest')
            raise

        self.stdout.write(
            self.style.SUCCESS(
                f'Ingested {len(specs)} specs: {stats.inserted} inserted, '
                f'{stats.updated} updated, {stats.skipped} skipped'
            )
        )
