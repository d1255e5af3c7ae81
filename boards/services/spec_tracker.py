"""
Spec provenance store.

Handles the append-only spec_sources log and the per-board spec cache.

Every value a source reports for a board field becomes one SpecSource row;
rows are never updated or deleted, so several rows per (board, field) are
normal and are exactly what lets spec resolution detect disagreement. The
spec cache keeps one primary spec per board together with the source it came
from.

Usage:
    from boards.services.spec_tracker import get_spec_tracker

    tracker = get_spec_tracker()
    tracker.record_fields(
        "burton|custom|unisex",
        "manufacturer:burton",
        {"flex": "6", "ability level": "intermediate-expert"},
        source_url="https://www.burton.com/custom",
    )
    entries = tracker.get_entries("burton|custom|unisex")
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from django.db import transaction
from django.utils import timezone

from boards.types import SpecSourceEntry

logger = logging.getLogger(__name__)

# Free-text extra keys that also have a canonical camelCase spelling.
FIELD_ALIASES: Dict[str, str] = {
    "ability level": "abilityLevel",
    "ability_level": "abilityLevel",
    "msrp": "msrpUsd",
    "msrp_usd": "msrpUsd",
}

CACHE_FIELDS = ("brand", "model", "year", "flex", "profile", "shape", "category", "msrp_usd")


def _normalize_alias_value(alias: str, text: str) -> Optional[str]:
    if alias == "abilityLevel":
        from boards.utils.normalization import normalize_ability_level

        return normalize_ability_level(text)
    return text


def expand_field(field_name: str, value: Any) -> List[Tuple[str, str]]:
    """
    (name, value) rows a reported field becomes.

    The field itself plus, for a known free-text key, its canonical alias
    (with the value normalized where the alias has a vocabulary). Null and
    empty values produce nothing.

    Example:
        >>> expand_field("ability level", "Beginner to Intermediate")
        [('ability level', 'Beginner to Intermediate'), ('abilityLevel', 'beginner-intermediate')]
    """
    text = _stringify(value)
    if text is None:
        return []
    rows = [(field_name, text)]
    alias = FIELD_ALIASES.get(field_name.strip().lower())
    if alias and alias != field_name:
        aliased = _normalize_alias_value(alias, text)
        if aliased:
            rows.append((alias, aliased))
    return rows


def _stringify(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


class SpecTracker:
    """
    Service for spec provenance and the spec cache.

    Uses singleton pattern for consistent state.
    """

    _instance: Optional["SpecTracker"] = None

    def __new__(cls) -> "SpecTracker":
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the spec tracker."""
        if self._initialized:
            return
        self._initialized = True
        logger.debug("SpecTracker initialized")

    def record(
        self,
        board_key: str,
        field_name: str,
        source: str,
        value: Any,
        source_url: Optional[str] = None,
    ) -> int:
        """
        Append one provenance row (two when the field has an alias).

        Null and empty values produce no rows.

        Returns:
            Number of rows written
        """
        from boards.models import SpecSource

        expanded = expand_field(field_name, value)
        if not expanded:
            return 0

        now = timezone.now()
        rows = [
            SpecSource(
                board_key=board_key,
                field_name=name,
                source=source,
                value=text,
                source_url=source_url or None,
                inserted_at=now,
            )
            for name, text in expanded
        ]
        SpecSource.objects.bulk_create(rows)
        return len(rows)

    @transaction.atomic
    def record_fields(
        self,
        board_key: str,
        source: str,
        fields: Union[Dict[str, Any], Iterable[Tuple[str, Any]]],
        source_url: Optional[str] = None,
    ) -> int:
        """
        Append provenance rows for every non-null field.

        ``fields`` may be a dict or a sequence of (name, value) pairs; pairs
        allow the same field to be reported twice by one source.

        Returns:
            Number of rows written
        """
        written = 0
        items = fields.items() if isinstance(fields, dict) else fields
        for field_name, value in items:
            written += self.record(board_key, field_name, source, value, source_url)
        if written:
            logger.debug(f"Recorded {written} spec sources for {board_key} from {source}")
        return written

    def get_entries(
        self, board_key: str, field_name: Optional[str] = None
    ) -> List[SpecSourceEntry]:
        """
        Provenance rows for a board, oldest first.

        Args:
            board_key: Canonical board key
            field_name: Optional field to restrict to

        Returns:
            List of SpecSourceEntry
        """
        from boards.models import SpecSource

        queryset = SpecSource.objects.filter(board_key=board_key)
        if field_name:
            queryset = queryset.filter(field_name=field_name)
        return [
            SpecSourceEntry(
                field_name=row.field_name,
                source=row.source,
                value=row.value,
                source_url=row.source_url,
                board_key=row.board_key,
                inserted_at=row.inserted_at,
            )
            for row in queryset.order_by("inserted_at", "id")
        ]

    def get_entries_by_field(self, board_key: str) -> Dict[str, List[SpecSourceEntry]]:
        """Provenance rows for a board grouped by field name."""
        grouped: Dict[str, List[SpecSourceEntry]] = defaultdict(list)
        for entry in self.get_entries(board_key):
            grouped[entry.field_name].append(entry)
        return dict(grouped)

    def get_cached_spec(self, board_key: str) -> Optional["SpecCache"]:
        from boards.models import SpecCache

        return SpecCache.objects.filter(board_key=board_key).first()

    @transaction.atomic
    def set_cached_spec(
        self,
        board_key: str,
        source: str,
        source_url: Optional[str] = None,
        **fields,
    ) -> bool:
        """
        Insert or overwrite the cached spec for a board.

        Unknown keyword fields are ignored.

        Returns:
            True if a new row was created, False if an existing one was updated
        """
        from boards.models import SpecCache

        defaults = {name: fields.get(name) for name in CACHE_FIELDS if name in fields}
        for name in ("brand", "model"):
            if name in defaults and defaults[name] is None:
                defaults[name] = ""
        defaults.update(
            {
                "source": source,
                "source_url": source_url or None,
                "updated_at": timezone.now(),
            }
        )
        _, created = SpecCache.objects.update_or_create(board_key=board_key, defaults=defaults)
        logger.debug(f"{'Created' if created else 'Updated'} SpecCache: {board_key} ({source})")
        return created


def get_spec_tracker() -> SpecTracker:
    """Get the singleton SpecTracker instance."""
    return SpecTracker()
