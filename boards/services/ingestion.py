"""
Spec Consolidation / Ingestion Service.

Delivers manufacturer catalog specs into the long-lived spec cache one batch
at a time, outside a full coalescing run.

Cache Rules:
    - No cached spec for the board key          -> insert
    - Cached spec from a lower-trust source     -> overwrite (update)
    - Cached spec already from a manufacturer   -> skip (idempotent)

Provenance Rules:
    Whatever happens to the cached spec, every non-null field and extra of
    the incoming spec is appended to spec_sources, so disagreement between
    sources stays detectable even when the cache write is skipped. Known
    free-text keys are recorded under their canonical alias as well
    ("ability level" -> "abilityLevel").

Usage:
    from boards.services.ingestion import ingest

    stats = ingest([ManufacturerSpec(brand="Burton", model="Custom", flex="6")])
    print(stats.inserted, stats.updated, stats.skipped)
"""

import logging
from typing import Any, Iterable, List, Tuple, Union

from django.db import transaction

from boards.identity.brands import canonicalize
from boards.identity.identifier import BoardIdentifier
from boards.identity.keys import identity_key, split_key
from boards.monitoring import add_coalesce_breadcrumb
from boards.services.source_tier import is_manufacturer
from boards.services.spec_tracker import get_spec_tracker
from boards.types import IngestStats, ManufacturerSpec
from boards.utils.normalization import (
    normalize_category,
    normalize_flex,
    normalize_profile,
    normalize_shape,
)

logger = logging.getLogger(__name__)


def manufacturer_source_id(brand: str) -> str:
    """Namespaced source id for a brand's own catalog ("manufacturer:lib tech")."""
    return f"manufacturer:{canonicalize(brand).canonical_name.lower()}"


def spec_fields(spec: ManufacturerSpec) -> List[Tuple[str, Any]]:
    """Normalized spec fields followed by the raw extras."""
    fields: List[Tuple[str, Any]] = [
        ("flex", normalize_flex(spec.flex)),
        ("profile", normalize_profile(spec.profile)),
        ("shape", normalize_shape(spec.shape)),
        ("category", normalize_category(spec.category, spec.description)),
        ("msrpUsd", spec.msrp_usd),
    ]
    fields.extend(spec.extras.items())
    return fields


def ingest_one(spec: ManufacturerSpec, stats: IngestStats) -> str:
    """
    Ingest one spec, updating stats in place.

    Returns:
        "inserted", "updated" or "skipped"
    """
    tracker = get_spec_tracker()
    ident = BoardIdentifier(
        raw_model=spec.model,
        raw_brand=spec.brand,
        url=spec.source_url or None,
        gender_hint=spec.gender,
    )
    key = identity_key(ident)
    source = manufacturer_source_id(spec.brand)

    tracker.record_fields(key, source, spec_fields(spec), source_url=spec.source_url)

    existing = tracker.get_cached_spec(key)
    if existing is not None and is_manufacturer(existing.source):
        stats.skipped += 1
        logger.debug(f"Skipped {key}: cached spec already from {existing.source}")
        return "skipped"

    tracker.set_cached_spec(
        key,
        source,
        source_url=spec.source_url,
        brand=ident.brand,
        model=split_key(key)[1],
        year=spec.year,
        flex=normalize_flex(spec.flex),
        profile=normalize_profile(spec.profile),
        shape=normalize_shape(spec.shape),
        category=normalize_category(spec.category, spec.description),
        msrp_usd=spec.msrp_usd,
    )
    if existing is None:
        stats.inserted += 1
        return "inserted"

    stats.updated += 1
    logger.debug(f"Updated {key}: replaced spec from {existing.source}")
    return "updated"


@transaction.atomic
def ingest(specs: Iterable[Union[ManufacturerSpec, dict]]) -> IngestStats:
    """
    Ingest a batch of manufacturer specs in one transaction.

    Args:
        specs: ManufacturerSpec objects or their dict form

    Returns:
        IngestStats with inserted/updated/skipped counts
    """
    stats = IngestStats()
    for spec in specs:
        if isinstance(spec, dict):
            spec = ManufacturerSpec.from_dict(spec)
        ingest_one(spec, stats)

    total = stats.inserted + stats.updated + stats.skipped
    if total:
        logger.info(
            f"Ingested {total} specs: {stats.inserted} inserted, "
            f"{stats.updated} updated, {stats.skipped} skipped"
        )
        add_coalesce_breadcrumb(
            "Ingested manufacturer specs",
            stage="ingest",
            extra_data={
                "inserted": stats.inserted,
                "updated": stats.updated,
                "skipped": stats.skipped,
            },
        )
    return stats
