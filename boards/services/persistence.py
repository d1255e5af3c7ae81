"""
Run persistence.

Writes search runs, boards and listings in referential order:

    search_runs  ->  boards  ->  listings

A listing is a price observation for one run. Writing it before its run row
exists would either fail at commit (FK) or, on backends that defer the
check, silently orphan price history, so save_listings() refuses up front
with ListingOrderError and writes nothing.

Usage:
    from boards.services.persistence import persist_result

    run = persist_result(result, run_id=run_id, retailers_queried=["evo", "rei"])
"""

import logging
from typing import Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from boards.exceptions import ListingOrderError
from boards.types import BoardRecord, CoalesceResult, ListingRecord

logger = logging.getLogger(__name__)


@transaction.atomic
def save_run(
    run_id,
    constraints: Optional[dict] = None,
    board_count: int = 0,
    retailers_queried: Optional[Iterable[str]] = None,
    duration_ms: int = 0,
) -> "SearchRun":
    """Create or update a search run row."""
    from boards.models import SearchRun

    run, created = SearchRun.objects.update_or_create(
        id=run_id,
        defaults={
            "constraints": constraints or {},
            "board_count": board_count,
            "retailers_queried": ",".join(retailers_queried or []),
            "duration_ms": duration_ms,
        },
    )
    logger.debug(f"{'Created' if created else 'Updated'} SearchRun {run.id}")
    return run


@transaction.atomic
def save_boards(boards: Iterable[BoardRecord]) -> int:
    """
    Create or update board rows from BoardRecords.

    Returns:
        Number of boards written
    """
    from boards.models import Board

    count = 0
    for record in boards:
        terrain = record.terrain_scores or {}
        Board.objects.update_or_create(
            board_key=record.board_key,
            defaults={
                "brand": record.brand,
                "model": record.model,
                "year": record.year,
                "flex": record.flex,
                "profile": record.profile,
                "shape": record.shape,
                "category": record.category,
                "terrain_piste": terrain.get("piste"),
                "terrain_powder": terrain.get("powder"),
                "terrain_park": terrain.get("park"),
                "terrain_freeride": terrain.get("freeride"),
                "terrain_freestyle": terrain.get("freestyle"),
                "ability_level_min": record.ability_level_min,
                "ability_level_max": record.ability_level_max,
                "msrp_usd": record.msrp_usd,
                "manufacturer_url": record.manufacturer_url,
                "description": record.description,
            },
        )
        count += 1
    return count


@transaction.atomic
def save_listings(listings: Iterable[ListingRecord], run_id) -> int:
    """
    Create or update listing rows for a run.

    Raises:
        ListingOrderError: the run has not been saved yet. Nothing is written.

    Returns:
        Number of listings written
    """
    from boards.models import Listing, SearchRun

    listings = list(listings)
    if not listings:
        return 0

    if not SearchRun.objects.filter(id=run_id).exists():
        logger.error(f"Refusing {len(listings)} listings: search run {run_id} not saved")
        raise ListingOrderError(listings[0].id, run_id)

    for record in listings:
        Listing.objects.update_or_create(
            id=record.id,
            defaults={
                "board_id": record.board_key,
                "run_id": run_id,
                "retailer": record.retailer,
                "region": record.region,
                "url": record.url,
                "image_url": record.image_url,
                "length_cm": record.length_cm,
                "width_mm": record.width_mm,
                "currency": record.currency,
                "original_price": record.original_price,
                "sale_price": record.sale_price,
                "original_price_usd": record.original_price_usd,
                "sale_price_usd": record.sale_price_usd,
                "discount_percent": record.discount_percent,
                "availability": record.availability,
                "condition": record.condition,
                "gender": record.gender,
                "stock_count": record.stock_count,
                "combo_contents": record.combo_contents,
                "scraped_at": record.scraped_at or timezone.now(),
            },
        )
    return len(listings)


@transaction.atomic
def persist_result(
    result: CoalesceResult,
    run_id,
    constraints: Optional[dict] = None,
    retailers_queried: Optional[List[str]] = None,
    duration_ms: int = 0,
) -> "SearchRun":
    """Persist a coalescing result: run, then boards, then listings."""
    run = save_run(
        run_id,
        constraints=constraints,
        board_count=len(result.boards),
        retailers_queried=retailers_queried,
        duration_ms=duration_ms,
    )
    boards_saved = save_boards(result.boards)
    listings_saved = save_listings(result.listings, run.id)
    logger.info(f"Run {run.id}: saved {boards_saved} boards and {listings_saved} listings")
    return run


def find_orphan_boards():
    """Boards that have no listings."""
    from boards.models import Board

    return Board.objects.filter(listings__isnull=True)


@transaction.atomic
def delete_orphan_boards() -> int:
    """
    Delete boards that have no listings.

    Returns:
        Number of boards deleted
    """
    from boards.models import Board

    keys = list(find_orphan_boards().values_list("board_key", flat=True))
    if not keys:
        return 0
    Board.objects.filter(board_key__in=keys).delete()
    logger.info(f"Deleted {len(keys)} orphan boards")
    return len(keys)
