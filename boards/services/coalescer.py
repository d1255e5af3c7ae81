"""
Board Coalescing Engine.

Groups a batch of scraped records (retailers, manufacturers, review sites,
LLM lookups) into canonical boards, merges their listings and resolves spec
conflicts by source trust.

Pipeline:
    1. identify_boards(): every record gets a board key from the Brand
       Canonicalizer + Identity Deriver and joins that key's group. Records
       with no brand or an empty model still group (under "unknown|...").
    2. Per group: listings are flattened into ListingRecords, each with its
       own condition/gender derived from the listing URL and hints.
    3. Per group: each spec field is resolved over the members' normalized
       values by SourceTier; disagreements are flagged, never blocking.
    4. Per group: msrp and manufacturer_url come from manufacturer members,
       description is the first one seen, year is the latest seen.
    5. Optionally (record_provenance=True) every member's normalized fields
       and extras are appended to spec_sources and the spec cache is
       refreshed from manufacturer members.

Apart from step 5 the engine does no I/O: the same input always yields the
same boards and listings.

Example:
    >>> result = coalesce(records, record_provenance=False)
    >>> [b.board_key for b in result.boards]
    ['burton|custom|unisex', 'burton|custom camber|unisex']
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Tuple

from boards.identity.identifier import BoardIdentifier
from boards.identity.keys import identity_key, listing_id, split_key
from boards.monitoring import add_coalesce_breadcrumb
from boards.services.source_tier import is_manufacturer, source_name, source_type
from boards.services.spec_resolution import SPEC_FIELDS, apply_resolution, resolve_entries
from boards.services.spec_tracker import expand_field, get_spec_tracker
from boards.types import (
    TERRAIN_KEYS,
    BoardGroup,
    BoardRecord,
    CoalesceResult,
    ListingRecord,
    ScrapedBoard,
    ScrapedListing,
    SpecSourceEntry,
)
from boards.utils.normalization import (
    convert_to_usd,
    discount_percent,
    extract_combo_contents,
    normalize_ability_level,
    normalize_availability,
    normalize_category,
    normalize_flex,
    normalize_profile,
    normalize_shape,
)
from boards.utils.terrain import category_to_terrain

logger = logging.getLogger(__name__)


def identify(record: ScrapedBoard) -> BoardIdentifier:
    """The Identity Deriver for a whole scraped record."""
    return BoardIdentifier(
        raw_model=record.raw_model_title,
        raw_brand=record.brand,
        url=record.source_url,
        condition_hint=record.condition_hint,
        gender_hint=record.gender_hint,
        year_hint=record.year_hint,
        brand_identifier=record.brand_identifier,
    )


def identify_boards(records: Iterable[ScrapedBoard]) -> "OrderedDict[str, BoardGroup]":
    """
    Group records by board key, preserving first-seen order.

    Returns:
        Ordered dict of board_key -> BoardGroup
    """
    groups: "OrderedDict[str, BoardGroup]" = OrderedDict()
    for record in records:
        ident = identify(record)
        key = identity_key(ident)
        group = groups.get(key)
        if group is None:
            _, _, gender = split_key(key)
            group = BoardGroup(
                board_key=key,
                brand=ident.brand,
                model=ident.model,
                gender=gender,
            )
            groups[key] = group
        group.members.append(record)
        logger.debug(f"{record.source_id}: {record.raw_model_title!r} -> {key}")
    return groups


def member_spec_fields(record: ScrapedBoard) -> List[Tuple[str, str]]:
    """
    The normalized (field, value) observations one record contributes.

    Normalized spec fields come first, then the record's extras verbatim.
    When the record has no terrain_* extras, terrain scores are derived from
    its category.
    """
    fields: List[Tuple[str, Any]] = []
    if record.flex:
        fields.append(("flex", normalize_flex(record.flex)))
    if record.profile:
        fields.append(("profile", normalize_profile(record.profile)))
    if record.shape:
        fields.append(("shape", normalize_shape(record.shape)))
    if record.category:
        fields.append(("category", normalize_category(record.category, record.description)))
    if record.ability_level:
        fields.append(("abilityLevel", normalize_ability_level(record.ability_level)))

    fields.extend(record.extras.items())

    if not any(name.startswith("terrain_") for name in record.extras):
        category = normalize_category(record.category, record.description)
        if category:
            for key, score in category_to_terrain(category).items():
                fields.append((f"terrain_{key}", score))

    observations: List[Tuple[str, str]] = []
    for name, value in fields:
        observations.extend(expand_field(name, value))
    return observations


def build_listing(record: ScrapedBoard, listing: ScrapedListing, key: str) -> ListingRecord:
    """Turn one scraped listing into a ListingRecord for board ``key``."""
    ident = BoardIdentifier(
        raw_model=record.raw_model_title,
        raw_brand=record.brand,
        url=listing.url,
        condition_hint=listing.condition,
        gender_hint=listing.gender or record.gender_hint,
        year_hint=record.year_hint,
        brand_identifier=record.brand_identifier,
    )
    if source_type(record.source_id) == "retailer":
        retailer = source_name(record.source_id)
    else:
        retailer = record.source_id

    sale_usd = convert_to_usd(listing.sale_price, listing.currency)
    original_usd = (
        convert_to_usd(listing.original_price, listing.currency)
        if listing.original_price
        else None
    )

    return ListingRecord(
        id=listing_id(retailer, listing.url, listing.length_cm),
        board_key=key,
        retailer=retailer,
        region=record.region or "US",
        url=listing.url,
        sale_price=listing.sale_price,
        sale_price_usd=sale_usd,
        currency=listing.currency,
        original_price=listing.original_price,
        original_price_usd=original_usd,
        discount_percent=discount_percent(original_usd, sale_usd),
        length_cm=listing.length_cm,
        width_mm=listing.width_mm,
        availability=normalize_availability(listing.availability),
        condition=ident.condition,
        gender=ident.gender,
        scraped_at=listing.scraped_at,
        image_url=listing.image_url,
        stock_count=listing.stock_count,
        combo_contents=listing.combo_contents or extract_combo_contents(record.raw_model_title),
    )


def _spec_entries(group: BoardGroup) -> Dict[str, List[SpecSourceEntry]]:
    entries: Dict[str, List[SpecSourceEntry]] = {name: [] for name in SPEC_FIELDS}
    for record in group.members:
        for name, value in member_spec_fields(record):
            if name in entries:
                entries[name].append(
                    SpecSourceEntry(
                        field_name=name,
                        source=record.source_id,
                        value=value,
                        source_url=record.source_url or None,
                        board_key=group.board_key,
                    )
                )
    return entries


def coalesce_group(group: BoardGroup) -> BoardRecord:
    """Merge one group's members into a canonical BoardRecord."""
    board = BoardRecord(
        board_key=group.board_key,
        brand=group.brand,
        model=group.model,
        gender=group.gender,
        terrain_scores={key: None for key in TERRAIN_KEYS},
    )

    best_year: Optional[int] = None
    for record in group.members:
        if is_manufacturer(record.source_id):
            if record.msrp_usd:
                board.msrp_usd = record.msrp_usd
            board.manufacturer_url = record.source_url or board.manufacturer_url
        if not board.description and record.description:
            board.description = record.description
        year = identify(record).year
        if year and (best_year is None or year > best_year):
            best_year = year
        for listing in record.listings:
            board.listings.append(build_listing(record, listing, group.board_key))
    board.year = best_year

    field_info = resolve_entries(_spec_entries(group))
    apply_resolution(board, field_info)
    board.spec_sources = {
        name: info for name, info in field_info.items() if info.sources
    }
    if board.disagreements:
        logger.debug(f"{board.board_key}: sources disagree on {', '.join(board.disagreements)}")
    return board


def record_group_provenance(group: BoardGroup) -> int:
    """
    Append every member's observations to spec_sources and refresh the
    spec cache from manufacturer members.

    Returns:
        Number of provenance rows written
    """
    tracker = get_spec_tracker()
    written = 0
    for record in group.members:
        written += tracker.record_fields(
            group.board_key,
            record.source_id,
            member_spec_fields(record),
            source_url=record.source_url,
        )
        if is_manufacturer(record.source_id):
            cached = tracker.get_cached_spec(group.board_key)
            if cached is None or not is_manufacturer(cached.source):
                tracker.set_cached_spec(
                    group.board_key,
                    record.source_id,
                    source_url=record.source_url,
                    brand=group.brand,
                    model=group.model,
                    year=record.year_hint,
                    flex=normalize_flex(record.flex),
                    profile=normalize_profile(record.profile),
                    shape=normalize_shape(record.shape),
                    category=normalize_category(record.category, record.description),
                    msrp_usd=record.msrp_usd,
                )
    return written


def coalesce(
    records: Iterable[ScrapedBoard],
    run_id: Optional[str] = None,
    record_provenance: bool = True,
) -> CoalesceResult:
    """
    Coalesce scraped records into canonical boards and listings.

    Args:
        records: ScrapedBoards from any mix of sources
        run_id: Search run the listings belong to (for logging/monitoring)
        record_provenance: Write spec_sources/spec_cache rows

    Returns:
        CoalesceResult with boards in first-seen key order and all listings
    """
    records = list(records)
    groups = identify_boards(records)
    result = CoalesceResult()

    for group in groups.values():
        board = coalesce_group(group)
        result.boards.append(board)
        result.listings.extend(board.listings)
        if record_provenance:
            record_group_provenance(group)

    logger.info(
        f"Coalesced {len(records)} records into {len(result.boards)} boards "
        f"and {len(result.listings)} listings"
    )
    add_coalesce_breadcrumb(
        "Coalesced records",
        run_id=run_id,
        extra_data={
            "records": len(records),
            "boards": len(result.boards),
            "listings": len(result.listings),
        },
    )
    return result
