"""
Board filters.

Enumerated values nobody recognizes are "no opinion": a board with no
ability data, or a filter value outside the vocabulary, never excludes a
board. Listing filters narrow a board's listings; a board left with no
listings is dropped.

Example:
    >>> matches_ability("beginner", "intermediate", "advanced")
    False
    >>> matches_ability(None, None, "expert")
    True
"""

from dataclasses import replace
from typing import Iterable, List, Optional

from boards.types import BoardRecord
from boards.utils.normalization import ABILITY_LEVELS


def _level_index(level: Optional[str]) -> Optional[int]:
    if not level:
        return None
    level = level.strip().lower()
    if level not in ABILITY_LEVELS:
        return None
    return ABILITY_LEVELS.index(level)


def matches_ability(
    board_min: Optional[str], board_max: Optional[str], wanted: Optional[str]
) -> bool:
    """True when ``wanted`` falls inside the board's [min, max] ability range."""
    wanted_index = _level_index(wanted)
    if wanted_index is None:
        return True

    low = _level_index(board_min)
    high = _level_index(board_max)
    if low is None and high is None:
        return True
    if low is None:
        low = high
    if high is None:
        high = low
    return low <= wanted_index <= high


def matches_choice(value: Optional[str], wanted: Optional[str], choices: Iterable[str]) -> bool:
    """Exact enum match where unknown filter values and missing board values pass."""
    if not wanted or wanted not in set(choices):
        return True
    if value is None:
        return True
    return value == wanted


def filter_boards(
    boards: Iterable[BoardRecord],
    ability: Optional[str] = None,
    gender: Optional[str] = None,
    region: Optional[str] = None,
    max_price: Optional[float] = None,
    min_length: Optional[float] = None,
    max_length: Optional[float] = None,
) -> List[BoardRecord]:
    """
    Filter coalesced boards.

    Args:
        boards: BoardRecords to filter
        ability: Rider level the board must suit
        gender: womens / kids / unisex
        region: Keep only listings from this region
        max_price: Keep only listings at or under this USD price
        min_length: Keep only listings at least this long (unknown lengths pass)
        max_length: Keep only listings at most this long (unknown lengths pass)

    Returns:
        Matching boards, with their listings narrowed by the listing filters
    """
    from boards.models import GenderTarget

    listing_filtered = any(v is not None for v in (region, max_price, min_length, max_length))
    result = []
    for board in boards:
        if not matches_ability(board.ability_level_min, board.ability_level_max, ability):
            continue
        if not matches_choice(board.gender, gender, GenderTarget.values):
            continue

        if not listing_filtered:
            result.append(board)
            continue

        listings = [
            listing
            for listing in board.listings
            if (region is None or listing.region == region)
            and (max_price is None or listing.sale_price_usd <= max_price)
            and (min_length is None or listing.length_cm is None or listing.length_cm >= min_length)
            and (max_length is None or listing.length_cm is None or listing.length_cm <= max_length)
        ]
        if listings:
            result.append(replace(board, listings=listings))
    return result
