"""
Category <-> terrain score mapping.

Terrain scores rate a board 1-3 on each of piste, powder, park, freeride and
freestyle. When a source only gives a category, scores are derived from it;
when only scores are known, the category is the strongest dimension.
"""

from typing import Dict, Optional

from boards.models import BoardCategory
from boards.types import TERRAIN_KEYS

CATEGORY_TERRAIN: Dict[str, Dict[str, int]] = {
    BoardCategory.ALL_MOUNTAIN: {"piste": 3, "powder": 2, "park": 2, "freeride": 2, "freestyle": 2},
    BoardCategory.FREESTYLE: {"piste": 2, "powder": 1, "park": 2, "freeride": 1, "freestyle": 3},
    BoardCategory.PARK: {"piste": 1, "powder": 1, "park": 3, "freeride": 1, "freestyle": 2},
    BoardCategory.FREERIDE: {"piste": 2, "powder": 3, "park": 1, "freeride": 3, "freestyle": 1},
    BoardCategory.POWDER: {"piste": 1, "powder": 3, "park": 1, "freeride": 2, "freestyle": 1},
}

TERRAIN_CATEGORY = {
    "piste": BoardCategory.ALL_MOUNTAIN,
    "powder": BoardCategory.POWDER,
    "park": BoardCategory.PARK,
    "freeride": BoardCategory.FREERIDE,
    "freestyle": BoardCategory.FREESTYLE,
}


def empty_terrain() -> Dict[str, Optional[int]]:
    return {key: None for key in TERRAIN_KEYS}


def category_to_terrain(category: Optional[str]) -> Dict[str, Optional[int]]:
    """Terrain scores implied by a category; all None for an unknown category."""
    scores = CATEGORY_TERRAIN.get(category or "")
    if scores is None:
        return empty_terrain()
    return dict(scores)


def terrain_to_category(scores: Optional[Dict[str, Optional[int]]]) -> Optional[str]:
    """
    Category of the highest-scoring terrain dimension.

    Ties go to the first dimension in piste, powder, park, freeride,
    freestyle order.
    """
    if not scores:
        return None
    best_key = None
    best_score = 0
    for key in TERRAIN_KEYS:
        score = scores.get(key)
        if score is not None and score > best_score:
            best_key = key
            best_score = score
    if best_key is None:
        return None
    return str(TERRAIN_CATEGORY[best_key])


def parse_terrain_score(value) -> Optional[int]:
    """Parse a 1-3 terrain score from an extra field value."""
    if value is None:
        return None
    try:
        score = round(float(str(value).strip()))
    except ValueError:
        return None
    return score if 1 <= score <= 3 else None
