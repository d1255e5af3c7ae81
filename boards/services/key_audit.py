"""
Board key audit.

Lists pairs of board keys whose model segments are suspiciously similar
within the same brand and gender ("burton|custom flying v|unisex" vs
"burton|custom flyingv|unisex"). It never merges anything: documented
variants like "money" and "c money" are legitimately close, so the report
is for a human deciding whether a normalization rule is missing.

Example:
    >>> find_near_duplicate_keys(["gnu|money|unisex", "gnu|money|womens"])
    []
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from rapidfuzz import fuzz

from boards.identity.keys import split_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NearDuplicate:
    """Two keys whose models score at or above the audit threshold."""

    key_a: str
    key_b: str
    score: float


def find_near_duplicate_keys(
    keys: Iterable[str], threshold: Optional[float] = None
) -> List[NearDuplicate]:
    """
    Find key pairs with highly similar model strings.

    Args:
        keys: Board keys to audit
        threshold: Minimum token_sort_ratio (0-100); defaults to
            BOARDS_KEY_AUDIT_THRESHOLD

    Returns:
        NearDuplicate pairs, most similar first
    """
    if threshold is None:
        threshold = getattr(settings, "BOARDS_KEY_AUDIT_THRESHOLD", 90)

    buckets: Dict[Tuple[str, str], List[Tuple[str, str]]] = defaultdict(list)
    for key in sorted(set(keys)):
        try:
            brand, model, gender = split_key(key)
        except ValueError:
            logger.warning(f"Skipping malformed board key: {key!r}")
            continue
        buckets[(brand, gender)].append((key, model))

    pairs: List[NearDuplicate] = []
    for members in buckets.values():
        for (key_a, model_a), (key_b, model_b) in combinations(members, 2):
            score = fuzz.token_sort_ratio(model_a, model_b)
            if score >= threshold:
                pairs.append(NearDuplicate(key_a=key_a, key_b=key_b, score=round(score, 1)))

    pairs.sort(key=lambda pair: (-pair.score, pair.key_a, pair.key_b))
    logger.info(f"Key audit: {len(pairs)} near-duplicate pairs at threshold {threshold}")
    return pairs
