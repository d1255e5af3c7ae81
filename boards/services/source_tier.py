"""
Source trust ranking.

Every spec value carries the namespaced id of the source that produced it
("manufacturer:burton", "retailer:evo", "review-site:the-good-ride", "llm",
"judgment"). When sources disagree the higher tier wins, so tiers are
compared by ordinal and never as strings.

Example:
    >>> SourceTier.of("manufacturer:gnu") > SourceTier.of("review-site:tgr")
    True
    >>> SourceTier.of("retailer:evo").name
    'RETAILER'
"""

from enum import IntEnum
from typing import Optional

SOURCE_SEPARATOR = ":"


class SourceTier(IntEnum):
    """Trust ordering of source types, lowest first."""

    UNKNOWN = 0
    RETAILER = 1
    JUDGMENT = 2
    LLM = 3
    REVIEW_SITE = 4
    MANUFACTURER = 5

    @classmethod
    def of(cls, source_id: Optional[str]) -> "SourceTier":
        """Tier of a namespaced source id; unrecognized ids rank UNKNOWN."""
        return _PREFIXES.get(source_type(source_id), cls.UNKNOWN)


_PREFIXES = {
    "manufacturer": SourceTier.MANUFACTURER,
    "review-site": SourceTier.REVIEW_SITE,
    "review_site": SourceTier.REVIEW_SITE,
    "llm": SourceTier.LLM,
    "judgment": SourceTier.JUDGMENT,
    "retailer": SourceTier.RETAILER,
}


def source_type(source_id: Optional[str]) -> str:
    """The namespace part of a source id ("retailer:evo" -> "retailer")."""
    if not source_id:
        return ""
    return source_id.split(SOURCE_SEPARATOR, 1)[0].strip().lower()


def source_name(source_id: Optional[str]) -> str:
    """The name part of a source id ("retailer:evo" -> "evo")."""
    if not source_id:
        return ""
    if SOURCE_SEPARATOR not in source_id:
        return source_id
    return source_id.split(SOURCE_SEPARATOR, 1)[1]


def is_manufacturer(source_id: Optional[str]) -> bool:
    return SourceTier.of(source_id) == SourceTier.MANUFACTURER
