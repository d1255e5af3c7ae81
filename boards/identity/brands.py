"""
Brand Canonicalizer.

Maps arbitrary brand spellings ("LIB TECH", "Lib Technologies", "libtech",
"Capita Snowboarding") to one canonical brand name plus the manufacturer
group that owns it. Canonicalization is total: it never raises, and the same
input always yields the same output.

Example:
    >>> canonicalize("Lib Technologies").canonical_name
    'Lib Tech'
    >>> canonicalize("gnu").manufacturer_slug
    'mervin'
    >>> canonicalize("rome snowboards").canonical_name
    'Rome'
"""

import re
from typing import Optional

from boards.identity.rules import get_rule_table
from boards.types import BrandIdentifier

UNKNOWN_BRAND = "Unknown"

ZERO_WIDTH_RE = re.compile(r"[\u200b\u200c\u200d\ufeff\u00ad]")

BRAND_SUFFIX_PATTERNS = [
    re.compile(r"\s*snowboard\s*co\.?\s*", re.IGNORECASE),
    re.compile(r"\s*snowboarding\b", re.IGNORECASE),
    re.compile(r"\s*snowboards?\b", re.IGNORECASE),
]


def clean_brand(raw: str) -> str:
    """Strip zero-width characters and "Snowboards"-style suffixes."""
    cleaned = ZERO_WIDTH_RE.sub("", raw)
    for pattern in BRAND_SUFFIX_PATTERNS:
        cleaned = pattern.sub(" ", cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()


def canonical_brand_name(raw: Optional[str]) -> str:
    """
    Resolve a raw brand string to its canonical display name.

    Known brands (and their aliases) keep their catalog casing; unknown
    brands pass through title-cased. Empty input becomes "Unknown".
    """
    if not raw or not isinstance(raw, str):
        return UNKNOWN_BRAND

    cleaned = clean_brand(raw)
    if not cleaned:
        return UNKNOWN_BRAND

    table = get_rule_table()
    lookup = cleaned.lower()
    if lookup in table.known_brands:
        return table.known_brands[lookup]
    if lookup in table.brand_aliases:
        return table.brand_aliases[lookup]
    return cleaned.title()


def canonicalize(raw_brand: Optional[str]) -> BrandIdentifier:
    """Canonicalize a raw brand into a BrandIdentifier."""
    name = canonical_brand_name(raw_brand)
    return BrandIdentifier(
        raw_input=raw_brand or "",
        canonical_name=name,
        manufacturer_slug=get_rule_table().manufacturer_for(name),
    )


def first_brand(*candidates) -> Optional[BrandIdentifier]:
    """
    Canonicalize the first usable brand candidate.

    Extractors often have several places a brand might come from (a vendor
    field, a title prefix, a breadcrumb). Returns None when none of them is
    a non-empty string.
    """
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return canonicalize(candidate)
    return None
