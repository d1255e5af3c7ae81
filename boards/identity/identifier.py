"""
Identity Deriver.

A BoardIdentifier takes everything a scraper knows about one board (raw
title, raw brand, optional URL, optional hints) and derives four facets:

    brand       canonical brand name
    model       normalized base model
    condition   new / blemished / closeout / used / unknown
    gender      womens / kids / unisex
    year        model year or None

Each facet is lazily computed and memoized, and each reads only the raw
inputs, never another facet, so accessing them in any order or subset gives
identical answers.

Facet precedence is declared once per facet as a PrecedenceResolver: an
ordered list of named evidence sources where the first source with an
opinion wins. Scrapers pass hints only when they know better than the
generic heuristics, so hints always sit first.

Example:
    >>> ident = BoardIdentifier(
    ...     raw_model="Women's Custom Snowboard (Blem) 2025", raw_brand="Burton"
    ... )
    >>> ident.condition, ident.gender, ident.model, ident.year
    ('blemished', 'womens', 'Custom', 2025)
"""

import re
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Callable, List, Optional, Tuple

from boards.identity.brands import canonicalize
from boards.identity.normalizer import normalize
from boards.types import BrandIdentifier

CONDITION_NEW = "new"
CONDITION_BLEMISHED = "blemished"
CONDITION_CLOSEOUT = "closeout"
CONDITION_USED = "used"
CONDITION_UNKNOWN = "unknown"

GENDER_WOMENS = "womens"
GENDER_KIDS = "kids"
GENDER_UNISEX = "unisex"

CONDITION_HINTS = [
    (re.compile(r"blem", re.IGNORECASE), CONDITION_BLEMISHED),
    (re.compile(r"close-?out|outlet|clearance", re.IGNORECASE), CONDITION_CLOSEOUT),
    (re.compile(r"used|pre-?owned|second-?hand", re.IGNORECASE), CONDITION_USED),
    (re.compile(r"^\s*new\b|sale", re.IGNORECASE), CONDITION_NEW),
]

CONDITION_URL_MARKERS = [
    ("-closeout", CONDITION_CLOSEOUT),
    ("/outlet/", CONDITION_CLOSEOUT),
    ("-blem", CONDITION_BLEMISHED),
]

CONDITION_KEYWORDS = [
    (re.compile(r"\(blem\)|-\s*blem\b", re.IGNORECASE), CONDITION_BLEMISHED),
    (re.compile(r"\(closeout\)|-\s*closeout\b", re.IGNORECASE), CONDITION_CLOSEOUT),
    (re.compile(r"\(sale\)", re.IGNORECASE), CONDITION_NEW),
]

WOMENS_RE = re.compile(r"\bwomen['’]?s\b|\bwmns?\b|\bladies\b", re.IGNORECASE)
KIDS_RE = re.compile(
    r"\bkids['’]?|\bboys['’]|\bboy['’]s\b|\bgirls['’]|\bgirl['’]s\b|\btoddlers?['’]?|\byouth\b",
    re.IGNORECASE,
)
MENS_RE = re.compile(r"\bmen['’]?s\b|\bunisex\b", re.IGNORECASE)

# Bare labels seen in gender hints, apostrophes removed.
GENDER_LABELS = {
    **dict.fromkeys(("womens", "women", "woman", "female", "ladies", "lady", "wmns", "wmn"), GENDER_WOMENS),
    **dict.fromkeys(
        ("kids", "kid", "youth", "junior", "boys", "boy", "girls", "girl", "toddler", "toddlers"), GENDER_KIDS
    ),
    **dict.fromkeys(("mens", "men", "man", "male", "unisex"), GENDER_UNISEX),
}

YEAR_4_DIGIT_RE = re.compile(r"\b(20[1-2]\d)\b")
YEAR_2_DIGIT_RE = re.compile(r"\b(\d{2})\b")


@dataclass(frozen=True)
class IdentitySignal:
    """Raw inputs a BoardIdentifier derives its facets from."""

    raw_model: str
    raw_brand: str
    url: Optional[str] = None
    condition_hint: Optional[str] = None
    gender_hint: Optional[str] = None
    year_hint: Optional[int] = None


class PrecedenceResolver:
    """
    First-opinion-wins resolution over ordered evidence sources.

    Each source is (name, fn) where fn(signal) returns a value or None for
    "no opinion". resolve() returns the first opinion, else the default.
    """

    def __init__(self, facet: str, sources: List[Tuple[str, Callable[[IdentitySignal], Any]]], default=None):
        self.facet = facet
        self.sources = sources
        self.default = default

    def explain(self, signal: IdentitySignal) -> Tuple[Any, str]:
        """Return (value, name of the source that decided it)."""
        for name, source in self.sources:
            value = source(signal)
            if value is not None:
                return value, name
        return self.default, "default"

    def resolve(self, signal: IdentitySignal):
        return self.explain(signal)[0]


# ---------------------------------------------------------------------------
# Condition
# ---------------------------------------------------------------------------

def normalize_condition(value: Optional[str]) -> str:
    """Map a free-form condition string onto the condition vocabulary."""
    if not value or not value.strip():
        return CONDITION_UNKNOWN
    for pattern, condition in CONDITION_HINTS:
        if pattern.search(value):
            return condition
    return CONDITION_UNKNOWN


def _condition_from_hint(signal: IdentitySignal) -> Optional[str]:
    if signal.condition_hint:
        return normalize_condition(signal.condition_hint)
    return None


def _condition_from_url(signal: IdentitySignal) -> Optional[str]:
    if not signal.url:
        return None
    url = signal.url.lower()
    for marker, condition in CONDITION_URL_MARKERS:
        if marker in url:
            return condition
    return None


def _condition_from_text(signal: IdentitySignal) -> Optional[str]:
    for pattern, condition in CONDITION_KEYWORDS:
        if pattern.search(signal.raw_model or ""):
            return condition
    return None


CONDITION_RESOLVER = PrecedenceResolver(
    "condition",
    [
        ("hint", _condition_from_hint),
        ("url", _condition_from_url),
        ("keywords", _condition_from_text),
    ],
    default=CONDITION_NEW,
)


# ---------------------------------------------------------------------------
# Gender
# ---------------------------------------------------------------------------

def detect_gender(text: Optional[str]) -> Optional[str]:
    """Gender evidence in free text, or None when the text says nothing."""
    if not text:
        return None
    if WOMENS_RE.search(text):
        return GENDER_WOMENS
    if KIDS_RE.search(text):
        return GENDER_KIDS
    if MENS_RE.search(text):
        return GENDER_UNISEX
    return None


def fold_gender_label(value: Optional[str]) -> Optional[str]:
    """Look up a bare gender label ("Women", "female", "Youth"), or None."""
    if not value:
        return None
    label = value.strip().lower().replace("'", "").replace("’", "")
    return GENDER_LABELS.get(label)


def normalize_gender(value: Optional[str]) -> str:
    """
    Fold any gender label into womens / kids / unisex.

    Bare labels go through GENDER_LABELS; longer text ("Women's Snowboards")
    falls back to keyword detection.
    """
    return fold_gender_label(value) or detect_gender(value) or GENDER_UNISEX


def _gender_from_hint(signal: IdentitySignal) -> Optional[str]:
    if signal.gender_hint:
        return normalize_gender(signal.gender_hint)
    return None


def _gender_from_text(signal: IdentitySignal) -> Optional[str]:
    found = detect_gender(signal.raw_model)
    if found is not None:
        return found
    if signal.url and "-womens" in signal.url.lower():
        return GENDER_WOMENS
    if signal.url and re.search(r"[-/](?:kids|youth|boys|girls)[-/]", signal.url.lower()):
        return GENDER_KIDS
    return None


GENDER_RESOLVER = PrecedenceResolver(
    "gender",
    [
        ("hint", _gender_from_hint),
        ("keywords", _gender_from_text),
    ],
    default=GENDER_UNISEX,
)


# ---------------------------------------------------------------------------
# Year
# ---------------------------------------------------------------------------

def infer_year(text: Optional[str]) -> Optional[int]:
    """
    Parse a model year from free text.

    A 4-digit 2010-2029 year wins; otherwise a 2-digit 18-29 token maps to
    2018-2029.
    """
    if not text:
        return None
    match = YEAR_4_DIGIT_RE.search(text)
    if match:
        return int(match.group(1))
    for match in YEAR_2_DIGIT_RE.finditer(text):
        value = int(match.group(1))
        if 18 <= value <= 29:
            return 2000 + value
    return None


def _year_from_hint(signal: IdentitySignal) -> Optional[int]:
    if signal.year_hint:
        return int(signal.year_hint)
    return None


def _year_from_text(signal: IdentitySignal) -> Optional[int]:
    return infer_year(signal.raw_model)


YEAR_RESOLVER = PrecedenceResolver(
    "year",
    [
        ("hint", _year_from_hint),
        ("title", _year_from_text),
    ],
    default=None,
)


class BoardIdentifier:
    """Derives brand, model, condition, gender and year from raw scraper input."""

    def __init__(
        self,
        raw_model: Optional[str],
        raw_brand: Optional[str],
        url: Optional[str] = None,
        condition_hint: Optional[str] = None,
        gender_hint: Optional[str] = None,
        year_hint: Optional[int] = None,
        brand_identifier: Optional[BrandIdentifier] = None,
    ):
        self.signal = IdentitySignal(
            raw_model=raw_model or "",
            raw_brand=raw_brand or "",
            url=url,
            condition_hint=condition_hint,
            gender_hint=gender_hint,
            year_hint=year_hint,
        )
        self._brand_identifier = brand_identifier

    @cached_property
    def brand_identifier(self) -> BrandIdentifier:
        return self._brand_identifier or canonicalize(self.signal.raw_brand)

    @property
    def brand(self) -> str:
        return self.brand_identifier.canonical_name

    @cached_property
    def model(self) -> str:
        return normalize(self.signal.raw_model or "Unknown", self.brand)

    @cached_property
    def condition(self) -> str:
        return CONDITION_RESOLVER.resolve(self.signal)

    @cached_property
    def gender(self) -> str:
        return GENDER_RESOLVER.resolve(self.signal)

    @cached_property
    def year(self) -> Optional[int]:
        return YEAR_RESOLVER.resolve(self.signal)

    def __repr__(self) -> str:
        return (
            f"BoardIdentifier(brand={self.brand!r}, raw_model={self.signal.raw_model!r})"
        )
