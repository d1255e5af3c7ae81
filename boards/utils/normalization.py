"""
Spec value normalization utility functions.

Sources describe the same spec in wildly different words: Burton says
"Flying V", Lib Tech says "C2X", a retailer says "Hybrid Rocker", a review
site says "rocker/camber". These helpers map free text onto the small
vocabularies stored on boards and in provenance rows.

Normalization Rules:
- Profile: exact map, then rocker/camber order for hybrids, then substring
  map, then single-keyword fallback
- Shape: exact map, then directional+twin, then substring map
- Category: map lookup, then keyword counting over the description
- Flex: "X/10", "X out of 10", plain 1-10, then soft/medium/stiff terms
- Ability: any mix of levels and aliases becomes a (min, max) range
- Unrecognized text always yields None ("no opinion"), never an error
"""

import re
from typing import Dict, List, Optional, Tuple

from django.conf import settings

from boards.identity.identifier import infer_year  # noqa: F401  re-exported
from boards.models import Availability, BoardCategory, BoardProfile, BoardShape

PROFILE_MAP: Dict[str, str] = {
    # Standard terms
    "camber": BoardProfile.CAMBER,
    "traditional camber": BoardProfile.CAMBER,
    "full camber": BoardProfile.CAMBER,
    "rocker": BoardProfile.ROCKER,
    "full rocker": BoardProfile.ROCKER,
    "pure rocker": BoardProfile.ROCKER,
    "banana": BoardProfile.ROCKER,
    "catch-free": BoardProfile.ROCKER,
    "flat": BoardProfile.FLAT,
    "flat top": BoardProfile.FLAT,
    "zero camber": BoardProfile.FLAT,
    # Hybrid camber-dominant
    "hybrid camber": BoardProfile.HYBRID_CAMBER,
    "camrock": BoardProfile.HYBRID_CAMBER,
    "cam-rock": BoardProfile.HYBRID_CAMBER,
    "directional camber": BoardProfile.HYBRID_CAMBER,
    "camber/rocker": BoardProfile.HYBRID_CAMBER,
    "camber with rocker": BoardProfile.HYBRID_CAMBER,
    "mostly camber": BoardProfile.HYBRID_CAMBER,
    "s-camber": BoardProfile.HYBRID_CAMBER,
    "flat with camber": BoardProfile.HYBRID_CAMBER,
    # Hybrid rocker-dominant
    "hybrid rocker": BoardProfile.HYBRID_ROCKER,
    "rocker/camber": BoardProfile.HYBRID_ROCKER,
    "rocker/camber/rocker": BoardProfile.HYBRID_ROCKER,
    "rocker with camber": BoardProfile.HYBRID_ROCKER,
    "mostly rocker": BoardProfile.HYBRID_ROCKER,
    "gullwing": BoardProfile.HYBRID_ROCKER,
    "directional flat with rocker": BoardProfile.HYBRID_ROCKER,
    "flat with rocker": BoardProfile.HYBRID_ROCKER,
    "flat to rocker": BoardProfile.HYBRID_ROCKER,
    # Burton
    "flying v": BoardProfile.HYBRID_ROCKER,
    "pure pop camber": BoardProfile.CAMBER,
    "purepop camber": BoardProfile.CAMBER,
    "bend": BoardProfile.ROCKER,
    "directional flat top": BoardProfile.FLAT,
    # Mervin (Lib Tech / GNU) contour codes
    "c2": BoardProfile.HYBRID_CAMBER,
    "c2x": BoardProfile.HYBRID_CAMBER,
    "c2e": BoardProfile.HYBRID_CAMBER,
    "c2 btx": BoardProfile.HYBRID_CAMBER,
    "c3": BoardProfile.CAMBER,
    "c3 btx": BoardProfile.CAMBER,
    "btx": BoardProfile.HYBRID_ROCKER,
    "b.c.": BoardProfile.HYBRID_ROCKER,
    # Jones
    "camrock 2.0": BoardProfile.HYBRID_CAMBER,
    "directional rocker": BoardProfile.HYBRID_ROCKER,
    # Ride
    "performance rocker": BoardProfile.HYBRID_ROCKER,
    "quad rocker": BoardProfile.HYBRID_ROCKER,
    "hybrid all mountain rocker": BoardProfile.HYBRID_ROCKER,
    # CAPiTA
    "resort v1": BoardProfile.HYBRID_CAMBER,
    "alpine v1": BoardProfile.HYBRID_CAMBER,
    "park v1": BoardProfile.HYBRID_ROCKER,
    # Arbor
    "system camber": BoardProfile.CAMBER,
    "system rocker": BoardProfile.ROCKER,
    "parabolic rocker": BoardProfile.HYBRID_ROCKER,
    "uprise fender": BoardProfile.HYBRID_CAMBER,
    # K2
    "directional baseline": BoardProfile.FLAT,
    "catch free baseline": BoardProfile.FLAT,
    "jib baseline": BoardProfile.FLAT,
    "catch free rocker baseline": BoardProfile.ROCKER,
    # Rossignol
    "amptek": BoardProfile.HYBRID_CAMBER,
    "amptek auto-turn rocker": BoardProfile.HYBRID_ROCKER,
}

SHAPE_MAP: Dict[str, str] = {
    "true twin": BoardShape.TRUE_TWIN,
    "twin": BoardShape.TRUE_TWIN,
    "perfectly twin": BoardShape.TRUE_TWIN,
    "symmetrical": BoardShape.TRUE_TWIN,
    "directional twin": BoardShape.DIRECTIONAL_TWIN,
    "directional-twin": BoardShape.DIRECTIONAL_TWIN,
    "tapered twin": BoardShape.DIRECTIONAL_TWIN,
    "slight directional twin": BoardShape.DIRECTIONAL_TWIN,
    "directional": BoardShape.DIRECTIONAL,
    "fully directional": BoardShape.DIRECTIONAL,
    "tapered": BoardShape.TAPERED,
    "tapered directional": BoardShape.TAPERED,
    "directional tapered": BoardShape.TAPERED,
}

CATEGORY_MAP: Dict[str, str] = {
    "all-mountain": BoardCategory.ALL_MOUNTAIN,
    "all mountain": BoardCategory.ALL_MOUNTAIN,
    "allmountain": BoardCategory.ALL_MOUNTAIN,
    "mountain": BoardCategory.ALL_MOUNTAIN,
    "freestyle": BoardCategory.FREESTYLE,
    "free style": BoardCategory.FREESTYLE,
    "freeride": BoardCategory.FREERIDE,
    "free ride": BoardCategory.FREERIDE,
    "backcountry": BoardCategory.FREERIDE,
    "powder": BoardCategory.POWDER,
    "deep powder": BoardCategory.POWDER,
    "park": BoardCategory.PARK,
    "park & pipe": BoardCategory.PARK,
    "park/pipe": BoardCategory.PARK,
    "park / freestyle": BoardCategory.PARK,
    "jib": BoardCategory.PARK,
    "park/jib": BoardCategory.PARK,
}

CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    BoardCategory.ALL_MOUNTAIN: [
        "all-mountain", "all mountain", "versatile", "do-it-all", "everyday",
        "quiver of one", "one board quiver",
    ],
    BoardCategory.FREESTYLE: ["freestyle", "playful", "butter", "jibbing", "tricks"],
    BoardCategory.FREERIDE: [
        "freeride", "backcountry", "big mountain", "aggressive", "charging", "steep",
    ],
    BoardCategory.POWDER: ["powder", "deep snow", "float", "surfing"],
    BoardCategory.PARK: ["park", "pipe", "jib", "rails", "boxes", "halfpipe", "terrain park"],
}

ABILITY_LEVELS = ("beginner", "intermediate", "advanced", "expert")

ABILITY_ALIASES = {
    "novice": "beginner",
    "entry level": "beginner",
    "entry-level": "beginner",
    "day 1": "beginner",
    "pro level": "expert",
    "pro": "expert",
}

# Order matters: compound terms before their single-word parts.
FLEX_TERMS = [
    (("very soft", "extra soft"), 2),
    (("medium-soft", "soft-medium", "medium soft"), 4),
    (("soft",), 3),
    (("very stiff", "extra stiff"), 9),
    (("medium-stiff", "stiff-medium", "medium stiff"), 6),
    (("stiff",), 7),
    (("medium",), 5),
]

FLEX_RATING_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:/|out of)\s*10", re.IGNORECASE)
FLEX_PLAIN_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")


def normalize_profile(raw: Optional[str]) -> Optional[str]:
    """
    Map a profile description onto camber/rocker/flat/hybrid_*.

    Example:
        >>> normalize_profile("Camber dominant with rocker tips")
        'hybrid_camber'
    """
    if not raw:
        return None
    lower = raw.lower().strip()

    if lower in PROFILE_MAP:
        return str(PROFILE_MAP[lower])

    # Compound rocker+camber: whichever comes first dominates.
    if "rocker" in lower and "camber" in lower:
        if lower.index("rocker") < lower.index("camber"):
            return str(BoardProfile.HYBRID_ROCKER)
        return str(BoardProfile.HYBRID_CAMBER)

    for key, value in PROFILE_MAP.items():
        if key in lower:
            return str(value)

    if "camber" in lower:
        return str(BoardProfile.CAMBER)
    if "rocker" in lower:
        return str(BoardProfile.ROCKER)
    if "flat" in lower:
        return str(BoardProfile.FLAT)
    return None


def normalize_shape(raw: Optional[str]) -> Optional[str]:
    """Map a shape description onto true_twin/directional_twin/directional/tapered."""
    if not raw:
        return None
    lower = raw.lower().strip()

    if lower in SHAPE_MAP:
        return str(SHAPE_MAP[lower])

    if "twin" in lower and "direct" in lower:
        return str(BoardShape.DIRECTIONAL_TWIN)

    for key, value in SHAPE_MAP.items():
        if key in lower:
            return str(value)

    if "twin" in lower:
        return str(BoardShape.TRUE_TWIN)
    if "directional" in lower:
        return str(BoardShape.DIRECTIONAL)
    if "taper" in lower:
        return str(BoardShape.TAPERED)
    return None


def normalize_category(raw: Optional[str], description: Optional[str] = None) -> Optional[str]:
    """
    Map a category label onto the category vocabulary.

    Falls back to counting category keywords in the description when the
    label is missing or unrecognized.
    """
    if raw:
        lower = raw.lower().strip()
        if lower in CATEGORY_MAP:
            return str(CATEGORY_MAP[lower])
        for key, value in CATEGORY_MAP.items():
            if key in lower:
                return str(value)

    if description:
        lower_desc = description.lower()
        best_category = None
        best_count = 0
        for category, keywords in CATEGORY_KEYWORDS.items():
            count = sum(1 for kw in keywords if kw in lower_desc)
            if count > best_count:
                best_count = count
                best_category = category
        if best_category:
            return str(best_category)

    return None


def normalize_flex(raw) -> Optional[float]:
    """
    Parse a flex rating onto the 1-10 scale.

    Example:
        >>> normalize_flex("6/10"), normalize_flex("Medium-Stiff")
        (6.0, 6)
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if 1 <= raw <= 10 else None
    text = str(raw)
    if not text.strip():
        return None

    match = FLEX_RATING_RE.search(text)
    if match:
        return float(match.group(1))

    match = FLEX_PLAIN_RE.match(text)
    if match:
        value = float(match.group(1))
        return value if 1 <= value <= 10 else None

    lower = text.lower()
    for terms, value in FLEX_TERMS:
        if any(term in lower for term in terms):
            return value
    return None


def normalize_ability_range(raw: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Parse an ability description into a (min, max) range.

    Handles single levels ("intermediate"), ranges ("beginner-intermediate"),
    wide spans ("beginner to advanced") and aliases ("entry level", "pro").
    """
    if not raw:
        return None, None
    lower = raw.lower().strip()

    found = {level for level in ABILITY_LEVELS if level in lower}
    for alias, level in ABILITY_ALIASES.items():
        if re.search(r"\b" + re.escape(alias) + r"\b", lower):
            found.add(level)

    if not found:
        return None, None

    indexes = sorted(ABILITY_LEVELS.index(level) for level in found)
    return ABILITY_LEVELS[indexes[0]], ABILITY_LEVELS[indexes[-1]]


def normalize_ability_level(raw: Optional[str]) -> Optional[str]:
    """Canonical single-string ability level ("beginner-advanced" or "expert")."""
    low, high = normalize_ability_range(raw)
    if low is None:
        return None
    if low == high:
        return low
    return f"{low}-{high}"


def normalize_availability(raw: Optional[str]) -> str:
    if not raw:
        return str(Availability.UNKNOWN)
    lower = raw.lower()
    if "in_stock" in lower or "in stock" in lower or "instock" in lower:
        return str(Availability.IN_STOCK)
    if "low" in lower or "limited" in lower or "few left" in lower:
        return str(Availability.LOW_STOCK)
    if "out" in lower or "sold" in lower:
        return str(Availability.OUT_OF_STOCK)
    return str(Availability.UNKNOWN)


def convert_to_usd(amount: Optional[float], currency: Optional[str]) -> Optional[float]:
    """Convert a price to USD using the configured rates."""
    if amount is None:
        return None
    code = (currency or "USD").upper()
    if code == "KRW":
        rate = getattr(settings, "BOARDS_KRW_TO_USD_RATE", 0.00074)
        return round(amount * rate, 2)
    return float(amount)


def discount_percent(original_usd: Optional[float], sale_usd: Optional[float]) -> Optional[int]:
    """Whole-number discount; None unless the original price is above the sale price."""
    if not original_usd or sale_usd is None or original_usd <= sale_usd:
        return None
    return round((original_usd - sale_usd) / original_usd * 100)


COMBO_CONTENTS_PATTERNS = [
    re.compile(r"\s\+\s+(.+)$"),
    re.compile(r"\sw/\s+(.+)$", re.IGNORECASE),
    re.compile(r"\s&\s+(Bindings?\b.*)$", re.IGNORECASE),
]


def extract_combo_contents(title: Optional[str]) -> Optional[str]:
    """
    Return what a bundle listing adds on top of the board.

    Example:
        >>> extract_combo_contents("Poppy Snowboard + Citizen Binding")
        'Citizen Binding'
    """
    if not title:
        return None
    for pattern in COMBO_CONTENTS_PATTERNS:
        match = pattern.search(title)
        if match:
            contents = match.group(1).strip()
            return contents or None
    return None
