"""
Key Builder.

A board key is the lowercase composite ``brand|model|gender``. It is the
storage primary key for boards and the coalescing map key, and other
subsystems split it on ``|``, so the format must not change.

The key is a pure function of (brand, model, gender): a manufacturer record
and a retailer record for the same physical board must produce the same key.
"""

import hashlib
from typing import Optional, Tuple

from boards.identity.brands import canonical_brand_name
from boards.identity.identifier import GENDER_KIDS, BoardIdentifier, normalize_gender
from boards.identity.normalizer import normalize

KEY_SEPARATOR = "|"


def gender_bucket(gender: Optional[str]) -> str:
    """Fold a gender label into the key's womens / kids / unisex bucket."""
    return normalize_gender(gender)


def board_key(brand: Optional[str], model: Optional[str], gender: Optional[str] = None) -> str:
    """
    Build the canonical key for a board.

    The brand is canonicalized and the model normalized before lowercasing,
    so raw and already-normalized inputs give the same key. For kids boards
    a leading "kids " is dropped so "Kids Custom Smalls" and "Custom Smalls"
    meet.

    Example:
        >>> board_key("Burton", "Custom Snowboard 2026")
        'burton|custom|unisex'
        >>> board_key("CAPiTA", "Equalizer By Jess Kimura", "Women's")
        'capita|equalizer|womens'
    """
    canonical = canonical_brand_name(brand)
    return compose_key(canonical, normalize(model or "Unknown", canonical), gender_bucket(gender))


def identity_key(ident: BoardIdentifier) -> str:
    """
    Key for a derived identity.

    Uses the identifier's own normalized model and resolved gender, so a
    record's key and its BoardIdentifier.model never disagree.
    """
    return compose_key(ident.brand, ident.model, ident.gender)


def compose_key(canonical_brand: str, normalized_model: str, bucket: str) -> str:
    """Join already-canonical parts into a key."""
    model = normalized_model.lower()
    if bucket == GENDER_KIDS and model.startswith("kids "):
        model = model[len("kids "):]
    # The separator may never appear inside a segment.
    model = model.replace(KEY_SEPARATOR, " ").strip()
    return KEY_SEPARATOR.join([canonical_brand.lower(), model, bucket])


def split_key(key: str) -> Tuple[str, str, str]:
    """Split a board key into (brand, model, gender)."""
    brand, model, gender = key.rsplit(KEY_SEPARATOR, 2)
    return brand, model, gender


def gender_from_key(key: str) -> str:
    """The gender bucket a board key was built with."""
    return key.rsplit(KEY_SEPARATOR, 1)[-1]


def listing_id(retailer: str, url: str, length_cm: Optional[float] = None) -> str:
    """Stable 16-hex listing id from retailer, url and length."""
    length = "" if length_cm is None else _format_length(length_cm)
    digest = hashlib.sha256(f"{retailer}|{url}|{length}".encode("utf-8"))
    return digest.hexdigest()[:16]


def _format_length(length_cm: float) -> str:
    # 158.0 and 158 must hash the same.
    if float(length_cm).is_integer():
        return str(int(length_cm))
    return str(length_cm)
