"""
Board identity resolution.

- brands.py: Brand Canonicalizer
- normalizer.py: Model Normalizer (rule-driven step pipeline)
- rules.py / rules.yaml: brand-scoped rule table
- identifier.py: Identity Deriver (BoardIdentifier)
- keys.py: Key Builder
"""

from .brands import canonicalize, canonical_brand_name, first_brand
from .identifier import BoardIdentifier, infer_year
from .keys import board_key, gender_from_key, identity_key, listing_id, split_key
from .normalizer import normalize, normalize_with_trace

__all__ = [
    "canonicalize",
    "canonical_brand_name",
    "first_brand",
    "BoardIdentifier",
    "infer_year",
    "board_key",
    "gender_from_key",
    "identity_key",
    "listing_id",
    "split_key",
    "normalize",
    "normalize_with_trace",
]
