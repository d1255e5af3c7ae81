"""
Spec Resolution Service.

Picks one value per spec field from everything the provenance log holds for
a board, and reports whether the sources agree.

Resolution Rules:
    1. Entries are ranked by SourceTier (manufacturer > review-site > llm >
       judgment > retailer); the sort is stable, so among equal tiers the
       earliest entry wins.
    2. The top entry's value is the resolved value.
    3. ``agreement`` is True when every entry matches the resolved value.
       Flex values match when they round to the same integer.
    4. A disagreement is reported, never acted on: it does not block
       consolidation.

Example:
    >>> entries = [
    ...     SpecSourceEntry("flex", "retailer:evo", "5"),
    ...     SpecSourceEntry("flex", "manufacturer:burton", "6"),
    ... ]
    >>> info = resolve_field("flex", entries)
    >>> info.resolved, info.resolved_source, info.agreement
    (6.0, 'manufacturer:burton', False)
"""

import logging
from typing import Any, Dict, List, Optional

from boards.services.source_tier import SourceTier
from boards.services.spec_tracker import get_spec_tracker
from boards.types import TERRAIN_KEYS, SpecFieldInfo, SpecSourceEntry
from boards.utils.normalization import normalize_ability_range
from boards.utils.terrain import parse_terrain_score, terrain_to_category

logger = logging.getLogger(__name__)

TERRAIN_FIELDS = tuple(f"terrain_{key}" for key in TERRAIN_KEYS)

SPEC_FIELDS = ("flex", "profile", "shape", "category", "abilityLevel") + TERRAIN_FIELDS

# Sources whose word alone settles a field; consensus only counts the rest.
CONSENSUS_EXCLUDED = {SourceTier.MANUFACTURER, SourceTier.LLM, SourceTier.JUDGMENT}

NO_SOURCE = "none"


def coerce_value(field_name: str, value: Any) -> Any:
    """Convert a stored provenance string to the field's native type."""
    if value is None:
        return None
    if field_name == "flex":
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
    if field_name in TERRAIN_FIELDS:
        return parse_terrain_score(value)
    return value


def _comparable(field_name: str, value: Any):
    if field_name == "flex":
        flex = coerce_value("flex", value)
        return round(flex) if flex is not None else None
    return str(value).strip().lower()


def values_match(field_name: str, a: Any, b: Any) -> bool:
    return _comparable(field_name, a) == _comparable(field_name, b)


def rank_entries(entries: List[SpecSourceEntry]) -> List[SpecSourceEntry]:
    """Entries ordered by source tier, highest first, stable among equals."""
    return sorted(entries, key=lambda entry: SourceTier.of(entry.source), reverse=True)


def resolve_field(field_name: str, entries: List[SpecSourceEntry]) -> SpecFieldInfo:
    """Resolve one field from its provenance entries."""
    if not entries:
        return SpecFieldInfo(resolved=None, resolved_source=NO_SOURCE, agreement=True)

    top = rank_entries(entries)[0]
    agreement = all(values_match(field_name, entry.value, top.value) for entry in entries)
    return SpecFieldInfo(
        resolved=coerce_value(field_name, top.value),
        resolved_source=top.source,
        agreement=agreement,
        sources=list(entries),
    )


def find_consensus(field_name: str, entries: List[SpecSourceEntry]) -> Optional[Dict[str, Any]]:
    """
    Find a value at least two independent sources agree on.

    Manufacturer, llm and judgment entries are ignored. Returns
    ``{"value": ..., "sources": [...]}`` for the first agreeing group, or
    None.
    """
    candidates = [e for e in entries if SourceTier.of(e.source) not in CONSENSUS_EXCLUDED]
    if len(candidates) < 2:
        return None

    groups: Dict[Any, List[SpecSourceEntry]] = {}
    for entry in candidates:
        groups.setdefault(_comparable(field_name, entry.value), []).append(entry)

    for group in groups.values():
        if len(group) >= 2:
            return {
                "value": coerce_value(field_name, group[0].value),
                "sources": [entry.source for entry in group],
            }
    return None


def resolve_entries(entries_by_field: Dict[str, List[SpecSourceEntry]]) -> Dict[str, SpecFieldInfo]:
    return {name: resolve_field(name, entries_by_field.get(name, [])) for name in SPEC_FIELDS}


def apply_resolution(board, field_info: Dict[str, SpecFieldInfo]):
    """
    Copy resolved values onto a Board model or BoardRecord.

    Fields with no resolved value keep whatever the board already had.
    """
    for name in ("flex", "profile", "shape", "category"):
        info = field_info.get(name)
        if info and info.resolved is not None:
            setattr(board, name, info.resolved)

    ability = field_info.get("abilityLevel")
    if ability and ability.resolved is not None:
        board.ability_level_min, board.ability_level_max = normalize_ability_range(
            ability.resolved
        )

    terrain = dict(board.terrain_scores)
    for key in TERRAIN_KEYS:
        info = field_info.get(f"terrain_{key}")
        if info and info.resolved is not None:
            terrain[key] = info.resolved
    _set_terrain(board, terrain)

    if not board.category:
        board.category = terrain_to_category(terrain)
    return board


def _set_terrain(board, terrain: Dict[str, Optional[int]]) -> None:
    if isinstance(getattr(type(board), "terrain_scores", None), property):
        # Django model: scores live in one column per dimension.
        for key in TERRAIN_KEYS:
            setattr(board, f"terrain_{key}", terrain.get(key))
    else:
        board.terrain_scores = terrain


def resolve_board_specs(board, save: bool = False) -> Dict[str, SpecFieldInfo]:
    """
    Resolve a board's specs from its persisted provenance rows.

    Args:
        board: Board model instance or BoardRecord
        save: Persist the resolved values (Board model only)

    Returns:
        Dict of field name to SpecFieldInfo
    """
    entries_by_field = get_spec_tracker().get_entries_by_field(board.board_key)
    field_info = resolve_entries(entries_by_field)
    apply_resolution(board, field_info)

    disagreements = [name for name, info in field_info.items() if not info.agreement]
    if disagreements:
        logger.info(f"Spec disagreement on {board.board_key}: {', '.join(disagreements)}")

    if save and hasattr(board, "save"):
        board.save()
    return field_info
