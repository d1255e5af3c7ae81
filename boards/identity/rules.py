"""
Brand-scoped normalization rule table.

Loads rules.yaml (or the file named by settings.BOARDS_RULES_PATH) into an
immutable RuleTable. The table is read once and shared by every normalizer
and canonicalizer call; nothing mutates it after load.

Usage:
    from boards.identity.rules import get_rule_table

    table = get_rule_table()
    table.riders_for("GNU")
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

import yaml
from django.conf import settings

from boards.exceptions import RuleTableError

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).resolve().parent / "rules.yaml"


@dataclass(frozen=True)
class RegexRule:
    """A named, optionally brand-scoped regex substitution."""

    name: str
    patterns: Tuple[re.Pattern, ...]
    replace: str = ""
    brands: Optional[FrozenSet[str]] = None

    def apply(self, text: str) -> str:
        for pattern in self.patterns:
            text = pattern.sub(self.replace, text)
        return text


@dataclass(frozen=True)
class RuleTable:
    """Parsed contents of the rule file."""

    known_brands: Dict[str, str]
    brand_aliases: Dict[str, str]
    manufacturers: Dict[str, str]
    brand_leaks: Tuple[RegexRule, ...]
    corrections: Tuple[RegexRule, ...]
    riders: Dict[str, Tuple[str, ...]]
    series_prefixes: Tuple[str, ...]
    shape_modifiers: Tuple[RegexRule, ...]
    exact_aliases: Dict[str, str]
    prefix_aliases: Tuple[Tuple[str, str], ...]
    profile_codes: Tuple[str, ...]
    profile_words: Tuple[str, ...]
    keep_profile_word_brands: FrozenSet[str]
    keep_profile_models: FrozenSet[str] = field(default_factory=frozenset)

    def riders_for(self, brand: Optional[str]) -> Tuple[str, ...]:
        if not brand:
            return ()
        return self.riders.get(brand, ())

    def manufacturer_for(self, brand: str) -> str:
        return self.manufacturers.get(brand, "default")


def _compile(patterns, ignore_case: bool = True) -> Tuple[re.Pattern, ...]:
    flags = re.IGNORECASE if ignore_case else 0
    if isinstance(patterns, str):
        patterns = [patterns]
    try:
        return tuple(re.compile(p, flags) for p in patterns)
    except re.error as e:
        raise RuleTableError(f"Invalid pattern in rule table: {e}") from e


def _regex_rules(entries: List[dict], section: str) -> Tuple[RegexRule, ...]:
    rules = []
    for entry in entries or []:
        if "name" not in entry:
            raise RuleTableError(f"Rule in '{section}' is missing a name")
        patterns = entry.get("patterns") or entry.get("pattern")
        if not patterns:
            raise RuleTableError(f"Rule '{entry['name']}' has no pattern")
        brands = entry.get("brands")
        rules.append(
            RegexRule(
                name=entry["name"],
                patterns=_compile(patterns, entry.get("ignore_case", True)),
                replace=entry.get("replace", ""),
                brands=frozenset(brands) if brands else None,
            )
        )
    return tuple(rules)


def parse_rule_table(data: dict) -> RuleTable:
    """
    Build a RuleTable from the decoded YAML document.

    Raises:
        RuleTableError: If a required section is missing or malformed.
    """
    if not isinstance(data, dict):
        raise RuleTableError("Rule table must be a mapping")

    brands = data.get("brands") or {}
    known = brands.get("known")
    if not known:
        raise RuleTableError("Rule table has no known brands")

    known_brands = {str(name).lower(): str(name) for name in known}
    brand_aliases = {
        str(alias).lower(): str(canonical)
        for alias, canonical in (brands.get("aliases") or {}).items()
    }
    for alias, canonical in brand_aliases.items():
        if canonical.lower() not in known_brands:
            raise RuleTableError(
                f"Brand alias '{alias}' points at unknown brand '{canonical}'"
            )

    manufacturers = {}
    for slug, members in (brands.get("manufacturers") or {}).items():
        for member in members:
            manufacturers[str(member)] = str(slug)

    aliases = data.get("model_aliases") or {}
    profile = data.get("profile") or {}

    # Longest first so "c3 btx" wins over "c3".
    codes = sorted((str(c) for c in profile.get("codes") or []), key=len, reverse=True)
    words = sorted((str(w) for w in profile.get("words") or []), key=len, reverse=True)

    return RuleTable(
        known_brands=known_brands,
        brand_aliases=brand_aliases,
        manufacturers=manufacturers,
        brand_leaks=_regex_rules(data.get("brand_leaks"), "brand_leaks"),
        corrections=_regex_rules(data.get("corrections"), "corrections"),
        riders={
            str(brand): tuple(str(r) for r in names)
            for brand, names in (data.get("riders") or {}).items()
        },
        series_prefixes=tuple(str(p) for p in data.get("series_prefixes") or []),
        shape_modifiers=_regex_rules(data.get("shape_modifiers"), "shape_modifiers"),
        exact_aliases={
            str(k).lower(): str(v) for k, v in (aliases.get("exact") or {}).items()
        },
        prefix_aliases=tuple(
            (str(prefix).lower(), str(replacement))
            for prefix, replacement in aliases.get("prefix") or []
        ),
        profile_codes=tuple(codes),
        profile_words=tuple(words),
        keep_profile_word_brands=frozenset(profile.get("keep_words_brands") or []),
        keep_profile_models=frozenset(
            str(m).lower() for m in profile.get("keep_models") or []
        ),
    )


def load_rule_table(path=None) -> RuleTable:
    """
    Load and parse a rule file.

    Args:
        path: Path to the YAML file. Defaults to settings.BOARDS_RULES_PATH.

    Raises:
        RuleTableError: If the file is missing or cannot be parsed.
    """
    if path is None:
        path = getattr(settings, "BOARDS_RULES_PATH", None) or DEFAULT_RULES_PATH
    path = Path(path)

    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise RuleTableError(f"Cannot read rule table {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RuleTableError(f"Cannot parse rule table {path}: {e}") from e

    table = parse_rule_table(data)
    logger.debug(
        "Loaded rule table from %s: %d brands, %d rider groups",
        path, len(table.known_brands), len(table.riders),
    )
    return table


_rule_table: Optional[RuleTable] = None


def get_rule_table() -> RuleTable:
    """Get the shared rule table, loading it on first use."""
    global _rule_table
    if _rule_table is None:
        _rule_table = load_rule_table()
    return _rule_table


def reset_rule_table() -> None:
    """Drop the shared rule table (for tests and rule reloads)."""
    global _rule_table
    _rule_table = None
