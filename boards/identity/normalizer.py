"""
Model Normalizer.

Reduces a raw product title ("GNU Asym Ladies Choice C2X Snowboard - Women's
2025") to a comparison-ready base model ("Ladies Choice") by running an
ordered list of named, pure text steps.

Pipeline Order (later steps assume earlier cleanup):
 1. strip-unicode            zero-width chars, BOM, soft hyphen
 2. strip-combo              "+ Binding", "w/ Package", "& Bindings"
 3. strip-pipe               "A | B" -> "A B"
 4. strip-retail-tags        "(Closeout)", "- Blem", "(Sale)"
 5. strip-snowboard          category word
 6. strip-year               "2025", "2024/2025", "- 2026", "2627 EARLY RELEASE"
 7. strip-trailing-size      free-standing 130-199 tokens only
 8. strip-gender-suffix      "- Women's"
 9. strip-brand-prefix       plus brand-scoped partial-leak fixes
10. corrections              brand-scoped catalog fixes (T.Rice -> T. Rice)
11. strip-rider-names        prefix, suffix or "by <rider>", sponsor-scoped
12. strip-series-prefix      "Signature Series", "Ltd"
13. strip-gender-prefix      "Women's ", also when it sat behind the brand
14. shape modifiers          brand-scoped (GNU "Asym")
15. dots and dashes          leading "The", " - ", acronym periods
16. replace-hyphens          plus "Package"
17. apply-model-aliases      exact and prefix alias table
18. strip-profile            trailing contour codes and profile words, repeated
                             until stable; skipped with keep_profile
19. clean-whitespace         collapse, trim, stray slashes and dashes

Every brand-specific table comes from the rule file (boards/identity/rules.yaml);
this module only knows how to run steps. A step may declare a brand scope and
is skipped (and left out of the trace) for other brands. Steps never raise: a
pattern that does not match is a no-op.

The whole pipeline is re-run on its own output until nothing changes (at most
MAX_PASSES times), so normalize(normalize(x)) == normalize(x) and a title
normalized once always produces the same key as one normalized twice.

Usage:
    from boards.identity.normalizer import normalize, normalize_with_trace

    normalize("Burton Custom Snowboard 2026", "Burton")      # "Custom"
    result, trace = normalize_with_trace("Doughboy 185", None)
    # trace == [("input", "Doughboy 185"), ("strip-unicode", ...), ...]
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Tuple

from boards.identity.brands import ZERO_WIDTH_RE, canonical_brand_name
from boards.identity.rules import RegexRule, RuleTable, get_rule_table

logger = logging.getLogger(__name__)

Trace = List[Tuple[str, str]]

MAX_PASSES = 4

COMBO_PATTERNS = [
    re.compile(r"\s*\+\s.*$"),
    re.compile(r"\s+w/\s.*$", re.IGNORECASE),
    re.compile(r"\s+&\s+Bindings?\b.*$", re.IGNORECASE),
]

RETAIL_TAG_PATTERNS = [
    re.compile(r"\s*\((?:Closeout|Blem|Sale)\)", re.IGNORECASE),
    re.compile(r"\s*-\s*(?:Closeout|Blem|Sale)\b", re.IGNORECASE),
]

YEAR_PATTERNS = [
    re.compile(r"\s*-?\s*\d{4}\s+early\s+release\b", re.IGNORECASE),
    re.compile(r"\s*-?\s*\b20[1-2]\d\s*/\s*20[1-2]\d\b"),
    re.compile(r"\s*-?\s*\b20[1-2]\d\b"),
]

BOARD_LENGTH_RE = re.compile(r"\s+\b1[3-9]\d\b(?!\.\d)")

GENDER_WORDS = r"(?:Women['’]?s|Men['’]?s|Kids['’]|Boys['’]|Girls['’])"
GENDER_SUFFIX_RE = re.compile(r"\s*-\s*" + GENDER_WORDS + r"\s*$", re.IGNORECASE)
GENDER_PREFIX_RE = re.compile(r"^" + GENDER_WORDS + r"\s+", re.IGNORECASE)


@dataclass(frozen=True)
class NormalizationStep:
    """One named pipeline step. func takes (text, canonical_brand)."""

    name: str
    func: Callable[[str, Optional[str]], str]
    brands: Optional[FrozenSet[str]] = None
    is_profile_step: bool = False

    def applies(self, brand: Optional[str], keep_profile: bool) -> bool:
        if self.is_profile_step and keep_profile:
            return False
        if self.brands is not None and brand not in self.brands:
            return False
        return True


# ---------------------------------------------------------------------------
# Brand-agnostic steps
# ---------------------------------------------------------------------------

def strip_unicode(text: str, brand: Optional[str] = None) -> str:
    return ZERO_WIDTH_RE.sub("", text)


def strip_combo(text: str, brand: Optional[str] = None) -> str:
    for pattern in COMBO_PATTERNS:
        text = pattern.sub("", text)
    return text


def strip_pipe(text: str, brand: Optional[str] = None) -> str:
    return re.sub(r"\s*\|\s*", " ", text)


def strip_retail_tags(text: str, brand: Optional[str] = None) -> str:
    for pattern in RETAIL_TAG_PATTERNS:
        text = pattern.sub("", text)
    return text


def strip_snowboard(text: str, brand: Optional[str] = None) -> str:
    return re.sub(r"\s+Snowboard\b", "", text, flags=re.IGNORECASE)


def strip_year(text: str, brand: Optional[str] = None) -> str:
    for pattern in YEAR_PATTERNS:
        text = pattern.sub("", text)
    return text


def strip_trailing_size(text: str, brand: Optional[str] = None) -> str:
    """Drop free-standing board lengths (130-199). "K2000" and "Board 100" survive."""
    return BOARD_LENGTH_RE.sub("", text)


def strip_gender_suffix(text: str, brand: Optional[str] = None) -> str:
    return GENDER_SUFFIX_RE.sub("", text)


def strip_gender_prefix(text: str, brand: Optional[str] = None) -> str:
    return GENDER_PREFIX_RE.sub("", text)


def strip_brand_prefix(text: str, brand: Optional[str] = None) -> str:
    if not brand:
        return text
    if text.lower().startswith(brand.lower() + " "):
        return text[len(brand):].lstrip()
    return text


def strip_leading_the(text: str, brand: Optional[str] = None) -> str:
    return re.sub(r"^the\s+", "", text, flags=re.IGNORECASE)


def replace_spaced_dash(text: str, brand: Optional[str] = None) -> str:
    return re.sub(r"\s+-\s+", " ", text)


def strip_acronym_periods(text: str, brand: Optional[str] = None) -> str:
    """D.O.A. -> DOA, keeping version tokens (2.0) and initials (T. Rice)."""
    text = re.sub(r"\.(?=[a-zA-Z])", "", text)
    return re.sub(r"(?<=[a-zA-Z]{2})\.(?=\s|$)", "", text)


def replace_hyphens(text: str, brand: Optional[str] = None) -> str:
    return text.replace("-", " ")


def strip_package(text: str, brand: Optional[str] = None) -> str:
    return re.sub(r"\s+Package\b", "", text, flags=re.IGNORECASE)


def clean_whitespace(text: str, brand: Optional[str] = None) -> str:
    text = re.sub(r"/+$", "", text)
    text = re.sub(r"^\s*[-/]\s*", "", text)
    text = re.sub(r"\s*[-/]\s*$", "", text)
    return re.sub(r"\s{2,}", " ", text).strip()


def strip_rider_name(text: str, riders) -> str:
    """
    Remove the first sponsored rider name found as "by <rider>", prefix or suffix.

    "Equalizer By Jess Kimura" -> "Equalizer"
    "Max Warbington Finest" -> "Finest"
    """
    text = text.rstrip()
    lowered = text.lower()
    for rider in riders:
        rider_lower = rider.lower()
        by_idx = lowered.find(" by " + rider_lower)
        if by_idx >= 0:
            return (text[:by_idx] + text[by_idx + 4 + len(rider):]).strip()
        if lowered.startswith(rider_lower + " "):
            return text[len(rider):].lstrip()
        if lowered.endswith(" " + rider_lower):
            return text[:len(text) - len(rider) - 1]
    return text


# ---------------------------------------------------------------------------
# Pipeline assembly
# ---------------------------------------------------------------------------

def _regex_step(rule: RegexRule) -> NormalizationStep:
    return NormalizationStep(
        name=rule.name,
        func=lambda text, brand: rule.apply(text),
        brands=rule.brands,
    )


def _alias_step(table: RuleTable) -> Callable[[str, Optional[str]], str]:
    def apply_model_aliases(text: str, brand: Optional[str] = None) -> str:
        lowered = " ".join(text.lower().split())
        if lowered in table.exact_aliases:
            return table.exact_aliases[lowered]
        for prefix, replacement in table.prefix_aliases:
            if lowered.startswith(prefix):
                return replacement + text.lstrip()[len(prefix):]
        return text

    return apply_model_aliases


def _profile_step(table: RuleTable) -> Callable[[str, Optional[str]], str]:
    def alternation(tokens) -> str:
        return "|".join(r"\s+".join(re.escape(part) for part in t.split()) for t in tokens)

    codes_re = re.compile(r"\s+(?:" + alternation(table.profile_codes) + r")\s*$", re.IGNORECASE)
    words_re = re.compile(r"\s+(?:" + alternation(table.profile_words) + r")\s*$", re.IGNORECASE)

    def strip_profile(text: str, brand: Optional[str] = None) -> str:
        # Designators stack ("Flagship C2 Camber"), so strip until nothing changes.
        while " ".join(text.lower().split()) not in table.keep_profile_models:
            before = text
            if table.profile_codes:
                text = codes_re.sub("", text)
            if table.profile_words and brand not in table.keep_profile_word_brands:
                text = words_re.sub("", text)
            if text == before:
                break
        return text

    return strip_profile


def build_steps(table: RuleTable) -> List[NormalizationStep]:
    """Assemble the ordered step list from a rule table."""
    steps = [
        NormalizationStep("strip-unicode", strip_unicode),
        NormalizationStep("strip-combo", strip_combo),
        NormalizationStep("strip-pipe", strip_pipe),
        NormalizationStep("strip-retail-tags", strip_retail_tags),
        NormalizationStep("strip-snowboard", strip_snowboard),
        NormalizationStep("strip-year", strip_year),
        NormalizationStep("strip-trailing-size", strip_trailing_size),
        NormalizationStep("strip-gender-suffix", strip_gender_suffix),
        NormalizationStep("strip-brand-prefix", strip_brand_prefix),
    ]
    steps.extend(_regex_step(rule) for rule in table.brand_leaks)
    steps.extend(_regex_step(rule) for rule in table.corrections)

    if table.riders:
        steps.append(
            NormalizationStep(
                "strip-rider-names",
                lambda text, brand: strip_rider_name(text, table.riders_for(brand)),
                brands=frozenset(table.riders),
            )
        )
    if table.series_prefixes:
        series_re = re.compile(
            r"^(?:" + "|".join(re.escape(p) for p in table.series_prefixes) + r")\s+",
            re.IGNORECASE,
        )
        steps.append(
            NormalizationStep("strip-series-prefix", lambda text, brand: series_re.sub("", text))
        )

    # prefixes are gone ("Burton Men's Custom").
    steps.append(NormalizationStep("strip-gender-prefix", strip_gender_prefix))

    steps.extend(_regex_step(rule) for rule in table.shape_modifiers)
    steps.extend([
        NormalizationStep("strip-leading-the", strip_leading_the),
        NormalizationStep("replace-spaced-dash", replace_spaced_dash),
        NormalizationStep("strip-acronym-periods", strip_acronym_periods),
        NormalizationStep("replace-hyphens", replace_hyphens),
        NormalizationStep("strip-package", strip_package),
        NormalizationStep("apply-model-aliases", _alias_step(table)),
        NormalizationStep("strip-profile", _profile_step(table), is_profile_step=True),
        NormalizationStep("clean-whitespace", clean_whitespace),
    ])
    return steps


class ModelNormalizer:
    """
    Runs the normalization pipeline.

    Instances hold only the immutable step list, so one normalizer can be
    shared by concurrent callers.
    """

    def __init__(self, rule_table: Optional[RuleTable] = None):
        self.steps = build_steps(rule_table or get_rule_table())

    def normalize(
        self,
        raw_model: Optional[str],
        brand: Optional[str] = None,
        keep_profile: bool = False,
    ) -> str:
        result, _ = self._run(raw_model, brand, keep_profile, trace=None)
        return result

    def normalize_with_trace(
        self,
        raw_model: Optional[str],
        brand: Optional[str] = None,
        keep_profile: bool = False,
    ) -> Tuple[str, Trace]:
        """
        Normalize and return the ordered (step_name, intermediate) trace.

        The trace starts with ("input", raw) and lists only steps that ran.
        Empty or "Unknown" input produces a single ("early-return", raw) entry.
        """
        trace: Trace = []
        result, _ = self._run(raw_model, brand, keep_profile, trace=trace)
        return result, trace

    def _run(self, raw_model, brand, keep_profile, trace) -> Tuple[str, Optional[Trace]]:
        raw = "" if raw_model is None else str(raw_model)
        if not raw.strip() or raw == "Unknown":
            if trace is not None:
                trace.append(("early-return", raw))
            return raw, trace

        canonical = canonical_brand_name(brand) if brand else None
        text = raw
        if trace is not None:
            trace.append(("input", raw))

        for pass_number in range(MAX_PASSES):
            before = text
            for step in self.steps:
                if not step.applies(canonical, keep_profile):
                    continue
                result = step.func(text, canonical)
                # Re-runs only trace the steps that still changed something.
                if trace is not None and (pass_number == 0 or result != text):
                    trace.append((step.name, result))
                text = result

            if not text:
                logger.debug("Normalization of %r emptied the model, keeping %r", raw, before)
                text = before
                if trace is not None:
                    trace.append(("restore-raw" if pass_number == 0 else "restore-previous", text))
                break
            if text == before:
                break
        return text, trace


_normalizer: Optional[ModelNormalizer] = None


def get_model_normalizer() -> ModelNormalizer:
    """Get the shared normalizer built from the shared rule table."""
    global _normalizer
    if _normalizer is None:
        _normalizer = ModelNormalizer()
    return _normalizer


def reset_model_normalizer() -> None:
    global _normalizer
    _normalizer = None


def normalize(raw_model: Optional[str], brand: Optional[str] = None, keep_profile: bool = False) -> str:
    """Normalize a raw model title for comparison."""
    return get_model_normalizer().normalize(raw_model, brand, keep_profile=keep_profile)


def normalize_with_trace(
    raw_model: Optional[str], brand: Optional[str] = None, keep_profile: bool = False
) -> Tuple[str, Trace]:
    """Normalize and return the per-step debug trace."""
    return get_model_normalizer().normalize_with_trace(raw_model, brand, keep_profile=keep_profile)
