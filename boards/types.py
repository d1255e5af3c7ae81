"""
In-memory record types shared by the identity, coalescing and ingestion
services.

ScrapedBoard/ScrapedListing are what per-site extractors hand us. They are
produced and consumed once and never persisted. BoardRecord/ListingRecord are
the coalesced output; boards.services.persistence turns them into rows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

TERRAIN_KEYS = ("piste", "powder", "park", "freeride", "freestyle")


def _pick(data: Dict[str, Any], *names, default=None):
    """Return the first key present in data among snake_case/camelCase names."""
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return default


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class BrandIdentifier:
    """Canonical brand. Two identifiers are equal when their canonical names are."""

    raw_input: str = field(compare=False)
    canonical_name: str
    manufacturer_slug: str = field(compare=False, default="default")

    def __str__(self) -> str:
        return self.canonical_name


@dataclass(frozen=True)
class ScrapedListing:
    """One retailer offer as extracted from a product page."""

    url: str
    sale_price: float
    currency: str = "USD"
    original_price: Optional[float] = None
    length_cm: Optional[float] = None
    width_mm: Optional[float] = None
    availability: Optional[str] = None
    condition: Optional[str] = None
    gender: Optional[str] = None
    scraped_at: Optional[datetime] = None
    image_url: Optional[str] = None
    stock_count: Optional[int] = None
    combo_contents: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScrapedListing":
        return cls(
            url=data["url"],
            sale_price=float(_pick(data, "sale_price", "salePrice", default=0)),
            currency=_pick(data, "currency", default="USD"),
            original_price=_pick(data, "original_price", "originalPrice"),
            length_cm=_pick(data, "length_cm", "lengthCm"),
            width_mm=_pick(data, "width_mm", "widthMm"),
            availability=_pick(data, "availability"),
            condition=_pick(data, "condition"),
            gender=_pick(data, "gender"),
            scraped_at=_parse_datetime(_pick(data, "scraped_at", "scrapedAt")),
            image_url=_pick(data, "image_url", "imageUrl"),
            stock_count=_pick(data, "stock_count", "stockCount"),
            combo_contents=_pick(data, "combo_contents", "comboContents"),
        )


@dataclass(frozen=True)
class ScrapedBoard:
    """
    One source's view of one board model.

    source_id is namespaced: "manufacturer:burton", "retailer:evo",
    "review-site:the-good-ride", "llm" or "judgment".
    """

    source_id: str
    brand: Optional[str]
    raw_model_title: Optional[str]
    source_url: str = ""
    gender_hint: Optional[str] = None
    year_hint: Optional[int] = None
    condition_hint: Optional[str] = None
    profile: Optional[str] = None
    shape: Optional[str] = None
    category: Optional[str] = None
    ability_level: Optional[str] = None
    flex: Optional[str] = None
    msrp_usd: Optional[float] = None
    description: Optional[str] = None
    region: str = "US"
    extras: Dict[str, str] = field(default_factory=dict)
    listings: List[ScrapedListing] = field(default_factory=list)

    @property
    def brand_identifier(self) -> BrandIdentifier:
        from boards.identity.brands import canonicalize

        return canonicalize(self.brand)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScrapedBoard":
        """Build from extractor JSON; accepts snake_case or camelCase keys."""
        flex = _pick(data, "flex")
        year = _pick(data, "year_hint", "yearHint", "year")
        return cls(
            source_id=_pick(data, "source_id", "sourceId", "source", default="unknown"),
            brand=_pick(data, "brand"),
            raw_model_title=_pick(data, "raw_model_title", "rawModelTitle", "rawModel", "model"),
            source_url=_pick(data, "source_url", "sourceUrl", default=""),
            gender_hint=_pick(data, "gender_hint", "genderHint", "gender"),
            year_hint=int(year) if year is not None else None,
            condition_hint=_pick(data, "condition_hint", "conditionHint", "condition"),
            profile=_pick(data, "profile"),
            shape=_pick(data, "shape"),
            category=_pick(data, "category"),
            ability_level=_pick(data, "ability_level", "abilityLevel"),
            flex=str(flex) if flex is not None else None,
            msrp_usd=_pick(data, "msrp_usd", "msrpUsd"),
            description=_pick(data, "description"),
            region=_pick(data, "region", default="US"),
            extras={str(k): str(v) for k, v in (_pick(data, "extras", "specs", default={})).items()},
            listings=[ScrapedListing.from_dict(item) for item in data.get("listings") or []],
        )


@dataclass
class ManufacturerSpec:
    """A manufacturer catalog entry delivered to incremental ingestion."""

    brand: str
    model: str
    source_url: str = ""
    year: Optional[int] = None
    flex: Optional[str] = None
    profile: Optional[str] = None
    shape: Optional[str] = None
    category: Optional[str] = None
    msrp_usd: Optional[float] = None
    gender: Optional[str] = None
    description: Optional[str] = None
    extras: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ManufacturerSpec":
        flex = _pick(data, "flex")
        return cls(
            brand=_pick(data, "brand", default=""),
            model=_pick(data, "model", default=""),
            source_url=_pick(data, "source_url", "sourceUrl", default=""),
            year=_pick(data, "year"),
            flex=str(flex) if flex is not None else None,
            profile=_pick(data, "profile"),
            shape=_pick(data, "shape"),
            category=_pick(data, "category"),
            msrp_usd=_pick(data, "msrp_usd", "msrpUsd"),
            gender=_pick(data, "gender"),
            description=_pick(data, "description"),
            extras={str(k): str(v) for k, v in (_pick(data, "extras", default={})).items()},
        )


@dataclass
class SpecSourceEntry:
    """One provenance row: what one source said about one field."""

    field_name: str
    source: str
    value: str
    source_url: Optional[str] = None
    board_key: Optional[str] = None
    inserted_at: Optional[datetime] = None


@dataclass
class SpecFieldInfo:
    """Resolution summary for one spec field (drives the data-source badge)."""

    resolved: Optional[Any]
    resolved_source: str
    agreement: bool
    sources: List[SpecSourceEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resolved": self.resolved,
            "resolved_source": self.resolved_source,
            "agreement": self.agreement,
            "sources": [
                {"source": s.source, "value": s.value, "source_url": s.source_url}
                for s in self.sources
            ],
        }


@dataclass
class ListingRecord:
    """A coalesced listing, ready to persist against a board and a run."""

    id: str
    board_key: str
    retailer: str
    region: str
    url: str
    sale_price: float
    sale_price_usd: float
    currency: str = "USD"
    original_price: Optional[float] = None
    original_price_usd: Optional[float] = None
    discount_percent: Optional[int] = None
    length_cm: Optional[float] = None
    width_mm: Optional[float] = None
    availability: str = "unknown"
    condition: str = "new"
    gender: str = "unisex"
    scraped_at: Optional[datetime] = None
    image_url: Optional[str] = None
    stock_count: Optional[int] = None
    combo_contents: Optional[str] = None


@dataclass
class BoardRecord:
    """A canonical board: one physical model/variant across every source."""

    board_key: str
    brand: str
    model: str
    gender: str
    year: Optional[int] = None
    flex: Optional[float] = None
    profile: Optional[str] = None
    shape: Optional[str] = None
    category: Optional[str] = None
    terrain_scores: Dict[str, Optional[int]] = field(
        default_factory=lambda: {key: None for key in TERRAIN_KEYS}
    )
    ability_level_min: Optional[str] = None
    ability_level_max: Optional[str] = None
    msrp_usd: Optional[float] = None
    manufacturer_url: Optional[str] = None
    description: Optional[str] = None
    listings: List[ListingRecord] = field(default_factory=list)
    spec_sources: Dict[str, SpecFieldInfo] = field(default_factory=dict)

    @property
    def disagreements(self) -> List[str]:
        """Fields whose sources do not agree on a value."""
        return [name for name, info in self.spec_sources.items() if not info.agreement]


@dataclass
class BoardGroup:
    """All scraped records that resolved to the same board key."""

    board_key: str
    brand: str
    model: str
    gender: str
    members: List[ScrapedBoard] = field(default_factory=list)


@dataclass
class CoalesceResult:
    boards: List[BoardRecord] = field(default_factory=list)
    listings: List[ListingRecord] = field(default_factory=list)

    def board(self, board_key: str) -> Optional[BoardRecord]:
        for board in self.boards:
            if board.board_key == board_key:
                return board
        return None


@dataclass
class IngestStats:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
