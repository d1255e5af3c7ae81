"""
Django models for the snowboard catalog.

Models: SearchRun, Board, Listing, SpecSource, SpecCache

Board rows are keyed by the canonical board key (``brand|model|gender``);
everything else hangs off that key. SpecSource is the append-only provenance
log that spec resolution reads back; SpecCache holds the one primary spec per
board that incremental ingestion maintains.
"""

import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


class BoardProfile(models.TextChoices):
    """Camber profile families."""

    CAMBER = "camber", "Camber"
    ROCKER = "rocker", "Rocker"
    FLAT = "flat", "Flat"
    HYBRID_CAMBER = "hybrid_camber", "Hybrid Camber"
    HYBRID_ROCKER = "hybrid_rocker", "Hybrid Rocker"


class BoardShape(models.TextChoices):
    """Board outline shapes."""

    TRUE_TWIN = "true_twin", "True Twin"
    DIRECTIONAL_TWIN = "directional_twin", "Directional Twin"
    DIRECTIONAL = "directional", "Directional"
    TAPERED = "tapered", "Tapered"


class BoardCategory(models.TextChoices):
    """Riding categories."""

    ALL_MOUNTAIN = "all_mountain", "All Mountain"
    FREESTYLE = "freestyle", "Freestyle"
    FREERIDE = "freeride", "Freeride"
    POWDER = "powder", "Powder"
    PARK = "park", "Park"


class AbilityLevel(models.TextChoices):
    """Rider ability levels, in ascending order."""

    BEGINNER = "beginner", "Beginner"
    INTERMEDIATE = "intermediate", "Intermediate"
    ADVANCED = "advanced", "Advanced"
    EXPERT = "expert", "Expert"


class Availability(models.TextChoices):
    """Stock status of a listing."""

    IN_STOCK = "in_stock", "In Stock"
    LOW_STOCK = "low_stock", "Low Stock"
    OUT_OF_STOCK = "out_of_stock", "Out of Stock"
    UNKNOWN = "unknown", "Unknown"


class ListingCondition(models.TextChoices):
    """Condition of the item being sold."""

    NEW = "new", "New"
    BLEMISHED = "blemished", "Blemished"
    CLOSEOUT = "closeout", "Closeout"
    USED = "used", "Used"
    UNKNOWN = "unknown", "Unknown"


class GenderTarget(models.TextChoices):
    """Gender bucket of a board key."""

    WOMENS = "womens", "Women's"
    KIDS = "kids", "Kids"
    UNISEX = "unisex", "Unisex"


terrain_validators = [MinValueValidator(1), MaxValueValidator(3)]


class SearchRun(models.Model):
    """
    One search/scrape run.

    Listings are price observations for a run, so the run row must exist
    before any of its listings is written.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(default=timezone.now)
    constraints = models.JSONField(
        default=dict, blank=True, help_text="Search constraints the run was made with"
    )
    board_count = models.IntegerField(default=0)
    retailers_queried = models.CharField(
        max_length=500, blank=True, help_text="Comma-separated retailer names"
    )
    duration_ms = models.IntegerField(default=0)

    class Meta:
        db_table = "search_runs"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Run {self.id} ({self.board_count} boards)"


class Board(models.Model):
    """A canonical board model, one per board key."""

    board_key = models.CharField(max_length=255, primary_key=True)
    brand = models.CharField(max_length=100)
    model = models.CharField(max_length=255)
    year = models.IntegerField(null=True, blank=True)

    # Specs
    flex = models.FloatField(null=True, blank=True, help_text="1-10, soft to stiff")
    profile = models.CharField(
        max_length=20, choices=BoardProfile.choices, null=True, blank=True
    )
    shape = models.CharField(max_length=20, choices=BoardShape.choices, null=True, blank=True)
    category = models.CharField(
        max_length=20, choices=BoardCategory.choices, null=True, blank=True
    )

    # Terrain scores (1-3)
    terrain_piste = models.IntegerField(null=True, blank=True, validators=terrain_validators)
    terrain_powder = models.IntegerField(null=True, blank=True, validators=terrain_validators)
    terrain_park = models.IntegerField(null=True, blank=True, validators=terrain_validators)
    terrain_freeride = models.IntegerField(null=True, blank=True, validators=terrain_validators)
    terrain_freestyle = models.IntegerField(null=True, blank=True, validators=terrain_validators)

    ability_level_min = models.CharField(
        max_length=20, choices=AbilityLevel.choices, null=True, blank=True
    )
    ability_level_max = models.CharField(
        max_length=20, choices=AbilityLevel.choices, null=True, blank=True
    )

    msrp_usd = models.FloatField(null=True, blank=True)
    manufacturer_url = models.URLField(max_length=2000, null=True, blank=True)
    description = models.TextField(null=True, blank=True)

    # Metadata
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    def save(self, *args, **kwargs):
        self.updated_at = timezone.now()
        super().save(*args, **kwargs)

    class Meta:
        db_table = "boards"
        ordering = ["brand", "model"]
        indexes = [
            models.Index(fields=["brand"], name="boards_brand_idx"),
            models.Index(fields=["category"], name="boards_category_idx"),
        ]

    def __str__(self):
        return f"{self.brand} {self.model} ({self.gender})"

    @property
    def gender(self) -> str:
        """Gender bucket, taken from the key suffix."""
        return self.board_key.rsplit("|", 1)[-1]

    @property
    def terrain_scores(self):
        return {
            "piste": self.terrain_piste,
            "powder": self.terrain_powder,
            "park": self.terrain_park,
            "freeride": self.terrain_freeride,
            "freestyle": self.terrain_freestyle,
        }


class Listing(models.Model):
    """
    One retailer offer for a board, observed during a search run.

    The id is a stable hash of retailer, url and length so re-scrapes of the
    same offer update rather than duplicate.
    """

    id = models.CharField(max_length=16, primary_key=True)
    board = models.ForeignKey(
        Board, on_delete=models.CASCADE, related_name="listings", db_column="board_key"
    )
    run = models.ForeignKey(SearchRun, on_delete=models.CASCADE, related_name="listings")

    retailer = models.CharField(max_length=100)
    region = models.CharField(max_length=10, default="US")
    url = models.URLField(max_length=2000)
    image_url = models.URLField(max_length=2000, null=True, blank=True)

    length_cm = models.FloatField(null=True, blank=True)
    width_mm = models.FloatField(null=True, blank=True)

    # Pricing
    currency = models.CharField(max_length=3, default="USD")
    original_price = models.FloatField(null=True, blank=True)
    sale_price = models.FloatField()
    original_price_usd = models.FloatField(null=True, blank=True)
    sale_price_usd = models.FloatField()
    discount_percent = models.IntegerField(null=True, blank=True)

    availability = models.CharField(
        max_length=20, choices=Availability.choices, default=Availability.UNKNOWN
    )
    condition = models.CharField(
        max_length=20, choices=ListingCondition.choices, default=ListingCondition.NEW
    )
    gender = models.CharField(
        max_length=10, choices=GenderTarget.choices, default=GenderTarget.UNISEX
    )
    stock_count = models.IntegerField(null=True, blank=True)
    combo_contents = models.CharField(max_length=500, null=True, blank=True)

    scraped_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "listings"
        ordering = ["sale_price_usd"]
        indexes = [
            models.Index(fields=["board", "run"], name="listings_board_run_idx"),
            models.Index(fields=["retailer"], name="listings_retailer_idx"),
        ]

    def __str__(self):
        return f"{self.retailer}: {self.board_id} @ {self.sale_price_usd}"


class SpecSource(models.Model):
    """
    Per-field provenance: what one source said about one board field.

    Append-only. Several rows for the same (board, field) are expected; that
    is how disagreement between sources is detected.
    """

    board_key = models.CharField(max_length=255, db_index=True)
    field_name = models.CharField(max_length=100)
    source = models.CharField(
        max_length=100, help_text="Namespaced source id, e.g. manufacturer:burton"
    )
    value = models.TextField()
    source_url = models.URLField(max_length=2000, null=True, blank=True)
    inserted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "spec_sources"
        ordering = ["inserted_at", "id"]
        indexes = [
            models.Index(fields=["board_key", "field_name"], name="spec_sources_key_field_idx"),
        ]
        verbose_name = "Spec Source"
        verbose_name_plural = "Spec Sources"

    def __str__(self):
        return f"{self.board_key}.{self.field_name} <- {self.source}"


class SpecCache(models.Model):
    """The primary cached spec for a board, with the source it came from."""

    board_key = models.CharField(max_length=255, primary_key=True)
    brand = models.CharField(max_length=100, blank=True)
    model = models.CharField(max_length=255, blank=True)
    year = models.IntegerField(null=True, blank=True)
    flex = models.FloatField(null=True, blank=True)
    profile = models.CharField(max_length=20, null=True, blank=True)
    shape = models.CharField(max_length=20, null=True, blank=True)
    category = models.CharField(max_length=20, null=True, blank=True)
    msrp_usd = models.FloatField(null=True, blank=True)
    source = models.CharField(max_length=100)
    source_url = models.URLField(max_length=2000, null=True, blank=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "spec_cache"
        verbose_name = "Spec Cache Entry"
        verbose_name_plural = "Spec Cache"

    def __str__(self):
        return f"{self.board_key} ({self.source})"
