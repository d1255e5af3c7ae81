"""
Django admin configuration for snowboard catalog models.
"""

from django.contrib import admin

from boards.models import Board, Listing, SearchRun, SpecCache, SpecSource


class ListingInline(admin.TabularInline):
    model = Listing
    extra = 0
    fields = ["retailer", "length_cm", "sale_price_usd", "availability", "condition", "url"]
    readonly_fields = fields
    show_change_link = True


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    """Admin interface for canonical boards."""

    list_display = [
        "board_key",
        "brand",
        "model",
        "year",
        "profile",
        "category",
        "flex",
        "msrp_usd",
        "updated_at",
    ]
    list_filter = ["brand", "profile", "shape", "category"]
    search_fields = ["board_key", "brand", "model"]
    ordering = ["brand", "model"]
    inlines = [ListingInline]
    fieldsets = (
        ("Identity", {"fields": ("board_key", "brand", "model", "year")}),
        ("Specs", {"fields": ("flex", "profile", "shape", "category", "ability_level_min", "ability_level_max")}),
        (
            "Terrain",
            {
                "fields": (
                    "terrain_piste",
                    "terrain_powder",
                    "terrain_park",
                    "terrain_freeride",
                    "terrain_freestyle",
                )
            },
        ),
        ("Manufacturer", {"fields": ("msrp_usd", "manufacturer_url", "description")}),
        ("Metadata", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    """Admin interface for retailer listings."""

    list_display = [
        "id",
        "board",
        "retailer",
        "length_cm",
        "sale_price_usd",
        "discount_percent",
        "availability",
        "condition",
        "scraped_at",
    ]
    list_filter = ["retailer", "availability", "condition", "gender", "region"]
    search_fields = ["board__board_key", "url"]
    raw_id_fields = ["board", "run"]
    ordering = ["-scraped_at"]


@admin.register(SearchRun)
class SearchRunAdmin(admin.ModelAdmin):
    """Admin interface for search runs."""

    list_display = ["id", "created_at", "board_count", "retailers_queried", "duration_ms"]
    ordering = ["-created_at"]


@admin.register(SpecSource)
class SpecSourceAdmin(admin.ModelAdmin):
    """Admin interface for spec provenance. Rows are append-only."""

    list_display = ["board_key", "field_name", "source", "value", "inserted_at"]
    list_filter = ["field_name", "source"]
    search_fields = ["board_key", "field_name", "value"]
    ordering = ["-inserted_at"]

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(SpecCache)
class SpecCacheAdmin(admin.ModelAdmin):
    """Admin interface for the spec cache."""

    list_display = ["board_key", "source", "flex", "profile", "shape", "category", "updated_at"]
    list_filter = ["source"]
    search_fields = ["board_key"]
    ordering = ["board_key"]
