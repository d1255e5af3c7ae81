"""
Migration: Initial snowboard catalog schema.

Creates search_runs, boards, listings, spec_sources and spec_cache.
"""

import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

PROFILE_CHOICES = [
    ("camber", "Camber"),
    ("rocker", "Rocker"),
    ("flat", "Flat"),
    ("hybrid_camber", "Hybrid Camber"),
    ("hybrid_rocker", "Hybrid Rocker"),
]

SHAPE_CHOICES = [
    ("true_twin", "True Twin"),
    ("directional_twin", "Directional Twin"),
    ("directional", "Directional"),
    ("tapered", "Tapered"),
]

CATEGORY_CHOICES = [
    ("all_mountain", "All Mountain"),
    ("freestyle", "Freestyle"),
    ("freeride", "Freeride"),
    ("powder", "Powder"),
    ("park", "Park"),
]

ABILITY_CHOICES = [
    ("beginner", "Beginner"),
    ("intermediate", "Intermediate"),
    ("advanced", "Advanced"),
    ("expert", "Expert"),
]


def terrain_field():
    return models.IntegerField(
        blank=True,
        null=True,
        validators=[
            django.core.validators.MinValueValidator(1),
            django.core.validators.MaxValueValidator(3),
        ],
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SearchRun",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "constraints",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Search constraints the run was made with",
                    ),
                ),
                ("board_count", models.IntegerField(default=0)),
                (
                    "retailers_queried",
                    models.CharField(
                        blank=True, help_text="Comma-separated retailer names", max_length=500
                    ),
                ),
                ("duration_ms", models.IntegerField(default=0)),
            ],
            options={
                "db_table": "search_runs",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Board",
            fields=[
                (
                    "board_key",
                    models.CharField(max_length=255, primary_key=True, serialize=False),
                ),
                ("brand", models.CharField(max_length=100)),
                ("model", models.CharField(max_length=255)),
                ("year", models.IntegerField(blank=True, null=True)),
                (
                    "flex",
                    models.FloatField(blank=True, help_text="1-10, soft to stiff", null=True),
                ),
                (
                    "profile",
                    models.CharField(
                        blank=True, choices=PROFILE_CHOICES, max_length=20, null=True
                    ),
                ),
                (
                    "shape",
                    models.CharField(blank=True, choices=SHAPE_CHOICES, max_length=20, null=True),
                ),
                (
                    "category",
                    models.CharField(
                        blank=True, choices=CATEGORY_CHOICES, max_length=20, null=True
                    ),
                ),
                ("terrain_piste", terrain_field()),
                ("terrain_powder", terrain_field()),
                ("terrain_park", terrain_field()),
                ("terrain_freeride", terrain_field()),
                ("terrain_freestyle", terrain_field()),
                (
                    "ability_level_min",
                    models.CharField(
                        blank=True, choices=ABILITY_CHOICES, max_length=20, null=True
                    ),
                ),
                (
                    "ability_level_max",
                    models.CharField(
                        blank=True, choices=ABILITY_CHOICES, max_length=20, null=True
                    ),
                ),
                ("msrp_usd", models.FloatField(blank=True, null=True)),
                ("manufacturer_url", models.URLField(blank=True, max_length=2000, null=True)),
                ("description", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "boards",
                "ordering": ["brand", "model"],
                "indexes": [
                    models.Index(fields=["brand"], name="boards_brand_idx"),
                    models.Index(fields=["category"], name="boards_category_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Listing",
            fields=[
                (
                    "id",
                    models.CharField(max_length=16, primary_key=True, serialize=False),
                ),
                ("retailer", models.CharField(max_length=100)),
                ("region", models.CharField(default="US", max_length=10)),
                ("url", models.URLField(max_length=2000)),
                ("image_url", models.URLField(blank=True, max_length=2000, null=True)),
                ("length_cm", models.FloatField(blank=True, null=True)),
                ("width_mm", models.FloatField(blank=True, null=True)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("original_price", models.FloatField(blank=True, null=True)),
                ("sale_price", models.FloatField()),
                ("original_price_usd", models.FloatField(blank=True, null=True)),
                ("sale_price_usd", models.FloatField()),
                ("discount_percent", models.IntegerField(blank=True, null=True)),
                (
                    "availability",
                    models.CharField(
                        choices=[
                            ("in_stock", "In Stock"),
                            ("low_stock", "Low Stock"),
                            ("out_of_stock", "Out of Stock"),
                            ("unknown", "Unknown"),
                        ],
                        default="unknown",
                        max_length=20,
                    ),
                ),
                (
                    "condition",
                    models.CharField(
                        choices=[
                            ("new", "New"),
                            ("blemished", "Blemished"),
                            ("closeout", "Closeout"),
                            ("used", "Used"),
                            ("unknown", "Unknown"),
                        ],
                        default="new",
                        max_length=20,
                    ),
                ),
                (
                    "gender",
                    models.CharField(
                        choices=[
                            ("womens", "Women's"),
                            ("kids", "Kids"),
                            ("unisex", "Unisex"),
                        ],
                        default="unisex",
                        max_length=10,
                    ),
                ),
                ("stock_count", models.IntegerField(blank=True, null=True)),
                ("combo_contents", models.CharField(blank=True, max_length=500, null=True)),
                ("scraped_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "board",
                    models.ForeignKey(
                        db_column="board_key",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="listings",
                        to="boards.board",
                    ),
                ),
                (
                    "run",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="listings",
                        to="boards.searchrun",
                    ),
                ),
            ],
            options={
                "db_table": "listings",
                "ordering": ["sale_price_usd"],
                "indexes": [
                    models.Index(fields=["board", "run"], name="listings_board_run_idx"),
                    models.Index(fields=["retailer"], name="listings_retailer_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SpecSource",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("board_key", models.CharField(db_index=True, max_length=255)),
                ("field_name", models.CharField(max_length=100)),
                (
                    "source",
                    models.CharField(
                        help_text="Namespaced source id, e.g. manufacturer:burton",
                        max_length=100,
                    ),
                ),
                ("value", models.TextField()),
                ("source_url", models.URLField(blank=True, max_length=2000, null=True)),
                ("inserted_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "verbose_name": "Spec Source",
                "verbose_name_plural": "Spec Sources",
                "db_table": "spec_sources",
                "ordering": ["inserted_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["board_key", "field_name"], name="spec_sources_key_field_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SpecCache",
            fields=[
                (
                    "board_key",
                    models.CharField(max_length=255, primary_key=True, serialize=False),
                ),
                ("brand", models.CharField(blank=True, max_length=100)),
                ("model", models.CharField(blank=True, max_length=255)),
                ("year", models.IntegerField(blank=True, null=True)),
                ("flex", models.FloatField(blank=True, null=True)),
                ("profile", models.CharField(blank=True, max_length=20, null=True)),
                ("shape", models.CharField(blank=True, max_length=20, null=True)),
                ("category", models.CharField(blank=True, max_length=20, null=True)),
                ("msrp_usd", models.FloatField(blank=True, null=True)),
                ("source", models.CharField(max_length=100)),
                ("source_url", models.URLField(blank=True, max_length=2000, null=True)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "verbose_name": "Spec Cache Entry",
                "verbose_name_plural": "Spec Cache",
                "db_table": "spec_cache",
            },
        ),
    ]
