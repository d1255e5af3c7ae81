"""
Pytest configuration and fixtures for the boards test suite.
"""

import pytest

from boards.types import ScrapedBoard, ScrapedListing


@pytest.fixture(scope="session")
def django_db_setup(django_db_blocker):
    """Configure the test database and run migrations."""
    from django.core.management import call_command

    with django_db_blocker.unblock():
        call_command("migrate", "--run-syncdb", verbosity=0)


@pytest.fixture(autouse=True)
def clear_lookup_cache():
    """Start every test with an empty local-memory cache."""
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


def make_listing(url, price, length=None, **kwargs):
    return ScrapedListing(url=url, sale_price=price, length_cm=length, **kwargs)


@pytest.fixture
def custom_records():
    """Three retailer Burton Custom listings plus the manufacturer's Custom Camber page."""
    return [
        ScrapedBoard(
            source_id="retailer:evo",
            brand="Burton",
            raw_model_title="Burton Custom Snowboard 2026",
            source_url="https://www.evo.com/burton-custom",
            flex="6/10",
            profile="Camber",
            category="All Mountain",
            listings=[make_listing("https://www.evo.com/burton-custom-155", 599.95, 155)],
        ),
        ScrapedBoard(
            source_id="retailer:rei",
            brand="Burton Snowboards",
            raw_model_title="Custom Snowboard - 158",
            source_url="https://www.rei.com/product/burton-custom",
            flex="Medium",
            listings=[
                make_listing(
                    "https://www.rei.com/product/burton-custom?size=158",
                    549.0,
                    158,
                    original_price=659.0,
                    availability="In Stock",
                )
            ],
        ),
        ScrapedBoard(
            source_id="retailer:backcountry",
            brand="BURTON",
            raw_model_title="Burton Custom 161",
            source_url="https://www.backcountry.com/burton-custom",
            listings=[make_listing("https://www.backcountry.com/burton-custom-161", 629.0, 161)],
        ),
        ScrapedBoard(
            source_id="manufacturer:burton",
            brand="Burton",
            raw_model_title="Custom Camber Snowboard",
            source_url="https://www.burton.com/us/en/p/custom-camber",
            flex="6",
            profile="Camber",
            shape="Directional Twin",
            category="All-Mountain",
            ability_level="Intermediate - Expert",
            msrp_usd=659.95,
            description="The board that started it all.",
        ),
    ]
