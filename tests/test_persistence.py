"""
Tests for run persistence and orphan cleanup.
"""

import uuid

import pytest

from boards.exceptions import ListingOrderError
from boards.services.coalescer import coalesce
from boards.services.persistence import (
    delete_orphan_boards,
    find_orphan_boards,
    persist_result,
    save_boards,
    save_listings,
    save_run,
)


@pytest.mark.django_db
class TestPersistResult:
    def test_writes_run_boards_and_listings(self, custom_records):
        from boards.models import Board, Listing, SearchRun

        run_id = uuid.uuid4()
        result = coalesce(custom_records, record_provenance=False)

        persist_result(result, run_id, retailers_queried=["evo", "rei"], duration_ms=1200)

        run = SearchRun.objects.get(id=run_id)
        assert run.board_count == 2
        assert run.retailers_queried == "evo,rei"
        assert Board.objects.count() == 2
        assert Listing.objects.filter(run=run).count() == 3

        custom = Board.objects.get(board_key="burton|custom|unisex")
        assert custom.gender == "unisex"
        assert custom.terrain_piste == 3
        assert custom.listings.count() == 3

    def test_rerun_updates_instead_of_duplicating(self, custom_records):
        from boards.models import Board, Listing

        result = coalesce(custom_records, record_provenance=False)
        persist_result(result, uuid.uuid4())
        second_run = uuid.uuid4()
        persist_result(result, second_run)

        assert Board.objects.count() == 2
        assert Listing.objects.count() == 3
        assert set(Listing.objects.values_list("run_id", flat=True)) == {second_run}


@pytest.mark.django_db
class TestListingOrder:
    def test_listings_before_run_are_rejected(self, custom_records):
        from boards.models import Listing

        result = coalesce(custom_records, record_provenance=False)
        save_boards(result.boards)
        missing_run = uuid.uuid4()

        with pytest.raises(ListingOrderError) as exc_info:
            save_listings(result.listings, missing_run)

        assert exc_info.value.run_id == missing_run
        assert exc_info.value.listing_id == result.listings[0].id
        assert Listing.objects.count() == 0

    def test_no_listings_is_a_no_op(self):
        assert save_listings([], uuid.uuid4()) == 0

    def test_save_run_is_idempotent(self):
        from boards.models import SearchRun

        run_id = uuid.uuid4()
        save_run(run_id, board_count=1)
        save_run(run_id, board_count=4, constraints={"ability": "expert"})

        run = SearchRun.objects.get(id=run_id)
        assert run.board_count == 4
        assert run.constraints == {"ability": "expert"}


@pytest.mark.django_db
class TestOrphanBoards:
    def test_delete_orphans(self, custom_records):
        from boards.models import Board

        result = coalesce(custom_records, record_provenance=False)
        persist_result(result, uuid.uuid4())

        orphans = list(find_orphan_boards().values_list("board_key", flat=True))
        assert orphans == ["burton|custom camber|unisex"]

        assert delete_orphan_boards() == 1
        assert list(Board.objects.values_list("board_key", flat=True)) == ["burton|custom|unisex"]

    def test_nothing_to_delete(self):
        assert delete_orphan_boards() == 0
