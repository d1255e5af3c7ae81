"""
Exception hierarchy for the boards application.
"""


class BoardsError(Exception):
    """Base class for errors raised by the boards application."""


class ListingOrderError(BoardsError):
    """
    Raised when a listing would be committed before its search run exists.
    """

    def __init__(self, listing_id: str, run_id):
        self.listing_id = listing_id
        self.run_id = run_id
        super().__init__(
            f"Listing {listing_id} references search run {run_id}, "
            f"which has not been saved"
        )


class RuleTableError(BoardsError):
    """Raised when the normalization rule table cannot be loaded."""
