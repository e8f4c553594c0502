"""Sorted review reads for the public pages."""

from typing import NamedTuple, Optional
from flask import current_app

from food_reviews.errors import StoreError

DEFAULT_SORT = 'created_at'

# Sort key -> ascending? Ratings and dates put the best/newest first.
SORT_DIRECTIONS = {
    'name': True,
    'food_rating': False,
    'speed_rating': False,
    'service_rating': False,
    'price_paid': True,
    'created_at': False,
}

SORT_LABELS = {
    'created_at': 'Most Recent',
    'name': 'Name (A-Z)',
    'food_rating': 'Food Rating',
    'speed_rating': 'Speed Rating',
    'service_rating': 'Service Rating',
    'price_paid': 'Price (Low to High)',
}


class ReviewQueryResult(NamedTuple):
    reviews: list
    sort_by: str
    error: Optional[str] = None


def normalize_sort(sort_by):
    return sort_by if sort_by in SORT_DIRECTIONS else DEFAULT_SORT


class ReviewQuery:
    """Issues one ordered read against the store per call."""

    def __init__(self, store):
        self.store = store

    def fetch(self, sort_by: str = DEFAULT_SORT) -> ReviewQueryResult:
        sort_by = normalize_sort(sort_by)
        try:
            reviews = self.store.select_reviews(sort_by, ascending=SORT_DIRECTIONS[sort_by])
        except StoreError as e:
            current_app.logger.error(f"Failed to load reviews sorted by {sort_by}: {e}")
            return ReviewQueryResult(reviews=[], sort_by=sort_by, error='Failed to load reviews')
        return ReviewQueryResult(reviews=reviews, sort_by=sort_by)
