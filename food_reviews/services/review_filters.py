"""
Client-facing filters over an already sorted list of reviews.

All predicates are combined with AND. A review whose field is missing is
never excluded by the filter on that field.
"""

from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import NamedTuple, Optional

CUISINE_OPTIONS = [
    'Italian',
    'Mexican',
    'Chinese',
    'American',
    'Japanese',
    'Dessert',
    'Coffee',
    'Pizza',
    'Seafood',
    'Steak',
    'Alternative',
    'Breakfast',
    'Sandwiches',
    'Sushi',
    'Thai',
]


class FilterCriteria(NamedTuple):
    search: Optional[str] = None
    cuisine: Optional[str] = None
    max_price: Optional[Decimal] = None
    curated_only: bool = False

    @classmethod
    def from_args(cls, args):
        """Build criteria from request query args; bad values count as unset."""
        max_price = None
        raw_price = (args.get('max_price') or '').strip()
        if raw_price:
            try:
                max_price = Decimal(raw_price)
            except InvalidOperation:
                max_price = None
            if max_price is not None and not max_price.is_finite():
                max_price = None

        curated = (args.get('curated') or '').strip().lower()
        return cls(
            search=(args.get('q') or '').strip() or None,
            cuisine=(args.get('cuisine') or '').strip() or None,
            max_price=max_price,
            curated_only=curated in ('1', 'true', 'on', 'yes'),
        )

    @property
    def is_empty(self):
        return not (self.search or self.cuisine or self.max_price is not None or self.curated_only)


def _matches(review, criteria: FilterCriteria) -> bool:
    if criteria.search and review.name is not None:
        if criteria.search.lower() not in review.name.lower():
            return False
    if criteria.cuisine and review.cuisine is not None:
        if review.cuisine != criteria.cuisine:
            return False
    if criteria.max_price is not None and review.price_paid is not None:
        if Decimal(str(review.price_paid)) > criteria.max_price:
            return False
    if criteria.curated_only and review.curated_pick is not None:
        if not review.curated_pick:
            return False
    return True


def filter_reviews(reviews, criteria: FilterCriteria) -> list:
    """Return the reviews matching ``criteria``, in their original order."""
    return [review for review in reviews if _matches(review, criteria)]


def highest_price(reviews, default=Decimal('100')):
    """Upper bound for the price slider, rounded up to a whole dollar."""
    prices = [Decimal(str(r.price_paid)) for r in reviews if r.price_paid is not None]
    if not prices:
        return default
    return max(prices).to_integral_value(rounding=ROUND_CEILING)
