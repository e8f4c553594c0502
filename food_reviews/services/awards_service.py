"""
"Best of" award assignment.

An award's winner is the single review carrying the award id. Saving a
winner clears the id from every review first and then attaches it to the
chosen one, so no award ever ends a save on two reviews.
"""

import re
from typing import Optional
from flask import current_app

from food_reviews.errors import NotFoundError, ValidationError

AWARD_ID_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


def slugify(title: str) -> str:
    return re.sub(r'[^a-z0-9]+', '-', title.lower()).strip('-')


class AwardService:

    def __init__(self, store):
        self.store = store

    def create(self, title: str, category: str, award_id: Optional[str] = None):
        title = (title or '').strip()
        category = (category or '').strip()
        award_id = (award_id or '').strip().lower() or slugify(title)

        errors = {}
        if not title:
            errors['title'] = 'Title is required'
        if not category:
            errors['category'] = 'Category is required'
        if not award_id or not AWARD_ID_PATTERN.match(award_id):
            errors['id'] = 'Award id may only contain letters, numbers and dashes'
        if errors:
            raise ValidationError(errors)

        return self.store.create_award(award_id, title, category)

    def delete(self, award_id: str):
        self.store.delete_award(award_id)

    def winner_of(self, award_id: str):
        holders = self.store.reviews_with_award(award_id)
        return holders[0] if holders else None

    def awards_with_winners(self) -> list:
        """List of (award, winning review or None) pairs."""
        return [(award, self.winner_of(award.id)) for award in self.store.list_awards()]

    def assign(self, award_id: str, review_id: Optional[str]):
        """Make ``review_id`` the only holder of ``award_id`` (None clears it)."""
        if self.store.get_award(award_id) is None:
            raise NotFoundError(f'Award {award_id} not found')
        review_id = review_id or None
        if review_id and self.store.get_review(review_id) is None:
            raise ValidationError({award_id: 'Selected review does not exist'})

        self.store.replace_award_holder(award_id, review_id)
        current_app.logger.info(f"Award {award_id} assigned to {review_id or 'no winner'}")

    def save_assignments(self, assignments: dict):
        """Apply several ``{award_id: review_id or None}`` choices in turn."""
        unknown = [award_id for award_id in assignments if self.store.get_award(award_id) is None]
        if unknown:
            raise ValidationError({award_id: 'Unknown award' for award_id in unknown})
        for award_id, review_id in assignments.items():
            self.assign(award_id, review_id)
