"""
Data access for reviews, likes, awards and QR scans.

One ``ReviewStore`` is built per application (see ``build_services``) around
the SQLAlchemy session and passed to every component that touches the
database. Every write commits exactly once; database failures are rolled back
and re-raised as ``StoreError``.
"""

from typing import Optional
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from food_reviews.errors import NotFoundError, StoreError, ValidationError
from food_reviews.models import Award, QrScan, Review, ReviewLike

REVIEW_ORDER_COLUMNS = {
    'name': func.lower(Review.name),
    'food_rating': Review.food_rating,
    'speed_rating': Review.speed_rating,
    'service_rating': Review.service_rating,
    'price_paid': Review.price_paid,
    'created_at': Review.created_at,
}


class ReviewStore:
    """Explicit handle on the review database."""

    def __init__(self, session):
        self.session = session

    def _commit(self, action: str):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"Store error while trying to {action}: {e}")
            raise StoreError(f'Failed to {action}') from e

    def _read(self, action: str, query_fn):
        try:
            return query_fn()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"Store error while trying to {action}: {e}")
            raise StoreError(f'Failed to {action}') from e

    # ============== REVIEWS ==============

    def select_reviews(self, order_by: str = 'created_at', ascending: bool = False) -> list:
        """All reviews ordered by one column, ties broken by id."""
        if order_by not in REVIEW_ORDER_COLUMNS:
            raise ValidationError({'sort': f'Cannot sort by {order_by}'})
        column = REVIEW_ORDER_COLUMNS[order_by]
        ordering = column.asc() if ascending else column.desc()

        return self._read('load reviews', lambda: (
            self.session.query(Review).order_by(ordering, Review.id.asc()).all()
        ))

    def get_review(self, review_id: str) -> Optional[Review]:
        return self._read('load review', lambda: self.session.get(Review, review_id))

    def require_review(self, review_id: str) -> Review:
        review = self.get_review(review_id)
        if review is None:
            raise NotFoundError(f'Review {review_id} not found')
        return review

    def insert_review(self, fields: dict) -> Review:
        review = Review(**fields)
        review.check_invariants()
        self.session.add(review)
        self._commit('save review')
        current_app.logger.info(f"Review created: {review.id} ({review.name})")
        return review

    def update_review(self, review_id: str, fields: dict) -> Review:
        review = self.require_review(review_id)
        try:
            for key, value in fields.items():
                setattr(review, key, value)
            review.check_invariants()
        except Exception:
            # Leave the identity map as it was in the database
            self.session.rollback()
            raise
        self._commit('save review')
        current_app.logger.info(f"Review updated: {review.id} ({review.name})")
        return review

    def delete_review(self, review_id: str):
        """Delete a review together with its likes.

        Award tags live on the review row, so any award it held is left
        without a winner.
        """
        review = self.require_review(review_id)
        # Likes go with it through the relationship cascade
        self.session.delete(review)
        self._commit('delete review')
        current_app.logger.info(f"Review deleted: {review_id}")

    # ============== LIKES ==============

    def count_likes(self, review_id: str) -> int:
        return self._read('count likes', lambda: (
            self.session.query(ReviewLike).filter_by(review_id=review_id).count()
        ))

    def has_liked(self, review_id: str, viewer_id: str) -> bool:
        return self._read('load like', lambda: (
            self.session.query(ReviewLike).filter_by(review_id=review_id, viewer_id=viewer_id).first()
        )) is not None

    def like_counts(self, review_ids) -> dict:
        """Like count per review id, in one grouped query."""
        if not review_ids:
            return {}
        rows = self._read('count likes', lambda: (
            self.session.query(ReviewLike.review_id, func.count(ReviewLike.id))
            .filter(ReviewLike.review_id.in_(review_ids))
            .group_by(ReviewLike.review_id)
            .all()
        ))
        return {review_id: count for review_id, count in rows}

    def liked_review_ids(self, viewer_id: str, review_ids) -> set:
        if not review_ids:
            return set()
        rows = self._read('load likes', lambda: (
            self.session.query(ReviewLike.review_id)
            .filter(ReviewLike.viewer_id == viewer_id, ReviewLike.review_id.in_(review_ids))
            .all()
        ))
        return {row[0] for row in rows}

    def add_like(self, review_id: str, viewer_id: str) -> bool:
        """Insert the join row. Returns False if it already existed."""
        self.require_review(review_id)
        self.session.add(ReviewLike(review_id=review_id, viewer_id=viewer_id))
        try:
            self.session.commit()
        except IntegrityError:
            # Another process inserted the same pair first
            self.session.rollback()
            return False
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"Store error while trying to save like: {e}")
            raise StoreError('Failed to save like') from e
        return True

    def remove_like(self, review_id: str, viewer_id: str) -> bool:
        """Delete the join row. Returns False if there was nothing to delete."""
        like = self._read('load like', lambda: (
            self.session.query(ReviewLike).filter_by(review_id=review_id, viewer_id=viewer_id).first()
        ))
        if like is None:
            return False
        self.session.delete(like)
        self._commit('remove like')
        return True

    # ============== AWARDS ==============

    def list_awards(self) -> list:
        return self._read('load awards', lambda: (
            self.session.query(Award).order_by(Award.created_at.asc(), Award.id.asc()).all()
        ))

    def get_award(self, award_id: str) -> Optional[Award]:
        return self._read('load award', lambda: self.session.get(Award, award_id))

    def create_award(self, award_id: str, title: str, category: str) -> Award:
        if self.get_award(award_id) is not None:
            raise ValidationError({'id': f'An award with id {award_id} already exists'})
        award = Award(id=award_id, title=title, category=category)
        self.session.add(award)
        self._commit('create award')
        current_app.logger.info(f"Award created: {award_id}")
        return award

    def delete_award(self, award_id: str):
        """Delete an award and strip its id from every review."""
        award = self.get_award(award_id)
        if award is None:
            raise NotFoundError(f'Award {award_id} not found')
        for review in self.reviews_with_award(award_id):
            review.award_ids = [a for a in review.award_ids if a != award_id]
        self.session.delete(award)
        self._commit('delete award')
        current_app.logger.info(f"Award deleted: {award_id}")

    def reviews_with_award(self, award_id: str) -> list:
        # award_ids is a JSON list; containment queries differ per database,
        # and the table is small enough to scan.
        reviews = self._read('load reviews', lambda: self.session.query(Review).all())
        return [review for review in reviews if award_id in (review.award_ids or [])]

    def replace_award_holder(self, award_id: str, review_id: Optional[str]):
        """Clear ``award_id`` from all reviews, then tag ``review_id`` with it.

        Both phases are flushed in a single commit.
        """
        winner = self.require_review(review_id) if review_id else None

        for review in self.reviews_with_award(award_id):
            review.award_ids = [a for a in review.award_ids if a != award_id]
        if winner is not None:
            winner.award_ids = list(winner.award_ids or []) + [award_id]

        self._commit('save award')

    # ============== QR SCANS ==============

    def record_qr_scan(self, **fields) -> QrScan:
        scan = QrScan(**fields)
        self.session.add(scan)
        self._commit('record QR scan')
        return scan

    def count_qr_scans(self) -> int:
        return self._read('count QR scans', lambda: self.session.query(QrScan).count())
