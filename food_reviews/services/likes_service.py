"""
Anonymous likes on reviews.

A visitor is identified by a random UUID kept in a long-lived cookie, so a
like is a (review id, viewer id) row. Each pair is a two-state machine:
toggling inserts or deletes the row. While one toggle for a pair is being
written, further toggles for the same pair are ignored.
"""

import threading
import uuid
from flask import current_app

VIEWER_COOKIE = 'viewer_id'
VIEWER_COOKIE_MAX_AGE = 60 * 60 * 24 * 365 * 5  # five years


def new_viewer_id() -> str:
    return str(uuid.uuid4())


def is_valid_viewer_id(value) -> bool:
    if not value:
        return False
    try:
        return str(uuid.UUID(value)) == value
    except (ValueError, AttributeError, TypeError):
        return False


class LikeService:
    """Toggles and counts likes through the injected store."""

    def __init__(self, store):
        self.store = store
        self._pending = set()
        self._lock = threading.Lock()

    def status(self, review_id: str, viewer_id: str) -> dict:
        return {
            'review_id': review_id,
            'likes': self.store.count_likes(review_id),
            'liked': self.store.has_liked(review_id, viewer_id),
        }

    def summaries(self, review_ids, viewer_id: str) -> dict:
        """``{review_id: {'likes': n, 'liked': bool}}`` for a page of reviews."""
        review_ids = list(review_ids)
        counts = self.store.like_counts(review_ids)
        liked = self.store.liked_review_ids(viewer_id, review_ids)
        return {
            review_id: {'likes': counts.get(review_id, 0), 'liked': review_id in liked}
            for review_id in review_ids
        }

    def is_pending(self, review_id: str, viewer_id: str) -> bool:
        with self._lock:
            return (review_id, viewer_id) in self._pending

    def toggle(self, review_id: str, viewer_id: str) -> dict:
        """Flip the like state for one viewer.

        Returns the committed state: ``liked``, ``likes`` (never negative) and
        ``ignored`` when another toggle for the same pair was still running.
        Store errors propagate and leave the committed state unchanged.
        """
        key = (review_id, viewer_id)
        with self._lock:
            if key in self._pending:
                ignored = True
            else:
                ignored = False
                self._pending.add(key)

        if ignored:
            current_app.logger.info(f"Ignoring like toggle for review {review_id}: already in flight")
            result = self.status(review_id, viewer_id)
            result['ignored'] = True
            return result

        try:
            if self.store.has_liked(review_id, viewer_id):
                self.store.remove_like(review_id, viewer_id)
                liked = False
            else:
                self.store.add_like(review_id, viewer_id)
                liked = True
            likes = max(0, self.store.count_likes(review_id))
        finally:
            with self._lock:
                self._pending.discard(key)

        return {
            'review_id': review_id,
            'likes': likes,
            'liked': liked,
            'ignored': False,
        }
