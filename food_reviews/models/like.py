from datetime import datetime
from food_reviews import db


class ReviewLike(db.Model):
    """An anonymous visitor's like on a review."""
    __tablename__ = 'review_likes'

    id = db.Column(db.Integer, primary_key=True)
    review_id = db.Column(db.String(36), db.ForeignKey('food_reviews.id', ondelete='CASCADE'), nullable=False, index=True)
    viewer_id = db.Column(db.String(36), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Unique constraint: one like per viewer per review
    __table_args__ = (
        db.UniqueConstraint('review_id', 'viewer_id', name='unique_review_like'),
    )

    def __repr__(self):
        return f'<ReviewLike review={self.review_id} viewer={self.viewer_id}>'
