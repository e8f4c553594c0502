from datetime import datetime
from food_reviews import db


class Award(db.Model):
    """A "best of" award category.

    The winner is not stored here: it is the one review whose ``award_ids``
    contains this award's id.
    """
    __tablename__ = 'awards'

    id = db.Column(db.String(64), primary_key=True)  # slug, e.g. 'best-pizza'
    title = db.Column(db.String(100), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'category': self.category,
        }

    def __repr__(self):
        return f'<Award {self.id}>'
