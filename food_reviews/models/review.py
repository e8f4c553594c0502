import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation
from sqlalchemy.orm import validates
from food_reviews import db
from food_reviews.errors import RecordValidationError

RATING_FIELDS = ('food_rating', 'speed_rating', 'service_rating')


def _new_id():
    return str(uuid.uuid4())


class Review(db.Model):
    """A dining review of one restaurant visit."""
    __tablename__ = 'food_reviews'

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    name = db.Column(db.String(200), nullable=False)
    food_eaten = db.Column(db.String(300), nullable=False)
    food_rating = db.Column(db.Integer, nullable=False)
    speed_rating = db.Column(db.Integer, nullable=False)
    service_rating = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text, nullable=True)
    price_paid = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    address = db.Column(db.String(300), nullable=False)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    photo_url = db.Column(db.String(500), nullable=True)
    cuisine = db.Column(db.String(50), nullable=True)
    curated_pick = db.Column(db.Boolean, nullable=True, default=False)
    award_ids = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    likes = db.relationship('ReviewLike', backref='review', cascade='all, delete-orphan')

    __table_args__ = (
        db.CheckConstraint('food_rating >= 1 AND food_rating <= 5', name='valid_food_rating'),
        db.CheckConstraint('speed_rating >= 1 AND speed_rating <= 5', name='valid_speed_rating'),
        db.CheckConstraint('service_rating >= 1 AND service_rating <= 5', name='valid_service_rating'),
        db.CheckConstraint('price_paid >= 0', name='non_negative_price'),
    )

    @validates(*RATING_FIELDS)
    def validate_rating(self, key, value):
        if isinstance(value, bool) or not isinstance(value, int):
            raise RecordValidationError(key, 'must be an integer')
        if value < 1 or value > 5:
            raise RecordValidationError(key, 'must be between 1 and 5')
        return value

    @validates('price_paid')
    def validate_price(self, key, value):
        try:
            price = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise RecordValidationError(key, 'must be a number')
        if not price.is_finite() or price < 0:
            raise RecordValidationError(key, 'must be zero or more')
        return price

    @validates('latitude', 'longitude')
    def validate_coordinate(self, key, value):
        if value is None:
            return None
        value = float(value)
        limit = 90 if key == 'latitude' else 180
        if value < -limit or value > limit:
            raise RecordValidationError(key, f'must be between -{limit} and {limit}')
        return value

    @validates('name', 'food_eaten', 'address')
    def validate_required_text(self, key, value):
        if value is None or not str(value).strip():
            raise RecordValidationError(key, 'is required')
        return str(value).strip()

    @validates('award_ids')
    def validate_award_ids(self, key, value):
        value = list(value or [])
        if not all(isinstance(award_id, str) for award_id in value):
            raise RecordValidationError(key, 'must be a list of award ids')
        # Preserve order, drop duplicates
        return list(dict.fromkeys(value))

    def check_invariants(self):
        """Cross-field checks that per-attribute validators cannot see."""
        if (self.latitude is None) != (self.longitude is None):
            raise RecordValidationError('latitude', 'latitude and longitude must be set together')
        for field in RATING_FIELDS:
            if getattr(self, field) is None:
                raise RecordValidationError(field, 'is required')

    @property
    def has_location(self):
        return self.latitude is not None and self.longitude is not None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'food_eaten': self.food_eaten,
            'food_rating': self.food_rating,
            'speed_rating': self.speed_rating,
            'service_rating': self.service_rating,
            'description': self.description,
            'price_paid': float(self.price_paid) if self.price_paid is not None else None,
            'address': self.address,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'photo_url': self.photo_url,
            'cuisine': self.cuisine,
            'curated_pick': bool(self.curated_pick),
            'award_ids': list(self.award_ids or []),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Review {self.name}>'
