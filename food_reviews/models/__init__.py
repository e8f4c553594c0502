# Import all models here so they're registered with SQLAlchemy
from food_reviews.models.review import Review
from food_reviews.models.like import ReviewLike
from food_reviews.models.award import Award
from food_reviews.models.qr_scan import QrScan
from food_reviews.models.contact_message import ContactMessage
from food_reviews.models.rate_limit import RateLimit

__all__ = ['Review', 'ReviewLike', 'Award', 'QrScan', 'ContactMessage', 'RateLimit']
