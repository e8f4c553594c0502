# Business logic services
from flask import current_app

from food_reviews.services.review_store import ReviewStore
from food_reviews.services.review_query import ReviewQuery
from food_reviews.services.likes_service import LikeService
from food_reviews.services.awards_service import AwardService
from food_reviews.services.geocoding_service import GeocodingService
from food_reviews.services.storage_service import StorageService
from food_reviews.services.review_submission import ReviewSubmission
from food_reviews.services.qr_scan_service import QrScanService
from food_reviews.services.email_service import EmailService


class Services:
    """Everything a request handler needs, wired to one store."""

    def __init__(self, store, storage, geocoder, email):
        self.store = store
        self.storage = storage
        self.geocoder = geocoder
        self.email = email
        self.review_query = ReviewQuery(store)
        self.likes = LikeService(store)
        self.awards = AwardService(store)
        self.submission = ReviewSubmission(store, geocoder, storage)
        self.qr_scans = QrScanService(store)


def build_services(app):
    """Construct the app's services from its config and attach them."""
    from food_reviews import db

    store = ReviewStore(db.session)
    storage = StorageService.from_config(app.config)
    if not storage.is_configured():
        app.logger.warning("R2 storage not configured - photo uploads are disabled")

    email = EmailService.from_config(db.session, app.config)
    if not email.is_configured():
        app.logger.warning("Brevo not configured - contact messages will only be stored")

    services = Services(
        store=store,
        storage=storage,
        geocoder=GeocodingService.from_config(app.config),
        email=email,
    )
    app.extensions['food_reviews'] = services
    return services


def get_services() -> Services:
    return current_app.extensions['food_reviews']


__all__ = [
    'Services',
    'build_services',
    'get_services',
    'ReviewStore',
    'ReviewQuery',
    'LikeService',
    'AwardService',
    'GeocodingService',
    'StorageService',
    'ReviewSubmission',
    'QrScanService',
    'EmailService',
]
