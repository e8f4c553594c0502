"""
Admin review form handling.

Order of work for one submit:
1. parse and validate the form (no side effects on failure)
2. resolve the location: parse coordinates, or geocode the address later
3. upload the photo, aborting the submit if the upload fails
4. insert a new review or update the one being edited; a failed save
   deletes the photo just uploaded, a successful edit deletes the photo it
   replaced
"""

from decimal import Decimal, InvalidOperation
from typing import Optional
from flask import current_app

from food_reviews.errors import FoodReviewsError, SubmissionError, ValidationError
from food_reviews.models.review import RATING_FIELDS
from food_reviews.services.storage_service import is_allowed_photo
from food_reviews.utils.coordinates import parse_coordinates

LOCATION_MODES = ('address', 'coordinates')

RATING_LABELS = {
    'food_rating': 'Food rating',
    'speed_rating': 'Speed rating',
    'service_rating': 'Service rating',
}


def parse_review_form(form) -> dict:
    """Turn submitted form values into review fields.

    Raises ValidationError with one message per bad field.
    """
    errors = {}
    fields = {}

    for name, label in (('name', 'Restaurant name'), ('food_eaten', 'Food eaten'), ('address', 'Address')):
        value = (form.get(name) or '').strip()
        if not value:
            errors[name] = f'{label} is required'
        fields[name] = value

    for name in RATING_FIELDS:
        raw = (form.get(name) or '').strip()
        try:
            rating = int(raw)
        except ValueError:
            errors[name] = f'{RATING_LABELS[name]} must be a whole number from 1 to 5'
            continue
        if rating < 1 or rating > 5:
            errors[name] = f'{RATING_LABELS[name]} must be between 1 and 5'
            continue
        fields[name] = rating

    raw_price = (form.get('price_paid') or '').strip() or '0'
    try:
        price = Decimal(raw_price)
        if not price.is_finite() or price < 0:
            raise InvalidOperation
        fields['price_paid'] = price.quantize(Decimal('0.01'))
    except InvalidOperation:
        errors['price_paid'] = 'Price paid must be a number of zero or more'

    location_mode = (form.get('location_type') or 'address').strip()
    if location_mode not in LOCATION_MODES:
        errors['location_type'] = 'Choose address or coordinates'

    fields['description'] = (form.get('description') or '').strip() or None
    fields['cuisine'] = (form.get('cuisine') or '').strip() or None
    fields['curated_pick'] = form.get('curated_pick') in ('on', 'true', '1')

    if errors:
        raise ValidationError(errors)

    fields['location_type'] = location_mode
    return fields


class ReviewSubmission:
    """Creates or edits reviews from the admin form."""

    def __init__(self, store, geocoder, storage):
        self.store = store
        self.geocoder = geocoder
        self.storage = storage

    def submit(self, form, photo=None, review_id: Optional[str] = None):
        """Validate, resolve location, upload, then save.

        Returns the saved Review. Raises ValidationError, SubmissionError,
        NotFoundError or StoreError; nothing is written to the store unless
        every earlier step succeeded.
        """
        fields = parse_review_form(form)
        location_mode = fields.pop('location_type')
        existing = self.store.require_review(review_id) if review_id else None

        latitude = longitude = None
        if location_mode == 'coordinates':
            latitude, longitude = parse_coordinates(fields['address'])

        has_photo = photo is not None and bool(getattr(photo, 'filename', ''))
        if has_photo and not is_allowed_photo(photo.filename):
            raise ValidationError({'photo': 'Invalid file type. Use JPG, PNG, GIF, or WebP.'})

        previous_photo_url = existing.photo_url if existing else None
        if has_photo:
            photo_url = self.storage.upload_file(photo)
            if not photo_url:
                raise SubmissionError('Failed to upload photo')
        else:
            photo_url = (form.get('photo_url') or '').strip() or (existing.photo_url if existing else None)

        if location_mode == 'address':
            if existing is not None and existing.has_location and existing.address == fields['address']:
                latitude, longitude = existing.latitude, existing.longitude
            else:
                geo = self.geocoder.geocode(fields['address'])
                if not geo['success']:
                    current_app.logger.warning(f"Geocoding failed for {fields['address']}: {geo['error']}")
                latitude, longitude = geo['latitude'], geo['longitude']

        fields.update(photo_url=photo_url, latitude=latitude, longitude=longitude)

        try:
            if existing is not None:
                saved = self.store.update_review(existing.id, fields)
            else:
                saved = self.store.insert_review(fields)
        except FoodReviewsError:
            if has_photo:
                self.storage.delete_file(photo_url)
            raise

        if has_photo and previous_photo_url and previous_photo_url != photo_url:
            self.storage.delete_file(previous_photo_url)
        return saved
