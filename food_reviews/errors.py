"""Exception types shared by the store, the services and the routes."""


class FoodReviewsError(Exception):
    """Base class for application errors."""


class ValidationError(FoodReviewsError):
    """User input that cannot be accepted.

    ``errors`` maps form field names to messages so the form can show them
    inline next to the offending inputs.
    """

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = {'__all__': errors}
        self.errors = dict(errors)
        super().__init__('; '.join(f'{field}: {message}' for field, message in self.errors.items()))


class CoordinateFormatError(ValidationError):
    def __init__(self, value):
        self.value = value
        super().__init__({'address': 'Invalid coordinates format. Use 39.20016° N, 84.26138° W'})


class RecordValidationError(FoodReviewsError):
    """A record violates the schema at the store edge."""

    def __init__(self, field, message):
        self.field = field
        super().__init__(f'{field}: {message}')


class StoreError(FoodReviewsError):
    """The backing database rejected or failed an operation."""


class NotFoundError(FoodReviewsError):
    pass


class SubmissionError(FoodReviewsError):
    """A side effect of the admin submission failed (e.g. photo upload)."""
