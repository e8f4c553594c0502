import pytest
from flask.globals import _cv_app
from flask.testing import FlaskClient

from food_reviews import create_app, db
from food_reviews.services import get_services


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


class _FreshContextClient(FlaskClient):
    # The app fixture keeps an app context open for the whole test and Flask
    # reuses it for every request; give each request a fresh ``g`` so request
    # state does not leak between requests.
    def open(self, *args, **kwargs):
        app_ctx = _cv_app.get(None)
        if app_ctx is None:
            return super().open(*args, **kwargs)
        saved_g = app_ctx.g
        app_ctx.g = self.application.app_ctx_globals_class()
        try:
            return super().open(*args, **kwargs)
        finally:
            app_ctx.g = saved_g


@pytest.fixture
def client(app):
    app.test_client_class = _FreshContextClient
    return app.test_client()


@pytest.fixture
def admin_client(client):
    with client.session_transaction() as sess:
        sess['admin_authenticated'] = True
    return client


@pytest.fixture
def services(app):
    return get_services()


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def make_review(store):
    def _make(**overrides):
        fields = {
            'name': 'Test Diner',
            'food_eaten': 'Cheeseburger',
            'food_rating': 4,
            'speed_rating': 4,
            'service_rating': 4,
            'price_paid': 20,
            'address': '100 Main St, Cincinnati, OH',
        }
        fields.update(overrides)
        return store.insert_review(fields)
    return _make
