from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from food_reviews import create_app, db
from food_reviews.models import ContactMessage, RateLimit, Review, ReviewLike


def review_form(**overrides):
    data = {
        'name': 'Camp Washington Chili',
        'food_eaten': '4-way',
        'food_rating': '5',
        'speed_rating': '5',
        'service_rating': '4',
        'price_paid': '9.75',
        'location_type': 'coordinates',
        'address': '39.14096° N, 84.54198° W',
    }
    data.update(overrides)
    return data


def contact_form(**overrides):
    data = {'name': 'Pat', 'email': 'pat@example.com', 'subject': 'Hi', 'message': 'Try the goetta.'}
    data.update(overrides)
    return data


# ============== PUBLIC PAGES ==============

def test_home_page(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'View All Reviews' in response.data


def test_health(client):
    assert client.get('/health').get_json()['status'] == 'healthy'


def test_unknown_route_renders_not_found(client):
    response = client.get('/no/such/page')
    assert response.status_code == 404
    assert b'Oops! Page not found.' in response.data


def test_reviews_page_filters_and_sorts(client, make_review):
    make_review(name='Zeppelin Grill', cuisine='American', price_paid=30)
    make_review(name='Alpine Noodle', cuisine='Asian', price_paid=12)

    everything = client.get('/reviews?sort=name').data
    assert everything.index(b'Alpine Noodle') < everything.index(b'Zeppelin Grill')

    asian = client.get('/reviews?cuisine=Asian').data
    assert b'Alpine Noodle' in asian
    assert b'Zeppelin Grill' not in asian

    cheap = client.get('/reviews?max_price=15').data
    assert b'Zeppelin Grill' not in cheap


def test_reviews_page_empty_filter_message(client, make_review):
    make_review(curated_pick=False)
    response = client.get('/reviews?curated=1')
    assert b'No reviews match your filters' in response.data


def test_default_price_slider_keeps_priciest_review(client, make_review):
    make_review(name='Diner Counter', price_paid='9.00')
    make_review(name='Steak House', price_paid='25.50')

    page = client.get('/reviews').get_data(as_text=True)
    assert 'max="26"' in page

    # The unchanged slider submits its rounded default along with the sort
    resubmitted = client.get('/reviews?sort=name&q=&max_price=26').get_data(as_text=True)
    assert 'Steak House' in resubmitted
    assert 'Diner Counter' in resubmitted


def test_reviews_page_renders_like_state_and_sets_cookie_once(client, make_review):
    first = make_review(name='Liked Place')
    make_review(name='Other Place')
    client.post(f'/api/reviews/{first.id}/like')

    response = client.get('/reviews')
    page = response.get_data(as_text=True)

    assert 'class="like-button liked"' in page
    assert page.count('class="like-button"') == 1
    assert 'viewer_id=' not in response.headers.get('Set-Cookie', '')


def test_first_reviews_visit_mints_one_viewer_cookie(client, make_review):
    make_review(name='One')
    make_review(name='Two')

    response = client.get('/reviews')

    cookies = [value for value in response.headers.getlist('Set-Cookie') if value.startswith('viewer_id=')]
    assert len(cookies) == 1


def test_map_only_lists_located_reviews(client, make_review):
    make_review(name='Pinned Place', latitude=39.1, longitude=-84.5)
    make_review(name='Floating Place')

    response = client.get('/map')
    assert response.status_code == 200
    assert b'Pinned Place' in response.data
    assert b'Floating Place' not in response.data


def test_public_awards_page(client, services, make_review):
    review = make_review(name='Best Burger Joint')
    services.awards.create('Best Burger', 'Burgers', award_id='best-burger')
    services.awards.assign('best-burger', review.id)

    response = client.get('/awards')
    assert b'Best Burger Joint' in response.data


def test_login_shortcut_redirects_to_admin_login(client):
    response = client.get('/login')
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/admin/login')


# ============== ADMIN ==============

def test_admin_pages_require_login(client):
    response = client.get('/admin/')
    assert response.status_code == 302
    assert '/admin/login' in response.headers['Location']


def test_admin_login_and_logout(client):
    bad = client.post('/admin/login', data={'password': 'wrong'})
    assert b'Invalid password' in bad.data

    good = client.post('/admin/login?next=/admin/awards', data={'password': 'test-password'})
    assert good.status_code == 302
    assert good.headers['Location'].endswith('/admin/awards')

    client.get('/admin/logout')
    assert client.get('/admin/').status_code == 302


def test_login_ignores_offsite_next(client):
    response = client.post('/admin/login?next=//evil.example.com', data={'password': 'test-password'})
    assert response.headers['Location'].endswith('/admin/')


def test_admin_creates_review_from_coordinates(admin_client):
    response = admin_client.post('/admin/reviews/new', data=review_form())

    assert response.status_code == 302
    review = Review.query.one()
    assert review.name == 'Camp Washington Chili'
    assert review.latitude == pytest.approx(39.14096)
    assert review.longitude == pytest.approx(-84.54198)


def test_admin_create_rejects_bad_coordinates(admin_client):
    response = admin_client.post('/admin/reviews/new', data=review_form(address='somewhere north'))

    assert response.status_code == 400
    assert b'Invalid coordinates format' in response.data
    assert Review.query.count() == 0


def test_admin_create_reports_missing_fields(admin_client):
    response = admin_client.post('/admin/reviews/new', data=review_form(name=''))
    assert response.status_code == 400
    assert Review.query.count() == 0


def test_admin_edit_form_prefills_review(admin_client, make_review):
    review = make_review(name='Editable Eats')
    response = admin_client.get(f'/admin/reviews/{review.id}/edit')
    assert response.status_code == 200
    assert b'Editable Eats' in response.data


def test_admin_edit_unknown_review_is_404(admin_client):
    assert admin_client.get('/admin/reviews/missing/edit').status_code == 404


def test_admin_delete_removes_review_and_likes(admin_client, store, make_review):
    review = make_review()
    store.add_like(review.id, '7b0f0a52-9a0e-4a39-a64c-1c9b1b0c3d11')

    response = admin_client.post(f'/admin/reviews/{review.id}/delete')

    assert response.status_code == 302
    assert Review.query.count() == 0
    assert ReviewLike.query.count() == 0


def test_admin_saves_award_winners(admin_client, services, make_review):
    review = make_review()
    services.awards.create('Fastest Service', 'Speed', award_id='fastest-service')

    response = admin_client.post('/admin/awards', data={'winner_fastest-service': review.id})

    assert response.status_code == 302
    assert services.awards.winner_of('fastest-service').id == review.id


# ============== API ==============

def test_api_reviews_sets_viewer_cookie_and_like_state(client, make_review, store):
    review = make_review(name='Api Diner')
    store.add_like(review.id, '7b0f0a52-9a0e-4a39-a64c-1c9b1b0c3d11')

    response = client.get('/api/reviews?sort=price_paid')
    data = response.get_json()

    assert 'viewer_id=' in response.headers.get('Set-Cookie', '')
    assert data['success'] is True
    assert data['sort'] == 'price_paid'
    assert data['reviews'][0]['name'] == 'Api Diner'
    assert data['reviews'][0]['likes'] == 1
    assert data['reviews'][0]['liked'] is False


def test_api_like_toggle_round_trip(client, make_review):
    review = make_review()

    liked = client.post(f'/api/reviews/{review.id}/like').get_json()
    assert liked['liked'] is True
    assert liked['likes'] == 1

    status = client.get(f'/api/reviews/{review.id}/likes').get_json()
    assert status['liked'] is True

    unliked = client.post(f'/api/reviews/{review.id}/like').get_json()
    assert unliked['liked'] is False
    assert unliked['likes'] == 0


def test_api_like_unknown_review_is_404(client):
    assert client.post('/api/reviews/missing/like').status_code == 404


def test_api_awards_include_winner(client, services, make_review):
    review = make_review(name='Winner Winner')
    services.awards.create('Best Chili', 'Chili', award_id='best-chili')
    services.awards.assign('best-chili', review.id)

    awards = client.get('/api/awards').get_json()['awards']
    assert awards[0]['id'] == 'best-chili'
    assert awards[0]['winner']['name'] == 'Winner Winner'


# ============== CONTACT ==============

def test_contact_message_stored_when_email_not_configured(client):
    response = client.post('/contact', data=contact_form(), follow_redirects=True)

    assert b'Thanks! Your message was received.' in response.data
    message = ContactMessage.query.one()
    assert message.status == 'not_configured'
    assert message.subject == '[FOOD REVIEW] Hi'


def test_contact_message_sent_through_brevo(client, services):
    services.email.api_key = 'test-key'
    api = MagicMock()
    api.send_transac_email.return_value = MagicMock(message_id='<brevo-1>')
    services.email._api_instance = api

    response = client.post('/contact', data=contact_form(), follow_redirects=True)

    assert b'Message sent!' in response.data
    api.send_transac_email.assert_called_once()
    message = ContactMessage.query.one()
    assert message.status == 'sent'
    assert message.brevo_message_id == '<brevo-1>'


def test_contact_requires_every_field(client):
    response = client.post('/contact', data=contact_form(subject=''), follow_redirects=True)
    assert b'Please fill in every field.' in response.data
    assert ContactMessage.query.count() == 0


def test_contact_is_rate_limited(client):
    for _ in range(5):
        client.post('/contact', data=contact_form())

    response = client.post('/contact', data=contact_form(), follow_redirects=True)

    assert b'Too many messages' in response.data
    assert ContactMessage.query.count() == 5


def test_contact_prunes_expired_rate_limit_records(client):
    stale = RateLimit(key='203.0.113.9', action='contact',
                      timestamp=datetime.utcnow() - timedelta(hours=3))
    db.session.add(stale)
    db.session.commit()

    client.post('/contact', data=contact_form())

    assert RateLimit.query.filter_by(key='203.0.113.9').count() == 0
    assert RateLimit.query.count() == 1


def test_cleanup_old_records_keeps_recent_ones(app):
    db.session.add_all([
        RateLimit(key='a', action='contact', timestamp=datetime.utcnow() - timedelta(minutes=90)),
        RateLimit(key='b', action='contact', timestamp=datetime.utcnow()),
    ])
    db.session.commit()

    assert RateLimit.cleanup_old_records(older_than_minutes=60) == 1
    assert [r.key for r in RateLimit.query.all()] == ['b']


# ============== CONFIG ==============

def test_production_requires_settings(monkeypatch):
    monkeypatch.setenv('RAILWAY_ENVIRONMENT', 'production')
    for name in ('DATABASE_URL', 'SECRET_KEY', 'ADMIN_PASSWORD'):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(RuntimeError, match='Missing required configuration'):
        create_app()
