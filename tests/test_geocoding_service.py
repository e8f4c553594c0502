from unittest.mock import MagicMock, patch

import requests

from food_reviews.services.geocoding_service import GeocodingService


def make_service():
    return GeocodingService('https://geocode.example.com/search', 'food-reviews-tests')


def response(status_code=200, payload=None):
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = payload if payload is not None else []
    mock.text = 'error body'
    return mock


@patch('food_reviews.services.geocoding_service.requests.get')
def test_first_match_wins(mock_get, app):
    mock_get.return_value = response(payload=[
        {'lat': '39.1031', 'lon': '-84.5120'},
        {'lat': '0', 'lon': '0'},
    ])

    result = make_service().geocode('Cincinnati')

    assert result == {'success': True, 'latitude': 39.1031, 'longitude': -84.512, 'error': None}
    _, kwargs = mock_get.call_args
    assert kwargs['params']['q'] == 'Cincinnati'
    assert kwargs['params']['format'] == 'json'
    assert kwargs['headers']['User-Agent'] == 'food-reviews-tests'
    assert kwargs['timeout'] == 10


@patch('food_reviews.services.geocoding_service.requests.get')
def test_no_match_is_success_without_coordinates(mock_get, app):
    mock_get.return_value = response(payload=[])
    result = make_service().geocode('nowhere at all')
    assert result['success'] is True
    assert result['latitude'] is None and result['longitude'] is None


@patch('food_reviews.services.geocoding_service.requests.get')
def test_http_error_is_reported(mock_get, app):
    mock_get.return_value = response(status_code=503)
    result = make_service().geocode('Cincinnati')
    assert result['success'] is False
    assert result['error'] == 'API error: 503'


@patch('food_reviews.services.geocoding_service.requests.get')
def test_timeout_is_reported(mock_get, app):
    mock_get.side_effect = requests.exceptions.Timeout()
    result = make_service().geocode('Cincinnati')
    assert result == {'success': False, 'latitude': None, 'longitude': None, 'error': 'Request timed out'}


@patch('food_reviews.services.geocoding_service.requests.get')
def test_blank_address_skips_lookup(mock_get, app):
    assert make_service().geocode('   ')['latitude'] is None
    mock_get.assert_not_called()


@patch('food_reviews.services.geocoding_service.requests.get')
def test_geocode_api_requires_admin(mock_get, admin_client):
    mock_get.return_value = response(payload=[{'lat': '1.5', 'lon': '2.5'}])

    data = admin_client.get('/api/geocode?q=Somewhere').get_json()
    assert data['latitude'] == 1.5

    with admin_client.session_transaction() as sess:
        sess.clear()
    assert admin_client.get('/api/geocode?q=Somewhere').status_code == 401
