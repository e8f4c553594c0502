from unittest.mock import patch

import pytest

from food_reviews.errors import StoreError
from food_reviews.models import QrScan
from food_reviews.utils.user_agent import client_ip, parse_user_agent

IPHONE_SAFARI = ('Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 '
                 '(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1')
WINDOWS_EDGE = ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) '
                'Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0')
ANDROID_CHROME = ('Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 (KHTML, like Gecko) '
                  'Chrome/120.0.0.0 Mobile Safari/537.36')
IPAD_SAFARI = ('Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) AppleWebKit/605.1.15 '
               '(KHTML, like Gecko) Version/17.0 Safari/604.1')
MAC_FIREFOX = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 14.0; rv:121.0) Gecko/20100101 Firefox/121.0'


@pytest.mark.parametrize('user_agent, expected', [
    (IPHONE_SAFARI, ('iOS', 'Safari', 'Mobile')),
    (WINDOWS_EDGE, ('Windows', 'Edge', 'Desktop')),
    (ANDROID_CHROME, ('Android', 'Chrome', 'Mobile')),
    (IPAD_SAFARI, ('iPadOS', 'Safari', 'Tablet')),
    (MAC_FIREFOX, ('macOS', 'Firefox', 'Desktop')),
    ('', ('Unknown', 'Unknown', 'Desktop')),
    (None, ('Unknown', 'Unknown', 'Desktop')),
])
def test_parse_user_agent(user_agent, expected):
    assert parse_user_agent(user_agent) == expected


def test_client_ip_prefers_first_forwarded_address():
    assert client_ip({'X-Forwarded-For': '1.2.3.4, 10.0.0.1'}, '127.0.0.1') == '1.2.3.4'
    assert client_ip({}, '127.0.0.1') == '127.0.0.1'
    assert client_ip({}, None) == 'unknown'


def test_qr_visit_is_recorded_and_redirected(client):
    response = client.get('/qr', headers={'User-Agent': IPHONE_SAFARI, 'X-Forwarded-For': '1.2.3.4'})

    assert response.status_code == 307
    assert response.headers['Location'].endswith('/')

    scan = QrScan.query.one()
    assert scan.ip_address == '1.2.3.4'
    assert scan.operating_system == 'iOS'
    assert scan.browser == 'Safari'
    assert scan.device_type == 'Mobile'
    assert scan.user_agent == IPHONE_SAFARI


def test_qr_redirect_survives_store_failure(client, store):
    with patch.object(store, 'record_qr_scan', side_effect=StoreError('db down')):
        response = client.get('/qr')

    assert response.status_code == 307
    assert QrScan.query.count() == 0


def test_qr_redirect_survives_unexpected_errors(client, services):
    with patch.object(services.qr_scans, 'record', side_effect=RuntimeError('boom')):
        response = client.get('/qr')
    assert response.status_code == 307


def test_dashboard_shows_scan_count(admin_client):
    admin_client.get('/qr')
    admin_client.get('/qr')

    response = admin_client.get('/admin/')
    assert response.status_code == 200
    assert b'QR scans: 2' in response.data
