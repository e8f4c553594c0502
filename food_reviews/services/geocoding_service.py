"""
Address geocoding via the OpenStreetMap Nominatim search API.

Used by the admin review form to turn a free-text address into map
coordinates. The first match wins; no match is not an error.
"""

import requests
from flask import current_app


class GeocodingService:
    """Service for Nominatim lookups."""

    def __init__(self, search_url: str, user_agent: str, timeout: int = 10):
        self.search_url = search_url
        self.user_agent = user_agent
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(config['GEOCODING_URL'], config['GEOCODING_USER_AGENT'])

    def geocode(self, address: str) -> dict:
        """
        Look up an address.

        Args:
            address: Free-text address (e.g., "123 Main St, Cincinnati, OH")

        Returns:
            dict with 'success', 'latitude', 'longitude' (None when nothing
            matched) and 'error' (if the lookup failed)
        """
        result = {
            'success': True,
            'latitude': None,
            'longitude': None,
            'error': None
        }

        if not address or not address.strip():
            return result

        try:
            response = requests.get(
                self.search_url,
                params={'format': 'json', 'q': address.strip(), 'limit': 1},
                headers={'User-Agent': self.user_agent},
                timeout=self.timeout
            )

            if response.status_code != 200:
                current_app.logger.error(f"Geocoding API error: {response.status_code} - {response.text}")
                result['success'] = False
                result['error'] = f'API error: {response.status_code}'
                return result

            matches = response.json()
            if not matches:
                current_app.logger.info(f"No geocoding match for address: {address}")
                return result

            first = matches[0]
            result['latitude'] = float(first['lat'])
            result['longitude'] = float(first['lon'])
            return result

        except requests.exceptions.Timeout:
            current_app.logger.error("Geocoding API timeout")
            result['success'] = False
            result['error'] = 'Request timed out'
            return result
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError) as e:
            current_app.logger.error(f"Geocoding API exception: {e}")
            result['success'] = False
            result['error'] = str(e)
            return result
