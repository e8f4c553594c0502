"""Parsing of compass-style coordinates such as ``39.20016° N, 84.26138° W``."""

import re

from food_reviews.errors import CoordinateFormatError

COORDINATES_PATTERN = re.compile(
    r'^\s*(\d+(?:\.\d+)?)\s*°\s*([NS])\s*,\s*(\d+(?:\.\d+)?)\s*°\s*([EW])\s*$',
    re.IGNORECASE,
)


def parse_coordinates(text):
    """Return ``(latitude, longitude)``; south and west are negative.

    Raises CoordinateFormatError when the text does not match the pattern or
    the degrees are out of range.
    """
    match = COORDINATES_PATTERN.match(text or '')
    if not match:
        raise CoordinateFormatError(text)

    latitude = float(match.group(1))
    longitude = float(match.group(3))
    if latitude > 90 or longitude > 180:
        raise CoordinateFormatError(text)

    if match.group(2).upper() == 'S':
        latitude = -latitude
    if match.group(4).upper() == 'W':
        longitude = -longitude
    return latitude, longitude


def format_coordinates(latitude, longitude):
    """Inverse of parse_coordinates, used to prefill the edit form."""
    lat_dir = 'S' if latitude < 0 else 'N'
    lon_dir = 'W' if longitude < 0 else 'E'
    return f'{abs(latitude):.5f}° {lat_dir}, {abs(longitude):.5f}° {lon_dir}'
