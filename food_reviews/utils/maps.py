from urllib.parse import quote


def maps_url(address, latitude=None, longitude=None):
    """Google Maps link: exact coordinates when known, else an address search."""
    if latitude is not None and longitude is not None:
        return f'https://www.google.com/maps?q={latitude},{longitude}'
    return f"https://www.google.com/maps/search/?api=1&query={quote(address or '')}"
