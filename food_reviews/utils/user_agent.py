"""Coarse User-Agent classification for QR scan analytics."""


def parse_user_agent(user_agent):
    """Return ``(operating_system, browser, device_type)``.

    Checks are ordered: iPhone/iPad strings also mention "Mac OS X", and most
    browsers claim to be Safari.
    """
    ua = (user_agent or '').lower()

    if 'windows' in ua:
        operating_system = 'Windows'
    elif 'iphone' in ua:
        operating_system = 'iOS'
    elif 'ipad' in ua:
        operating_system = 'iPadOS'
    elif 'android' in ua:
        operating_system = 'Android'
    elif 'mac os x' in ua or 'macintosh' in ua:
        operating_system = 'macOS'
    elif 'linux' in ua:
        operating_system = 'Linux'
    else:
        operating_system = 'Unknown'

    if 'edg' in ua:
        browser = 'Edge'
    elif 'opr/' in ua or 'opera' in ua:
        browser = 'Opera'
    elif 'chrome' in ua or 'crios' in ua:
        browser = 'Chrome'
    elif 'firefox' in ua or 'fxios' in ua:
        browser = 'Firefox'
    elif 'safari' in ua:
        browser = 'Safari'
    else:
        browser = 'Unknown'

    if 'ipad' in ua or 'tablet' in ua:
        device_type = 'Tablet'
    elif 'mobile' in ua:
        device_type = 'Mobile'
    else:
        device_type = 'Desktop'

    return operating_system, browser, device_type


def client_ip(headers, remote_addr):
    """First address of X-Forwarded-For, else the socket peer."""
    forwarded = headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return remote_addr or 'unknown'
