import re
from urllib.parse import urlparse

# Schemes whose URLs must carry a host (WHATWG "special" schemes, minus file)
HOST_REQUIRED_SCHEMES = ("http", "https", "ws", "wss", "ftp")

_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*")


def is_absolute_url(url: str) -> bool:
    """
    True when ``url`` parses as an absolute URL: a scheme followed by either
    a host or an opaque part (``mailto:a@example.com``). Any scheme is
    accepted here; whether Lighthouse can audit it is decided later.

    Surrounding whitespace is ignored and whitespace in the path is allowed,
    as browsers percent-encode it. Whitespace in the host is not.
    """
    url = url.strip()
    if not url:
        return False

    try:
        parsed = urlparse(url)
        # Accessing .port validates the port component
        parsed.port
    except ValueError:
        return False

    if not _SCHEME.fullmatch(parsed.scheme or ""):
        return False
    if any(ch.isspace() for ch in parsed.netloc):
        return False

    scheme = parsed.scheme.lower()
    if scheme in HOST_REQUIRED_SCHEMES:
        return bool(parsed.hostname)
    if scheme == "file":
        return True
    # Non-special schemes only need something after the colon
    return bool(url[len(scheme) + 1:])
